"""Chunked bulk inserts for generated records."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger

logger = get_logger(__name__)

# asyncpg rejects statements with more bind parameters than this
MAX_BIND_PARAMS = 32_767


def _table(model: Any) -> Table:
    return model.__table__ if hasattr(model, "__table__") else model


def _normalize(records: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Give every record the same key set (missing keys become None)."""
    keys: dict[str, None] = {}
    for record in records:
        keys.update(dict.fromkeys(record))
    return [{key: record.get(key) for key in keys} for record in records]


class BulkUploader:
    """Persists record collections in sequential ``INSERT ... ON CONFLICT`` chunks.

    Records are plain dicts keyed by column name (``metadata``, not the ORM
    attribute ``metadata_``). Progress is logged on the first chunk, roughly
    every tenth of the chunks and on the last one.
    """

    def __init__(self, db: AsyncSession, chunk_size: int = 10_000) -> None:
        """Initialize the uploader.

        Args:
            db: Async database session.
            chunk_size: Records per chunk.

        Raises:
            ValueError: If chunk_size is not positive.
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.db = db
        self.chunk_size = chunk_size

    async def upload(
        self,
        label: str,
        model: Any,
        records: Sequence[dict[str, Any]],
        conflict_target: list[str] | None = None,
    ) -> int:
        """Insert records, skipping rows that conflict with existing ones.

        Args:
            label: Entity name used in progress logs.
            model: ORM model class or Table.
            records: Rows keyed by column name.
            conflict_target: Columns of the unique constraint to check; any
                constraint when None.

        Returns:
            Number of rows inserted.
        """

        def build(table: Table, rows: list[dict[str, Any]]) -> Any:
            return (
                pg_insert(table)
                .values(rows)
                .on_conflict_do_nothing(index_elements=conflict_target)
            )

        return await self._run(label, model, records, build)

    async def upsert(
        self,
        label: str,
        model: Any,
        records: Sequence[dict[str, Any]],
        conflict_target: list[str],
        update_columns: list[str],
    ) -> int:
        """Insert records, updating ``update_columns`` of conflicting rows.

        Args:
            label: Entity name used in progress logs.
            model: ORM model class or Table.
            records: Rows keyed by column name.
            conflict_target: Columns of the unique constraint.
            update_columns: Columns overwritten from the incoming row.

        Returns:
            Number of rows inserted or updated.
        """

        def build(table: Table, rows: list[dict[str, Any]]) -> Any:
            stmt = pg_insert(table).values(rows)
            if not update_columns:
                return stmt.on_conflict_do_nothing(index_elements=conflict_target)
            return stmt.on_conflict_do_update(
                index_elements=conflict_target,
                set_={column: stmt.excluded[column] for column in update_columns},
            )

        return await self._run(label, model, records, build)

    async def _run(
        self,
        label: str,
        model: Any,
        records: Sequence[dict[str, Any]],
        build: Any,
    ) -> int:
        if not records:
            return 0

        table = _table(model)
        rows = _normalize(records)
        # one chunk may need several statements to stay under the bind limit
        rows_per_statement = max(1, min(self.chunk_size, MAX_BIND_PARAMS // len(rows[0])))

        chunks = [rows[i : i + self.chunk_size] for i in range(0, len(rows), self.chunk_size)]
        log_every = math.ceil(len(chunks) / 10)
        total = 0

        for index, chunk in enumerate(chunks):
            for start in range(0, len(chunk), rows_per_statement):
                batch = chunk[start : start + rows_per_statement]
                cursor_result = await self.db.execute(build(table, batch))
                # rowcount is available on CursorResult but not in Result type stubs
                row_count = getattr(cursor_result, "rowcount", None)
                total += row_count if row_count is not None and row_count >= 0 else len(batch)

            if index % log_every == 0 or index == len(chunks) - 1:
                logger.info(
                    "seeder.upload.progress",
                    entity=label,
                    percent=round((index + 1) / len(chunks) * 100),
                    chunk=index + 1,
                    chunks=len(chunks),
                )

        logger.info("seeder.upload.completed", entity=label, records=len(rows), affected=total)
        return total
