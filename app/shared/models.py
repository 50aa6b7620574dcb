"""Shared SQLAlchemy model mixins and column helpers."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column


def generate_id() -> str:
    """Default primary key value for string-keyed tables."""
    return str(uuid.uuid4())


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class StringIdMixin:
    """Mixin providing a string primary key defaulting to a UUID4."""

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=generate_id)
