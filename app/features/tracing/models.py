"""Observability ORM models: traces, observations, scores, sessions, comments.

Grain:
- Trace: one request through an LLM application.
- Observation: a SPAN, GENERATION or EVENT inside exactly one trace; may point
  at a parent observation of the same trace.
- Score: evaluation attached to a trace and optionally one of its observations.

Trace/observation references on observations, scores, comments and queue items
are plain indexed columns (no foreign keys): these rows are written in bulk and
in any order by ingestion and seeding.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.shared.models import StringIdMixin, TimestampMixin


class ObservationType(str, Enum):
    """Observation variants."""

    SPAN = "SPAN"
    GENERATION = "GENERATION"
    EVENT = "EVENT"


class ScoreDataType(str, Enum):
    """Score value types.

    NUMERIC scores populate ``value``; CATEGORICAL and BOOLEAN scores populate
    ``string_value`` (and ``value`` too when resolved from a score config).
    """

    NUMERIC = "NUMERIC"
    CATEGORICAL = "CATEGORICAL"
    BOOLEAN = "BOOLEAN"


class ScoreSource(str, Enum):
    """Where a score came from."""

    API = "API"
    ANNOTATION = "ANNOTATION"
    EVAL = "EVAL"


class CommentObjectType(str, Enum):
    """Objects that can be commented on or queued for annotation."""

    TRACE = "TRACE"
    OBSERVATION = "OBSERVATION"
    SESSION = "SESSION"
    PROMPT = "PROMPT"


class ModelUsageUnit(str, Enum):
    """Unit of generation usage counts."""

    TOKENS = "TOKENS"
    CHARACTERS = "CHARACTERS"
    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    IMAGES = "IMAGES"
    REQUESTS = "REQUESTS"


class TraceSession(TimestampMixin, Base):
    """Groups traces of one user conversation. Keyed by (id, project_id)."""

    __tablename__ = "trace_sessions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    bookmarked: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    public: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")


class Trace(StringIdMixin, TimestampMixin, Base):
    """Trace of a single request through an LLM application.

    Attributes:
        timestamp: When the traced request started.
        session_id: Optional session (same project).
        metadata_: Free-form JSON metadata (column ``metadata``).
        tags: Flat list of tags used for filtering.
    """

    __tablename__ = "traces"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timestamp: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), index=True)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    session_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    release: Mapped[str | None] = mapped_column(String(255), nullable=True)
    version: Mapped[str | None] = mapped_column(String(255), nullable=True)
    environment: Mapped[str] = mapped_column(String(255), default="default")
    metadata_: Mapped[Any | None] = mapped_column("metadata", JSONB, nullable=True)
    tags: Mapped[list[str]] = mapped_column(ARRAY(String), default=list)
    input: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    output: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    bookmarked: Mapped[bool] = mapped_column(Boolean, default=False)
    public: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (Index("ix_traces_project_timestamp", "project_id", "timestamp"),)


class Observation(StringIdMixin, TimestampMixin, Base):
    """Span, generation or event within a trace.

    Generations additionally carry model, usage and prompt linkage.
    """

    __tablename__ = "observations"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    trace_id: Mapped[str] = mapped_column(String(255), index=True)
    type: Mapped[str] = mapped_column(String(20))
    parent_observation_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_time: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True))
    end_time: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completion_start_time: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    level: Mapped[str] = mapped_column(String(20), default="DEFAULT")
    metadata_: Mapped[Any | None] = mapped_column("metadata", JSONB, nullable=True)
    input: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    output: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    internal_model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    model_parameters: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    prompt_tokens: Mapped[int] = mapped_column(Integer, default=0)
    completion_tokens: Mapped[int] = mapped_column(Integer, default=0)
    total_tokens: Mapped[int] = mapped_column(Integer, default=0)
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    prompt_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        CheckConstraint("type IN ('SPAN', 'GENERATION', 'EVENT')", name="ck_observation_type"),
        Index("ix_observations_project_trace", "project_id", "trace_id"),
    )


class Score(StringIdMixin, TimestampMixin, Base):
    """Evaluation score on a trace (and optionally one of its observations)."""

    __tablename__ = "scores"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    trace_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    observation_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    value: Mapped[float | None] = mapped_column(Float, nullable=True)
    string_value: Mapped[str | None] = mapped_column(String(255), nullable=True)
    data_type: Mapped[str] = mapped_column(String(20), default=ScoreDataType.NUMERIC.value)
    source: Mapped[str] = mapped_column(String(20))
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    config_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timestamp: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True))
    metadata_: Mapped[Any | None] = mapped_column("metadata", JSONB, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "data_type IN ('NUMERIC', 'CATEGORICAL', 'BOOLEAN')", name="ck_score_data_type"
        ),
        CheckConstraint("source IN ('API', 'ANNOTATION', 'EVAL')", name="ck_score_source"),
    )


class Comment(StringIdMixin, TimestampMixin, Base):
    """Free-text comment on a trace, observation, session or prompt."""

    __tablename__ = "comments"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    object_id: Mapped[str] = mapped_column(String(255))
    object_type: Mapped[str] = mapped_column(String(20))
    content: Mapped[str] = mapped_column(Text)
    author_user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_comments_project_object", "project_id", "object_type", "object_id"),
    )
