"""Evaluation ORM models.

Covers everything used to judge LLM output: versioned prompts, score configs,
annotation queues, datasets with their runs, LLM-as-a-judge eval templates and
job configurations, and the LLM credentials/tool schemas they rely on.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.shared.models import StringIdMixin, TimestampMixin


class AnnotationQueueStatus(str, Enum):
    """Lifecycle of a queued annotation item."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class JobConfigStatus(str, Enum):
    """Whether an eval job configuration is evaluated on new data."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


# ============================================================================
# PROMPTS & SCORE CONFIGS
# ============================================================================


class Prompt(StringIdMixin, TimestampMixin, Base):
    """Versioned prompt template.

    CRITICAL: (project_id, name, version) is unique. Labels such as
    ``production`` / ``latest`` point consumers at a version.
    """

    __tablename__ = "prompts"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    created_by: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255))
    version: Mapped[int] = mapped_column(Integer)
    type: Mapped[str] = mapped_column(String(20), default="text")
    prompt: Mapped[Any] = mapped_column(JSONB)
    config: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict)
    labels: Mapped[list[str]] = mapped_column(ARRAY(String), default=list)
    tags: Mapped[list[str]] = mapped_column(ARRAY(String), default=list)

    __table_args__ = (
        UniqueConstraint("project_id", "name", "version", name="uq_prompt_project_name_version"),
        CheckConstraint("version >= 1", name="ck_prompt_version_positive"),
    )


class ScoreConfig(StringIdMixin, TimestampMixin, Base):
    """Schema for human/API scores of a given name.

    ``categories`` is a list of ``{"label": str, "value": number}`` pairs for
    CATEGORICAL and BOOLEAN configs.
    """

    __tablename__ = "score_configs"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    data_type: Mapped[str] = mapped_column(String(20))
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    min_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    categories: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("id", "project_id", name="uq_score_config_id_project"),
        CheckConstraint(
            "data_type IN ('NUMERIC', 'CATEGORICAL', 'BOOLEAN')", name="ck_score_config_data_type"
        ),
    )


# ============================================================================
# ANNOTATION QUEUES
# ============================================================================


class AnnotationQueue(StringIdMixin, TimestampMixin, Base):
    """Named queue of objects awaiting human annotation."""

    __tablename__ = "annotation_queues"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    score_config_ids: Mapped[list[str]] = mapped_column(ARRAY(String), default=list)

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_annotation_queue_project_name"),
    )


class AnnotationQueueItem(StringIdMixin, TimestampMixin, Base):
    """Trace or observation placed in an annotation queue."""

    __tablename__ = "annotation_queue_items"

    queue_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("annotation_queues.id", ondelete="CASCADE"), index=True
    )
    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    object_id: Mapped[str] = mapped_column(String(255))
    object_type: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20), default=AnnotationQueueStatus.PENDING.value)
    annotator_user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_annotation_queue_items_object", "project_id", "object_id", "object_type"),
    )


# ============================================================================
# DATASETS
# ============================================================================


class Dataset(StringIdMixin, TimestampMixin, Base):
    """Collection of input/expected-output pairs for offline evaluation."""

    __tablename__ = "datasets"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[Any | None] = mapped_column("metadata", JSONB, nullable=True)

    __table_args__ = (UniqueConstraint("project_id", "name", name="uq_dataset_project_name"),)


class DatasetItem(StringIdMixin, TimestampMixin, Base):
    """Single dataset entry, optionally sourced from a trace/observation."""

    __tablename__ = "dataset_items"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    dataset_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("datasets.id", ondelete="CASCADE"), index=True
    )
    status: Mapped[str] = mapped_column(String(20), default="ACTIVE")
    input: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    expected_output: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    metadata_: Mapped[Any | None] = mapped_column("metadata", JSONB, nullable=True)
    source_trace_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source_observation_id: Mapped[str | None] = mapped_column(String(255), nullable=True)


class DatasetRun(StringIdMixin, TimestampMixin, Base):
    """Named experiment run over a dataset."""

    __tablename__ = "dataset_runs"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    dataset_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("datasets.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[Any | None] = mapped_column("metadata", JSONB, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "dataset_id", "project_id", "name", name="uq_dataset_run_dataset_project_name"
        ),
    )


class DatasetRunItem(StringIdMixin, TimestampMixin, Base):
    """Links a dataset item to the trace produced for it in a run."""

    __tablename__ = "dataset_run_items"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    dataset_run_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("dataset_runs.id", ondelete="CASCADE"), index=True
    )
    dataset_item_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("dataset_items.id", ondelete="CASCADE"), index=True
    )
    trace_id: Mapped[str] = mapped_column(String(255))
    observation_id: Mapped[str | None] = mapped_column(String(255), nullable=True)


# ============================================================================
# LLM-AS-A-JUDGE
# ============================================================================


class EvalTemplate(StringIdMixin, TimestampMixin, Base):
    """Versioned evaluator prompt with model settings and output schema."""

    __tablename__ = "eval_templates"

    project_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    version: Mapped[int] = mapped_column(Integer)
    prompt: Mapped[str] = mapped_column(Text)
    provider: Mapped[str | None] = mapped_column(String(255), nullable=True)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    model_params: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    vars: Mapped[list[str]] = mapped_column(ARRAY(String), default=list)
    output_schema: Mapped[dict[str, Any]] = mapped_column(JSONB)

    __table_args__ = (
        UniqueConstraint("project_id", "name", "version", name="uq_eval_template_project_name_version"),
    )


class JobConfiguration(StringIdMixin, TimestampMixin, Base):
    """Rule that runs an eval template against matching traces."""

    __tablename__ = "job_configurations"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    job_type: Mapped[str] = mapped_column(String(20), default="EVAL")
    status: Mapped[str] = mapped_column(String(20), default=JobConfigStatus.ACTIVE.value)
    eval_template_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("eval_templates.id", ondelete="SET NULL"), nullable=True
    )
    score_name: Mapped[str] = mapped_column(String(255))
    filter: Mapped[list[dict[str, Any]]] = mapped_column(JSONB)
    target_object: Mapped[str] = mapped_column(String(50))
    variable_mapping: Mapped[list[dict[str, Any]]] = mapped_column(JSONB)
    sampling: Mapped[Decimal] = mapped_column(Numeric(3, 2))
    delay: Mapped[int] = mapped_column(Integer)

    __table_args__ = (
        CheckConstraint("sampling > 0 AND sampling <= 1", name="ck_job_configuration_sampling"),
        CheckConstraint("delay >= 0", name="ck_job_configuration_delay"),
    )


class LlmApiKey(StringIdMixin, TimestampMixin, Base):
    """Encrypted provider credential used by evals and the playground."""

    __tablename__ = "llm_api_keys"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    provider: Mapped[str] = mapped_column(String(255))
    adapter: Mapped[str] = mapped_column(String(255))
    display_secret_key: Mapped[str] = mapped_column(String(255))
    secret_key: Mapped[str] = mapped_column(Text)
    base_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    __table_args__ = (
        UniqueConstraint("project_id", "provider", name="uq_llm_api_key_project_provider"),
    )


class LlmSchema(StringIdMixin, TimestampMixin, Base):
    """JSON schema of a tool/function callable from the playground."""

    __tablename__ = "llm_schemas"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    schema: Mapped[dict[str, Any]] = mapped_column(JSONB)

    __table_args__ = (UniqueConstraint("project_id", "name", name="uq_llm_schema_project_name"),)
