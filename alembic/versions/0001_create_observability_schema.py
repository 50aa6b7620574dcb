"""create_observability_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE_CHECK = "role IN ('OWNER', 'ADMIN', 'MEMBER', 'VIEWER', 'NONE')"
CHART_TYPE_CHECK = (
    "chart_type IN ('LINE_TIME_SERIES', 'BAR_TIME_SERIES', 'HORIZONTAL_BAR', "
    "'VERTICAL_BAR', 'PIE', 'NUMBER', 'HISTOGRAM', 'PIVOT_TABLE')"
)

# Single-column indexes from ``index=True`` columns
COLUMN_INDEXES: list[tuple[str, str]] = [
    ("projects", "org_id"),
    ("organization_memberships", "org_id"),
    ("organization_memberships", "user_id"),
    ("project_memberships", "org_membership_id"),
    ("api_keys", "project_id"),
    ("api_keys", "org_id"),
    ("traces", "project_id"),
    ("traces", "timestamp"),
    ("traces", "user_id"),
    ("traces", "session_id"),
    ("observations", "project_id"),
    ("observations", "trace_id"),
    ("scores", "project_id"),
    ("scores", "trace_id"),
    ("scores", "observation_id"),
    ("comments", "project_id"),
    ("prompts", "project_id"),
    ("score_configs", "project_id"),
    ("annotation_queues", "project_id"),
    ("annotation_queue_items", "queue_id"),
    ("annotation_queue_items", "project_id"),
    ("datasets", "project_id"),
    ("dataset_items", "project_id"),
    ("dataset_items", "dataset_id"),
    ("dataset_runs", "project_id"),
    ("dataset_runs", "dataset_id"),
    ("dataset_run_items", "project_id"),
    ("dataset_run_items", "dataset_run_id"),
    ("dataset_run_items", "dataset_item_id"),
    ("eval_templates", "project_id"),
    ("job_configurations", "project_id"),
    ("llm_api_keys", "project_id"),
    ("llm_schemas", "project_id"),
    ("dashboard_widgets", "project_id"),
    ("dashboards", "project_id"),
]

COMPOSITE_INDEXES: list[tuple[str, str, list[str]]] = [
    ("ix_traces_project_timestamp", "traces", ["project_id", "timestamp"]),
    ("ix_observations_project_trace", "observations", ["project_id", "trace_id"]),
    ("ix_comments_project_object", "comments", ["project_id", "object_type", "object_id"]),
    (
        "ix_annotation_queue_items_object",
        "annotation_queue_items",
        ["project_id", "object_id", "object_type"],
    ),
]


def _timestamps() -> list[sa.Column]:
    """created_at / updated_at (from TimestampMixin)."""
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _id() -> sa.Column:
    return sa.Column("id", sa.String(length=255), nullable=False)


def _project_fk(nullable: bool = False) -> list:
    return [
        sa.Column("project_id", sa.String(length=255), nullable=nullable),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
    ]


def _jsonb() -> postgresql.JSONB:
    return postgresql.JSONB(astext_type=sa.Text())


def upgrade() -> None:
    """Apply migration - create tenant, tracing and evaluation tables."""
    # =========================================================================
    # Tenants, users and API keys
    # =========================================================================
    op.create_table(
        "organizations",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("cloud_config", _jsonb(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "projects",
        _id(),
        sa.Column("org_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
    )
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "organization_memberships",
        _id(),
        sa.Column("org_id", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("org_id", "user_id", name="uq_org_membership_org_user"),
        sa.CheckConstraint(ROLE_CHECK, name="ck_org_membership_role"),
    )
    op.create_table(
        "project_memberships",
        sa.Column("project_id", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("org_membership_id", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("project_id", "user_id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["org_membership_id"], ["organization_memberships.id"], ondelete="CASCADE"
        ),
        sa.CheckConstraint(ROLE_CHECK, name="ck_project_membership_role"),
    )
    op.create_table(
        "api_keys",
        _id(),
        sa.Column("public_key", sa.String(length=255), nullable=False),
        sa.Column("hashed_secret_key", sa.String(length=255), nullable=False),
        sa.Column("fast_hashed_secret_key", sa.String(length=255), nullable=True),
        sa.Column("display_secret_key", sa.String(length=255), nullable=False),
        sa.Column("note", sa.String(length=255), nullable=True),
        sa.Column("scope", sa.String(length=20), nullable=False),
        sa.Column("project_id", sa.String(length=255), nullable=True),
        sa.Column("org_id", sa.String(length=255), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("hashed_secret_key"),
        sa.UniqueConstraint("fast_hashed_secret_key"),
        sa.CheckConstraint("scope IN ('PROJECT', 'ORGANIZATION')", name="ck_api_key_scope"),
        sa.CheckConstraint(
            "(scope = 'PROJECT' AND project_id IS NOT NULL) "
            "OR (scope = 'ORGANIZATION' AND org_id IS NOT NULL)",
            name="ck_api_key_scope_target",
        ),
    )
    op.create_index(op.f("ix_api_keys_public_key"), "api_keys", ["public_key"], unique=True)

    # =========================================================================
    # Tracing
    # =========================================================================
    op.create_table(
        "trace_sessions",
        sa.Column("id", sa.String(length=255), nullable=False),
        *_project_fk(),
        sa.Column("bookmarked", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("public", sa.Boolean(), server_default="false", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", "project_id"),
    )
    op.create_table(
        "traces",
        _id(),
        *_project_fk(),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("session_id", sa.String(length=255), nullable=True),
        sa.Column("release", sa.String(length=255), nullable=True),
        sa.Column("version", sa.String(length=255), nullable=True),
        sa.Column("environment", sa.String(length=255), nullable=False),
        sa.Column("metadata", _jsonb(), nullable=True),
        sa.Column("tags", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("input", _jsonb(), nullable=True),
        sa.Column("output", _jsonb(), nullable=True),
        sa.Column("bookmarked", sa.Boolean(), nullable=False),
        sa.Column("public", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "observations",
        _id(),
        *_project_fk(),
        sa.Column("trace_id", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("parent_observation_id", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completion_start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("level", sa.String(length=20), nullable=False),
        sa.Column("metadata", _jsonb(), nullable=True),
        sa.Column("input", _jsonb(), nullable=True),
        sa.Column("output", _jsonb(), nullable=True),
        sa.Column("model", sa.String(length=255), nullable=True),
        sa.Column("internal_model", sa.String(length=255), nullable=True),
        sa.Column("model_parameters", _jsonb(), nullable=True),
        sa.Column("prompt_tokens", sa.Integer(), nullable=False),
        sa.Column("completion_tokens", sa.Integer(), nullable=False),
        sa.Column("total_tokens", sa.Integer(), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=True),
        sa.Column("prompt_id", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("type IN ('SPAN', 'GENERATION', 'EVENT')", name="ck_observation_type"),
    )
    op.create_table(
        "scores",
        _id(),
        *_project_fk(),
        sa.Column("trace_id", sa.String(length=255), nullable=True),
        sa.Column("observation_id", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Float(), nullable=True),
        sa.Column("string_value", sa.String(length=255), nullable=True),
        sa.Column("data_type", sa.String(length=20), nullable=False),
        sa.Column("source", sa.String(length=20), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("author_user_id", sa.String(length=255), nullable=True),
        sa.Column("config_id", sa.String(length=255), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("metadata", _jsonb(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "data_type IN ('NUMERIC', 'CATEGORICAL', 'BOOLEAN')", name="ck_score_data_type"
        ),
        sa.CheckConstraint("source IN ('API', 'ANNOTATION', 'EVAL')", name="ck_score_source"),
    )
    op.create_table(
        "comments",
        _id(),
        *_project_fk(),
        sa.Column("object_id", sa.String(length=255), nullable=False),
        sa.Column("object_type", sa.String(length=20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_user_id", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # =========================================================================
    # Prompts, score configs and annotation queues
    # =========================================================================
    op.create_table(
        "prompts",
        _id(),
        *_project_fk(),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("prompt", _jsonb(), nullable=False),
        sa.Column("config", _jsonb(), nullable=False),
        sa.Column("labels", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("tags", postgresql.ARRAY(sa.String()), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "project_id", "name", "version", name="uq_prompt_project_name_version"
        ),
        sa.CheckConstraint("version >= 1", name="ck_prompt_version_positive"),
    )
    op.create_table(
        "score_configs",
        _id(),
        *_project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("data_type", sa.String(length=20), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("min_value", sa.Float(), nullable=True),
        sa.Column("max_value", sa.Float(), nullable=True),
        sa.Column("categories", _jsonb(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id", "project_id", name="uq_score_config_id_project"),
        sa.CheckConstraint(
            "data_type IN ('NUMERIC', 'CATEGORICAL', 'BOOLEAN')",
            name="ck_score_config_data_type",
        ),
    )
    op.create_table(
        "annotation_queues",
        _id(),
        *_project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("score_config_ids", postgresql.ARRAY(sa.String()), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "name", name="uq_annotation_queue_project_name"),
    )
    op.create_table(
        "annotation_queue_items",
        _id(),
        sa.Column("queue_id", sa.String(length=255), nullable=False),
        *_project_fk(),
        sa.Column("object_id", sa.String(length=255), nullable=False),
        sa.Column("object_type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("annotator_user_id", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["queue_id"], ["annotation_queues.id"], ondelete="CASCADE"),
    )

    # =========================================================================
    # Datasets
    # =========================================================================
    op.create_table(
        "datasets",
        _id(),
        *_project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("metadata", _jsonb(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "name", name="uq_dataset_project_name"),
    )
    op.create_table(
        "dataset_items",
        _id(),
        *_project_fk(),
        sa.Column("dataset_id", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("input", _jsonb(), nullable=True),
        sa.Column("expected_output", _jsonb(), nullable=True),
        sa.Column("metadata", _jsonb(), nullable=True),
        sa.Column("source_trace_id", sa.String(length=255), nullable=True),
        sa.Column("source_observation_id", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["dataset_id"], ["datasets.id"], ondelete="CASCADE"),
    )
    op.create_table(
        "dataset_runs",
        _id(),
        *_project_fk(),
        sa.Column("dataset_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("metadata", _jsonb(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["dataset_id"], ["datasets.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "dataset_id", "project_id", "name", name="uq_dataset_run_dataset_project_name"
        ),
    )
    op.create_table(
        "dataset_run_items",
        _id(),
        *_project_fk(),
        sa.Column("dataset_run_id", sa.String(length=255), nullable=False),
        sa.Column("dataset_item_id", sa.String(length=255), nullable=False),
        sa.Column("trace_id", sa.String(length=255), nullable=False),
        sa.Column("observation_id", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["dataset_run_id"], ["dataset_runs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["dataset_item_id"], ["dataset_items.id"], ondelete="CASCADE"),
    )

    # =========================================================================
    # LLM-as-a-judge, credentials and tool schemas
    # =========================================================================
    op.create_table(
        "eval_templates",
        _id(),
        *_project_fk(nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("provider", sa.String(length=255), nullable=True),
        sa.Column("model", sa.String(length=255), nullable=True),
        sa.Column("model_params", _jsonb(), nullable=True),
        sa.Column("vars", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("output_schema", _jsonb(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "project_id", "name", "version", name="uq_eval_template_project_name_version"
        ),
    )
    op.create_table(
        "job_configurations",
        _id(),
        *_project_fk(),
        sa.Column("job_type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("eval_template_id", sa.String(length=255), nullable=True),
        sa.Column("score_name", sa.String(length=255), nullable=False),
        sa.Column("filter", _jsonb(), nullable=False),
        sa.Column("target_object", sa.String(length=50), nullable=False),
        sa.Column("variable_mapping", _jsonb(), nullable=False),
        sa.Column("sampling", sa.Numeric(precision=3, scale=2), nullable=False),
        sa.Column("delay", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["eval_template_id"], ["eval_templates.id"], ondelete="SET NULL"
        ),
        sa.CheckConstraint(
            "sampling > 0 AND sampling <= 1", name="ck_job_configuration_sampling"
        ),
        sa.CheckConstraint("delay >= 0", name="ck_job_configuration_delay"),
    )
    op.create_table(
        "llm_api_keys",
        _id(),
        *_project_fk(),
        sa.Column("provider", sa.String(length=255), nullable=False),
        sa.Column("adapter", sa.String(length=255), nullable=False),
        sa.Column("display_secret_key", sa.String(length=255), nullable=False),
        sa.Column("secret_key", sa.Text(), nullable=False),
        sa.Column("base_url", sa.String(length=2048), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "provider", name="uq_llm_api_key_project_provider"),
    )
    op.create_table(
        "llm_schemas",
        _id(),
        *_project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("schema", _jsonb(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "name", name="uq_llm_schema_project_name"),
    )

    # =========================================================================
    # Dashboards
    # =========================================================================
    op.create_table(
        "dashboard_widgets",
        _id(),
        *_project_fk(nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("view", sa.String(length=50), nullable=False),
        sa.Column("dimensions", _jsonb(), nullable=False),
        sa.Column("metrics", _jsonb(), nullable=False),
        sa.Column("filters", _jsonb(), nullable=False),
        sa.Column("chart_type", sa.String(length=50), nullable=False),
        sa.Column("chart_config", _jsonb(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(CHART_TYPE_CHECK, name="ck_dashboard_widget_chart_type"),
    )
    op.create_table(
        "dashboards",
        _id(),
        *_project_fk(nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("definition", _jsonb(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    for table, column in COLUMN_INDEXES:
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=False)

    for name, table, columns in COMPOSITE_INDEXES:
        op.create_index(name, table, columns, unique=False)


def downgrade() -> None:
    """Revert migration - drop all tables in reverse dependency order."""
    for name, table, _columns in reversed(COMPOSITE_INDEXES):
        op.drop_index(name, table_name=table)

    for table, column in reversed(COLUMN_INDEXES):
        op.drop_index(op.f(f"ix_{table}_{column}"), table_name=table)

    op.drop_index(op.f("ix_api_keys_public_key"), table_name="api_keys")
    op.drop_index(op.f("ix_users_email"), table_name="users")

    for table in (
        "dashboards",
        "dashboard_widgets",
        "llm_schemas",
        "llm_api_keys",
        "job_configurations",
        "eval_templates",
        "dataset_run_items",
        "dataset_runs",
        "dataset_items",
        "datasets",
        "annotation_queue_items",
        "annotation_queues",
        "score_configs",
        "prompts",
        "comments",
        "scores",
        "observations",
        "traces",
        "trace_sessions",
        "api_keys",
        "project_memberships",
        "organization_memberships",
        "users",
        "projects",
        "organizations",
    ):
        op.drop_table(table)
