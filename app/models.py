"""Import every ORM model so ``Base.metadata`` describes the full schema.

Used by Alembic autogeneration and by test fixtures calling ``create_all``.
"""

from app.core.database import Base
from app.features.dashboards.models import Dashboard, DashboardWidget
from app.features.evaluation.models import (
    AnnotationQueue,
    AnnotationQueueItem,
    Dataset,
    DatasetItem,
    DatasetRun,
    DatasetRunItem,
    EvalTemplate,
    JobConfiguration,
    LlmApiKey,
    LlmSchema,
    Prompt,
    ScoreConfig,
)
from app.features.iam.models import (
    ApiKey,
    Organization,
    OrganizationMembership,
    Project,
    ProjectMembership,
    User,
)
from app.features.tracing.models import Comment, Observation, Score, Trace, TraceSession

__all__ = [
    "AnnotationQueue",
    "AnnotationQueueItem",
    "ApiKey",
    "Base",
    "Comment",
    "Dashboard",
    "DashboardWidget",
    "Dataset",
    "DatasetItem",
    "DatasetRun",
    "DatasetRunItem",
    "EvalTemplate",
    "JobConfiguration",
    "LlmApiKey",
    "LlmSchema",
    "Observation",
    "Organization",
    "OrganizationMembership",
    "Project",
    "ProjectMembership",
    "Prompt",
    "Score",
    "ScoreConfig",
    "Trace",
    "TraceSession",
    "User",
]
