"""Observability data: traces, observations, scores, sessions and comments."""

from app.features.tracing.models import (
    Comment,
    CommentObjectType,
    ModelUsageUnit,
    Observation,
    ObservationType,
    Score,
    ScoreDataType,
    ScoreSource,
    Trace,
    TraceSession,
)

__all__ = [
    "Comment",
    "CommentObjectType",
    "ModelUsageUnit",
    "Observation",
    "ObservationType",
    "Score",
    "ScoreDataType",
    "ScoreSource",
    "Trace",
    "TraceSession",
]
