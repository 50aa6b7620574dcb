"""Evaluation data: prompts, score configs, annotation queues, datasets, evals."""

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

__all__ = [
    "AnnotationQueue",
    "AnnotationQueueItem",
    "Dataset",
    "DatasetItem",
    "DatasetRun",
    "DatasetRunItem",
    "EvalTemplate",
    "JobConfiguration",
    "LlmApiKey",
    "LlmSchema",
    "Prompt",
    "ScoreConfig",
]
