"""Data generators for seeded organizations' observability data."""

from app.shared.seeder.generators.dashboards import DashboardGenerator
from app.shared.seeder.generators.datasets import DatasetGenerator
from app.shared.seeder.generators.evals import EvalGenerator
from app.shared.seeder.generators.evaluation import (
    SEED_PROMPTS,
    PromptGenerator,
    QueueGenerator,
    ScoreConfigGenerator,
    config_descriptor,
)
from app.shared.seeder.generators.ids import random_uuid
from app.shared.seeder.generators.traces import GeneratedTraces, TraceGenerator

__all__ = [
    "SEED_PROMPTS",
    "DashboardGenerator",
    "DatasetGenerator",
    "EvalGenerator",
    "GeneratedTraces",
    "PromptGenerator",
    "QueueGenerator",
    "ScoreConfigGenerator",
    "TraceGenerator",
    "config_descriptor",
    "random_uuid",
]
