"""Seeder module for provisioning local and demo environments.

Provides:
- Baseline organizations, projects, users and API keys
- Synthetic observability data (traces, observations, scores, sessions, comments)
- Evaluation objects (prompts, score configs, annotation queues, datasets, evals)
- Chunked bulk uploads with progress logging
"""

from app.shared.seeder.config import SeedEnvironment, SeederConfig
from app.shared.seeder.core import DataSeeder, SeederResult

__all__ = [
    "DataSeeder",
    "SeedEnvironment",
    "SeederConfig",
    "SeederResult",
]
