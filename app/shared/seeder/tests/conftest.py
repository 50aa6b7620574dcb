"""Pytest fixtures for seeder tests."""

import random
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.shared.seeder.config import SeedEnvironment, SeederConfig

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def rng():
    """Create a seeded random number generator."""
    return random.Random(42)


@pytest.fixture
def examples_config():
    """Create a small examples-environment config with a fixed reference time."""
    return SeederConfig(
        environment=SeedEnvironment.EXAMPLES,
        seed=42,
        trace_volume=30,
        chunk_size=100,
        now=FIXED_NOW,
    )


@pytest.fixture
def score_configs():
    """Score config descriptors for one project (numeric, categorical, boolean)."""
    return [
        {"id": "config-numeric", "name": "manual-score", "data_type": "NUMERIC", "categories": None},
        {
            "id": "config-categorical",
            "name": "Accuracy",
            "data_type": "CATEGORICAL",
            "categories": [
                {"label": "Incorrect", "value": 0},
                {"label": "Partially Correct", "value": 1},
                {"label": "Correct", "value": 2},
            ],
        },
        {
            "id": "config-boolean",
            "name": "Toxicity",
            "data_type": "BOOLEAN",
            "categories": [{"label": "True", "value": 1}, {"label": "False", "value": 0}],
        },
    ]


@pytest.fixture
def mock_db():
    """Create mock async session whose statements affect every row."""
    db = AsyncMock()
    db.add = MagicMock()
    cursor = MagicMock()
    cursor.rowcount = -1
    db.execute.return_value = cursor
    return db
