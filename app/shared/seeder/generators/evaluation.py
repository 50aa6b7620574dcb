"""Score config, annotation queue and prompt generators."""

from __future__ import annotations

import random
from typing import Any

from app.features.evaluation.models import ScoreConfig
from app.features.tracing.models import ScoreDataType
from app.shared.seeder.generators.ids import random_uuid

PRODUCTION_LABELS = ["production", "latest"]

SEED_PROMPTS: list[dict[str, Any]] = [
    {
        "id": "prompt-123",
        "created_by": "user-1",
        "prompt": "Prompt 1 content",
        "name": "Prompt 1",
        "tags": [],
    },
    {
        "id": "prompt-456",
        "created_by": "user-1",
        "prompt": "Prompt 2 content",
        "name": "Prompt 2",
        "tags": [],
    },
    {
        "id": "prompt-789",
        "created_by": "API",
        "prompt": "Prompt 3 content",
        "name": "Prompt 3 by API",
        "tags": [],
    },
    {
        "id": "prompt-abc",
        "created_by": "user-1",
        "prompt": "Prompt 4 content",
        "name": "Prompt 4",
        "tags": ["tag1", "tag2"],
    },
    {
        "id": "folder-customer-prompt-1",
        "created_by": "user-1",
        "prompt": "Folder prompt 1 content",
        "name": "folder/customer/prompt-1",
        "tags": ["tag1", "tag2"],
    },
    {
        "id": "folder-customer-prompt-2",
        "created_by": "user-1",
        "prompt": "Folder prompt 2 content",
        "name": "folder/customer/prompt-2",
        "tags": ["tag1", "tag2"],
    },
    {
        "id": "folder-prompt-1",
        "created_by": "user-1",
        "prompt": "Folder prompt 1 content",
        "name": "folder/prompt-1",
        "tags": ["tag1", "tag2"],
    },
]

VARIABLE_PROMPT_NAME = "Prompt 4 with variable and config"
MANY_VERSIONS_PROMPT_NAME = "Prompt with many versions"
MANY_VERSIONS_COUNT = 20


class ScoreConfigGenerator:
    """Generator for the per-project score configs."""

    def __init__(self, rng: random.Random) -> None:
        """Initialize the score config generator.

        Args:
            rng: Random number generator for reproducibility.
        """
        self.rng = rng

    def generate(self, project_id: str) -> list[dict[str, Any]]:
        """Generate NUMERIC, CATEGORICAL and BOOLEAN configs for a project.

        Args:
            project_id: Owning project.

        Returns:
            ``score_configs`` rows; the first three feed annotation scores.
        """
        return [
            self._row(project_id, "manual-score", ScoreDataType.NUMERIC),
            self._row(
                project_id,
                "Accuracy",
                ScoreDataType.CATEGORICAL,
                categories=[
                    {"label": "Incorrect", "value": 0},
                    {"label": "Partially Correct", "value": 1},
                    {"label": "Correct", "value": 2},
                ],
            ),
            self._row(
                project_id,
                "Toxicity",
                ScoreDataType.BOOLEAN,
                categories=[
                    {"label": "True", "value": 1},
                    {"label": "False", "value": 0},
                ],
                description="Used to indicate if text was harmful or offensive in nature.",
            ),
        ]

    def _row(
        self,
        project_id: str,
        name: str,
        data_type: ScoreDataType,
        categories: list[dict[str, Any]] | None = None,
        description: str | None = None,
    ) -> dict[str, Any]:
        return {
            "id": f"config-{random_uuid(self.rng)}",
            "project_id": project_id,
            "name": name,
            "data_type": data_type.value,
            "categories": categories,
            "description": description,
            "is_archived": False,
        }


def config_descriptor(config: ScoreConfig | dict[str, Any]) -> dict[str, Any]:
    """Reduce a score config (ORM row or generated dict) to what scores need."""
    if isinstance(config, dict):
        return {key: config.get(key) for key in ("id", "name", "data_type", "categories")}
    return {
        "id": config.id,
        "name": config.name,
        "data_type": config.data_type,
        "categories": config.categories,
    }


class QueueGenerator:
    """Generator for the per-project default annotation queue."""

    def __init__(self, rng: random.Random) -> None:
        """Initialize the queue generator.

        Args:
            rng: Random number generator for reproducibility.
        """
        self.rng = rng

    def generate(self, project_id: str, score_config_ids: list[str]) -> dict[str, Any]:
        """Generate the "Default" queue scoring with all given configs."""
        return {
            "id": f"queue-{random_uuid(self.rng)}",
            "project_id": project_id,
            "name": "Default",
            "description": "Default queue",
            "score_config_ids": list(score_config_ids),
        }


class PromptGenerator:
    """Generator for versioned prompts.

    Produces the fixed seed prompts, a three-version prompt with a growing
    config and a prompt with twenty versions where only the last is labelled.
    """

    def __init__(self, rng: random.Random) -> None:
        """Initialize the prompt generator.

        Args:
            rng: Random number generator for reproducibility.
        """
        self.rng = rng

    def generate(self, project_id: str) -> list[dict[str, Any]]:
        """Generate all prompt rows for a project.

        Args:
            project_id: Owning project.

        Returns:
            ``prompts`` rows in a stable order: seed prompts first.
        """
        rows = [
            self._row(
                prompt_id=f"{prompt['id']}{project_id}",
                project_id=project_id,
                created_by=prompt["created_by"],
                name=prompt["name"],
                version=1,
                prompt=prompt["prompt"],
                labels=PRODUCTION_LABELS,
                tags=prompt["tags"],
            )
            for prompt in SEED_PROMPTS
        ]

        config: dict[str, Any] = {}
        variable_versions = [
            ({"temperature": 0.7}, []),
            ({"topP": 0.9}, ["production"]),
            ({"frequencyPenalty": 0.5}, PRODUCTION_LABELS),
        ]
        for version, (config_update, labels) in enumerate(variable_versions, start=1):
            config = {**config, **config_update}
            rows.append(
                self._row(
                    prompt_id=f"prompt-{random_uuid(self.rng)}",
                    project_id=project_id,
                    created_by="user-1",
                    name=VARIABLE_PROMPT_NAME,
                    version=version,
                    prompt=f"Prompt 4 version {version} content with {{{{variable}}}}",
                    labels=labels,
                    config=config,
                )
            )

        for version in range(1, MANY_VERSIONS_COUNT + 1):
            rows.append(
                self._row(
                    prompt_id=f"prompt-{random_uuid(self.rng)}",
                    project_id=project_id,
                    created_by="user-1",
                    name=MANY_VERSIONS_PROMPT_NAME,
                    version=version,
                    prompt=f"{MANY_VERSIONS_PROMPT_NAME} version {version} content",
                    labels=PRODUCTION_LABELS if version == MANY_VERSIONS_COUNT else [],
                )
            )

        return rows

    @staticmethod
    def _row(
        prompt_id: str,
        project_id: str,
        created_by: str,
        name: str,
        version: int,
        prompt: str,
        labels: list[str],
        tags: list[str] | None = None,
        config: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return {
            "id": prompt_id,
            "project_id": project_id,
            "created_by": created_by,
            "name": name,
            "version": version,
            "type": "text",
            "prompt": prompt,
            "config": dict(config or {}),
            "labels": list(labels),
            "tags": list(tags or []),
        }
