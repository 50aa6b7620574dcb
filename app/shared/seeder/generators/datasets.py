"""Dataset, dataset item, run and run item generator."""

from __future__ import annotations

import random
from typing import Any

from app.shared.seeder.generators.ids import random_uuid

DATASET_COUNT = 2
CANDIDATE_ITEMS_PER_DATASET = 18
RUNS_PER_DATASET = 5

ITEM_INPUT = [{"role": "user", "content": "How can i create a React component?"}]
ITEM_EXPECTED_OUTPUT = (
    "Creating a React component can be done in two ways: as a functional component "
    "or as a class component. Let's start with a basic example of both."
)

# Run metadata cycles through every JSON shape the UI renders
RUN_METADATA: list[Any] = [None, "string", 100, {"key": "value"}, ["tag1", "tag2"]]


def dataset_name(number: int) -> str:
    """Name of the ``number``-th demo dataset."""
    return f"demo-dataset-{number}"


def dataset_run_name(number: int) -> str:
    """Name of the ``number``-th run of a demo dataset."""
    return f"demo-dataset-run-{number}"


class DatasetGenerator:
    """Generator for demo datasets linked to generated observations.

    Datasets and runs are unique by name, so the seeder inserts them first,
    reads back the stored ids and only then generates items and run items.
    """

    def __init__(self, rng: random.Random) -> None:
        """Initialize the dataset generator.

        Args:
            rng: Random number generator for reproducibility.
        """
        self.rng = rng

    def generate_dataset(self, project_id: str, number: int) -> dict[str, Any]:
        """Generate a ``datasets`` row; the first one carries description and metadata."""
        first = number == 0
        return {
            "id": random_uuid(self.rng),
            "project_id": project_id,
            "name": dataset_name(number),
            "description": "Dataset test description" if first else None,
            "metadata": {"key": "value"} if first else None,
        }

    def generate_items(
        self,
        project_id: str,
        dataset_id: str,
        observations: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Generate dataset items sourced from random observations.

        Each of the candidate items is kept with probability 0.7.

        Args:
            project_id: Owning project.
            dataset_id: Stored id of the dataset.
            observations: Observations of the project to source items from.

        Returns:
            ``dataset_items`` rows.
        """
        items: list[dict[str, Any]] = []
        if not observations:
            return items

        for _ in range(CANDIDATE_ITEMS_PER_DATASET):
            if self.rng.random() <= 0.3:
                continue
            source = self.rng.choice(observations)
            items.append(
                {
                    "id": random_uuid(self.rng),
                    "project_id": project_id,
                    "dataset_id": dataset_id,
                    "source_trace_id": source["trace_id"],
                    "source_observation_id": source["id"] if self.rng.random() > 0.5 else None,
                    "input": ITEM_INPUT if self.rng.random() > 0.3 else None,
                    "expected_output": (
                        ITEM_EXPECTED_OUTPUT if self.rng.random() > 0.3 else None
                    ),
                    "metadata": {"key": "value"} if self.rng.random() > 0.5 else None,
                }
            )
        return items

    def generate_runs(self, project_id: str, dataset_id: str) -> list[dict[str, Any]]:
        """Generate the runs of a dataset with cycling metadata shapes."""
        return [
            {
                "id": random_uuid(self.rng),
                "project_id": project_id,
                "dataset_id": dataset_id,
                "name": dataset_run_name(number),
                "description": "Dataset run description" if self.rng.random() > 0.5 else "",
                "metadata": RUN_METADATA[number % len(RUN_METADATA)],
            }
            for number in range(RUNS_PER_DATASET)
        ]

    def generate_run_items(
        self,
        project_id: str,
        dataset_run_id: str,
        dataset_item_ids: list[str],
        observations: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Link every dataset item to a random observation of the same project."""
        if not observations:
            return []

        run_items: list[dict[str, Any]] = []
        for item_id in dataset_item_ids:
            observation = self.rng.choice(observations)
            run_items.append(
                {
                    "id": random_uuid(self.rng),
                    "project_id": project_id,
                    "dataset_run_id": dataset_run_id,
                    "dataset_item_id": item_id,
                    "trace_id": observation["trace_id"],
                    "observation_id": observation["id"] if self.rng.random() > 0.5 else None,
                }
            )
        return run_items
