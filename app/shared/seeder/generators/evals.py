"""LLM-as-a-judge template, job configuration and tool schema generator."""

from __future__ import annotations

import random
from typing import Any

from app.features.evaluation.models import JobConfigStatus
from app.shared.seeder.generators.ids import random_uuid

TOXICITY_TEMPLATE_NAME = "toxicity-template"
TOXICITY_JOB_ID = "toxicity-job"

LLM_SCHEMAS: list[dict[str, Any]] = [
    {
        "name": "get_weather",
        "description": "Fetches weather in Celsius for a given location",
        "schema": {
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": "The city and state, e.g. San Francisco, CA",
                },
                "unit": {"type": "string", "enum": ["celsius", "fahrenheit"]},
            },
            "required": ["location", "unit"],
        },
    },
    {
        "name": "calculator",
        "description": "Performs basic arithmetic calculations",
        "schema": {
            "type": "object",
            "properties": {
                "expression": {
                    "type": "string",
                    "description": "The mathematical expression to evaluate, e.g. '2 + 2'",
                },
            },
            "required": ["expression"],
        },
    },
]


class EvalGenerator:
    """Generator for the toxicity evaluator and playground tool schemas."""

    def __init__(self, rng: random.Random) -> None:
        """Initialize the eval generator.

        Args:
            rng: Random number generator for reproducibility.
        """
        self.rng = rng

    def generate_template(self, project_id: str) -> dict[str, Any]:
        """Generate the ``toxicity-template`` v1 eval template."""
        return {
            "id": random_uuid(self.rng),
            "project_id": project_id,
            "name": TOXICITY_TEMPLATE_NAME,
            "version": 1,
            "prompt": "Please evaluate the toxicity of the following text {{input}} {{output}}",
            "model": "gpt-3.5-turbo",
            "vars": ["input", "output"],
            "provider": "openai",
            "output_schema": {
                "score": "provide a score between 0 and 1",
                "reasoning": "one sentence reasoning for the score",
            },
            "model_params": {"temperature": 0.7, "outputTokenLimit": 100, "topP": 0.9},
        }

    def generate_job_configuration(self, project_id: str, template_id: str) -> dict[str, Any]:
        """Generate the job evaluating traces of users matching ``user``."""
        return {
            "id": TOXICITY_JOB_ID,
            "project_id": project_id,
            "eval_template_id": template_id,
            "job_type": "EVAL",
            "status": JobConfigStatus.ACTIVE.value,
            "score_name": "toxicity",
            "filter": [
                {"type": "string", "value": "user", "column": "User ID", "operator": "contains"}
            ],
            "variable_mapping": [
                {
                    "langfuseObject": "trace",
                    "selectedColumnId": "input",
                    "templateVariable": "input",
                },
                {
                    "langfuseObject": "trace",
                    "selectedColumnId": "metadata",
                    "templateVariable": "output",
                },
            ],
            "target_object": "trace",
            "sampling": 1,
            "delay": 5_000,
        }

    def generate_llm_schemas(self, project_id: str) -> list[dict[str, Any]]:
        """Generate the ``get_weather`` and ``calculator`` tool schemas."""
        return [
            {"id": random_uuid(self.rng), "project_id": project_id, **schema}
            for schema in LLM_SCHEMAS
        ]
