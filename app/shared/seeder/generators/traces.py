"""Trace generator with nested observations, scores, comments and queue items.

Every trace fans out into 1-10 spans, each span into 1-2 generations and
each generation into up to one event. Probabilities are tuned so a dashboard
over the generated data shows a realistic mix of optional fields.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from app.features.tracing.models import (
    CommentObjectType,
    ModelUsageUnit,
    ObservationType,
    ScoreDataType,
    ScoreSource,
)
from app.shared.seeder.generators.generation_io import generation_input_output
from app.shared.seeder.generators.ids import random_uuid

if TYPE_CHECKING:
    from app.shared.seeder.config import SeederConfig


TRACE_NAMES = ["generate-outreach", "label-inbound", "draft-response"]

MODELS = [
    "gpt-3.5-turbo",
    "gpt-4",
    "gpt-4-32k-0613",
    "gpt-3.5-turbo-16k-0613",
    "claude-instant-1",
    "claude-2.1",
    "gpt-4-vision-preview",
    "MIXTRAL-8X7B",
]

TRACE_INPUT = "I'm looking for a React component"
TRACE_OUTPUT = "What kind of component are you looking for?"

MAX_TRACE_AGE_MS = 90 * 24 * 60 * 60 * 1000

# Columns every generated observation row carries, so chunks share one key set
OBSERVATION_DEFAULTS: dict[str, Any] = {
    "parent_observation_id": None,
    "end_time": None,
    "completion_start_time": None,
    "level": "DEFAULT",
    "metadata": None,
    "input": None,
    "output": None,
    "model": None,
    "internal_model": None,
    "model_parameters": None,
    "prompt_tokens": 0,
    "completion_tokens": 0,
    "total_tokens": 0,
    "unit": None,
    "prompt_id": None,
}

SCORE_DEFAULTS: dict[str, Any] = {
    "observation_id": None,
    "value": None,
    "string_value": None,
    "data_type": ScoreDataType.NUMERIC.value,
    "comment": None,
    "author_user_id": None,
    "config_id": None,
    "metadata": None,
}

FALLBACK_SCORE_CONFIG: dict[str, Any] = {
    "id": None,
    "name": "manual-score",
    "data_type": ScoreDataType.NUMERIC.value,
    "categories": None,
}


@dataclass
class GeneratedTraces:
    """Everything produced by a TraceGenerator run.

    Attributes:
        traces: ``traces`` rows.
        observations: Span and generation rows.
        events: Event rows (uploaded after their parent spans).
        scores: Trace- and observation-level scores.
        sessions: Unique ``trace_sessions`` rows.
        comments: Trace and observation comments.
        queue_items: Annotation queue items referencing traces.
    """

    traces: list[dict[str, Any]] = field(default_factory=list)
    observations: list[dict[str, Any]] = field(default_factory=list)
    events: list[dict[str, Any]] = field(default_factory=list)
    scores: list[dict[str, Any]] = field(default_factory=list)
    sessions: list[dict[str, Any]] = field(default_factory=list)
    comments: list[dict[str, Any]] = field(default_factory=list)
    queue_items: list[dict[str, Any]] = field(default_factory=list)


def _ms(milliseconds: float) -> timedelta:
    return timedelta(milliseconds=int(milliseconds))


class TraceGenerator:
    """Generator for synthetic traces and their dependent records."""

    def __init__(self, rng: random.Random, config: SeederConfig) -> None:
        """Initialize the trace generator.

        Args:
            rng: Random number generator for reproducibility.
            config: Seeder configuration (volume, reference time, tags).
        """
        self.rng = rng
        self.config = config

    def generate(
        self,
        project_ids: list[str],
        prompt_ids: dict[str, list[str]],
        queue_ids: dict[str, list[str]],
        score_configs: dict[str, list[dict[str, Any]]],
    ) -> GeneratedTraces:
        """Generate ``config.trace_volume`` traces round-robin over projects.

        Args:
            project_ids: Projects receiving traces, in rotation order.
            prompt_ids: Stored prompt ids per project; generations link to
                the first half of the list.
            queue_ids: Annotation queue ids per project.
            score_configs: Score config descriptors per project.

        Returns:
            GeneratedTraces with sessions deduplicated by (id, project_id).
        """
        if not project_ids:
            raise ValueError("At least one project is required to generate traces")

        result = GeneratedTraces()
        seen_sessions: set[tuple[str, str]] = set()

        for i in range(self.config.trace_volume or 0):
            project_id = project_ids[i % len(project_ids)]
            trace = self._trace(i, project_id)
            result.traces.append(trace)

            session_id = trace["session_id"]
            if session_id is not None and (session_id, project_id) not in seen_sessions:
                seen_sessions.add((session_id, project_id))
                result.sessions.append({"id": session_id, "project_id": project_id})

            result.scores.extend(
                self._trace_scores(i, trace, score_configs.get(project_id, []))
            )

            project_queues = queue_ids.get(project_id) or []
            if self.rng.random() > 0.9 and project_queues:
                result.queue_items.append(
                    {
                        "id": random_uuid(self.rng),
                        "queue_id": project_queues[0],
                        "project_id": project_id,
                        "object_id": trace["id"],
                        "object_type": CommentObjectType.TRACE.value,
                    }
                )

            if self.rng.random() > 0.9:
                author = f"user-{i}" if self.rng.random() > 0.5 else None
                result.comments.append(
                    self._comment(project_id, trace["id"], CommentObjectType.TRACE, author)
                )

            self._observations(i, trace, prompt_ids.get(project_id, []), result)

        return result

    # =========================================================================
    # Traces
    # =========================================================================

    def _trace(self, i: int, project_id: str) -> dict[str, Any]:
        # biased towards recent timestamps
        age_ms = int(self.rng.random() ** 1.5 * MAX_TRACE_AGE_MS)
        timestamp = self.config.now - _ms(age_ms)

        env_tag = self.rng.choice(self.config.env_tags)
        color_tag = self.rng.choice(self.config.color_tags)
        tags = [tag for tag in (env_tag, color_tag) if tag is not None]

        session_id = f"session-{i % 3}" if self.rng.random() > 0.3 else None

        return {
            "id": f"trace-{random_uuid(self.rng)}",
            "project_id": project_id,
            "timestamp": timestamp,
            "created_at": timestamp,
            "name": TRACE_NAMES[i % len(TRACE_NAMES)],
            "metadata": {"user": f"user-{i}@langfuse.com", "more": "1,2,3;4?6"},
            "tags": tags,
            "user_id": f"user-{i % 60}" if self.rng.random() > 0.3 else None,
            "input": TRACE_INPUT if self.rng.random() > 0.3 else None,
            "output": TRACE_OUTPUT if self.rng.random() > 0.3 else None,
            "session_id": session_id,
        }

    def _trace_scores(
        self,
        i: int,
        trace: dict[str, Any],
        configs: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        timestamp = trace["timestamp"]
        base = {
            "trace_id": trace["id"],
            "project_id": trace["project_id"],
            "timestamp": timestamp,
            "created_at": timestamp,
        }

        index = self.rng.randrange(3)
        config = configs[index] if index < len(configs) else FALLBACK_SCORE_CONFIG
        value = self.rng.randrange(2)

        scores: list[dict[str, Any]] = []
        if self.rng.random() > 0.5:
            scores.append(
                self._score(
                    **base,
                    name=config["name"],
                    source=ScoreSource.ANNOTATION.value,
                    author_user_id=f"user-{i}",
                    config_id=config["id"],
                    **self._annotation_value(config, value),
                )
            )
        if self.rng.random() > 0.7:
            scores.append(
                self._score(
                    **base,
                    name="sentiment",
                    value=self.rng.randrange(10) - 5,
                    source=ScoreSource.API.value,
                    metadata={},
                )
            )
        if self.rng.random() < 0.8:
            scores.append(
                self._score(
                    **base,
                    name="Completeness",
                    source=ScoreSource.API.value,
                    data_type=ScoreDataType.CATEGORICAL.value,
                    string_value="Fully" if self.rng.randrange(2) == 1 else "Partially",
                    metadata={},
                )
            )
        return scores

    @staticmethod
    def _annotation_value(config: dict[str, Any], value: int) -> dict[str, Any]:
        """Numeric value plus, for categorical/boolean configs, its label."""
        data_type = config["data_type"]
        fields: dict[str, Any] = {"data_type": data_type, "value": value}
        if data_type == ScoreDataType.CATEGORICAL.value:
            labels = {c["value"]: c["label"] for c in config.get("categories") or []}
            fields["string_value"] = labels.get(value)
        elif data_type == ScoreDataType.BOOLEAN.value:
            fields["string_value"] = "True" if value == 1 else "False"
        return fields

    def _score(self, **fields: Any) -> dict[str, Any]:
        return {"id": random_uuid(self.rng), **SCORE_DEFAULTS, **fields}

    def _comment(
        self,
        project_id: str,
        object_id: str,
        object_type: CommentObjectType,
        author_user_id: str | None = None,
    ) -> dict[str, Any]:
        content = (
            "Trace comment content"
            if object_type is CommentObjectType.TRACE
            else "Observation comment content"
        )
        return {
            "id": random_uuid(self.rng),
            "project_id": project_id,
            "object_id": object_id,
            "object_type": object_type.value,
            "content": content,
            "author_user_id": author_user_id,
        }

    # =========================================================================
    # Observations
    # =========================================================================

    def _observations(
        self,
        i: int,
        trace: dict[str, Any],
        prompt_ids: list[str],
        result: GeneratedTraces,
    ) -> None:
        span_ids: list[str] = []
        for j in range(self.rng.randrange(10) + 1):
            span_start = trace["timestamp"] + _ms(self.rng.randrange(30))
            span_end = span_start + _ms(self.rng.randrange(5000))

            parent_id = None
            if span_ids and self.rng.random() <= 0.5:
                parent_id = self.rng.choice(span_ids)

            span = self._observation(
                id=f"span-{random_uuid(self.rng)}",
                type=ObservationType.SPAN.value,
                project_id=trace["project_id"],
                trace_id=trace["id"],
                name=f"span-{i}-{j}",
                start_time=span_start,
                created_at=span_start,
                end_time=span_end,
                metadata={"user": f"user-{i}@langfuse.com"},
                parent_observation_id=parent_id,
            )
            result.observations.append(span)
            span_ids.append(span["id"])

            for k in range(self.rng.randrange(2) + 1):
                generation = self._generation(i, j, k, trace, span, prompt_ids)
                result.observations.append(generation)
                self._generation_extras(trace, generation, result)

                for event_index in range(self.rng.randrange(2)):
                    result.events.append(self._event(i, j, k, event_index, trace, span))

    def _generation(
        self,
        i: int,
        j: int,
        k: int,
        trace: dict[str, Any],
        span: dict[str, Any],
        prompt_ids: list[str],
    ) -> dict[str, Any]:
        span_start: datetime = span["start_time"]
        span_end: datetime = span["end_time"]
        span_ms = (span_end - span_start) / timedelta(milliseconds=1)

        start = span_start + _ms(self.rng.random() * span_ms)
        end = start + _ms(self.rng.random() * ((span_end - start) / timedelta(milliseconds=1)))
        completion_start = start + _ms((end - start) / timedelta(milliseconds=1) / 3)

        prompt_tokens = self.rng.randrange(1000) + 300
        completion_tokens = self.rng.randrange(500) + 100
        model = self.rng.choice(MODELS)

        prompt_id = None
        linkable = len(prompt_ids) // 2
        if linkable:
            prompt_id = prompt_ids[self.rng.randrange(linkable)]

        generation_input, generation_output = generation_input_output(self.rng)

        return self._observation(
            id=f"generation-{random_uuid(self.rng)}",
            type=ObservationType.GENERATION.value,
            project_id=trace["project_id"],
            trace_id=trace["id"],
            parent_observation_id=span["id"],
            name=f"generation-{i}-{j}-{k}",
            start_time=start,
            created_at=start,
            end_time=end,
            completion_start_time=completion_start if self.rng.random() > 0.5 else None,
            prompt_id=prompt_id,
            input=generation_input,
            output=generation_output,
            model=model,
            internal_model=model,
            model_parameters=self._model_parameters(),
            metadata={"user": f"user-{i}@langfuse.com"},
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            unit=ModelUsageUnit.TOKENS.value,
        )

    def _model_parameters(self) -> dict[str, Any]:
        """Sampling parameters, each omitted one time in ten."""
        params: dict[str, Any] = {}
        if self.rng.random() <= 0.9:
            params["temperature"] = f"{self.rng.random():.2f}"
        if self.rng.random() <= 0.9:
            params["topP"] = f"{self.rng.random():.2f}"
        if self.rng.random() <= 0.9:
            params["maxTokens"] = self.rng.randrange(1000)
        return params

    def _generation_extras(
        self,
        trace: dict[str, Any],
        generation: dict[str, Any],
        result: GeneratedTraces,
    ) -> None:
        for name in ("quality", "conciseness"):
            if self.rng.random() > 0.6:
                result.scores.append(
                    self._score(
                        name=name,
                        value=self.rng.random() * 2 - 1,
                        observation_id=generation["id"],
                        trace_id=trace["id"],
                        project_id=trace["project_id"],
                        source=ScoreSource.API.value,
                        timestamp=generation["end_time"],
                        created_at=trace["timestamp"],
                    )
                )

        if self.rng.random() > 0.8:
            result.comments.append(
                self._comment(trace["project_id"], generation["id"], CommentObjectType.OBSERVATION)
            )

    def _event(
        self,
        i: int,
        j: int,
        k: int,
        event_index: int,
        trace: dict[str, Any],
        span: dict[str, Any],
    ) -> dict[str, Any]:
        span_start: datetime = span["start_time"]
        span_ms = (span["end_time"] - span_start) / timedelta(milliseconds=1)
        timestamp = span_start + _ms(self.rng.random() * span_ms)

        return self._observation(
            id=f"event-{random_uuid(self.rng)}",
            type=ObservationType.EVENT.value,
            project_id=trace["project_id"],
            trace_id=trace["id"],
            parent_observation_id=span["id"],
            name=f"event-{i}-{j}-{k}-{event_index}",
            start_time=timestamp,
            created_at=timestamp,
            metadata={"user": f"user-{i}@langfuse.com"},
        )

    @staticmethod
    def _observation(**fields: Any) -> dict[str, Any]:
        return {**OBSERVATION_DEFAULTS, **fields}
