"""Tests for seeder data generators."""

import random
import uuid
from datetime import timedelta

import pytest

from app.shared.seeder.generators import (
    SEED_PROMPTS,
    DashboardGenerator,
    DatasetGenerator,
    EvalGenerator,
    PromptGenerator,
    QueueGenerator,
    ScoreConfigGenerator,
    TraceGenerator,
    config_descriptor,
    random_uuid,
)
from app.shared.seeder.generators.datasets import RUNS_PER_DATASET, dataset_name
from app.shared.seeder.generators.evals import TOXICITY_TEMPLATE_NAME
from app.shared.seeder.generators.evaluation import (
    MANY_VERSIONS_COUNT,
    MANY_VERSIONS_PROMPT_NAME,
    VARIABLE_PROMPT_NAME,
)

PROJECT_A = "project-a"
PROJECT_B = "project-b"


class TestRandomUuid:
    """Tests for random_uuid."""

    def test_is_valid_uuid4(self, rng):
        value = uuid.UUID(random_uuid(rng))

        assert value.version == 4

    def test_same_seed_same_ids(self):
        first = [random_uuid(random.Random(7)) for _ in range(3)]
        second = [random_uuid(random.Random(7)) for _ in range(3)]

        assert first == second


class TestScoreConfigGenerator:
    """Tests for ScoreConfigGenerator."""

    def test_generates_one_config_per_data_type(self, rng):
        rows = ScoreConfigGenerator(rng).generate(PROJECT_A)

        assert [row["data_type"] for row in rows] == ["NUMERIC", "CATEGORICAL", "BOOLEAN"]
        assert [row["name"] for row in rows] == ["manual-score", "Accuracy", "Toxicity"]
        assert all(row["id"].startswith("config-") for row in rows)
        assert all(row["project_id"] == PROJECT_A for row in rows)

    def test_categorical_config_has_categories(self, rng):
        rows = ScoreConfigGenerator(rng).generate(PROJECT_A)

        labels = [category["label"] for category in rows[1]["categories"]]
        assert labels == ["Incorrect", "Partially Correct", "Correct"]
        assert rows[0]["categories"] is None

    def test_descriptor_keeps_score_fields_only(self, rng):
        row = ScoreConfigGenerator(rng).generate(PROJECT_A)[2]

        descriptor = config_descriptor(row)

        assert set(descriptor) == {"id", "name", "data_type", "categories"}
        assert descriptor["id"] == row["id"]


class TestQueueGenerator:
    """Tests for QueueGenerator."""

    def test_default_queue_references_configs(self, rng):
        queue = QueueGenerator(rng).generate(PROJECT_A, ["config-1", "config-2"])

        assert queue["name"] == "Default"
        assert queue["id"].startswith("queue-")
        assert queue["score_config_ids"] == ["config-1", "config-2"]


class TestPromptGenerator:
    """Tests for PromptGenerator."""

    @pytest.fixture
    def prompts(self, rng):
        return PromptGenerator(rng).generate(PROJECT_A)

    def test_generates_all_prompt_versions(self, prompts):
        assert len(prompts) == len(SEED_PROMPTS) + 3 + MANY_VERSIONS_COUNT

    def test_name_version_pairs_are_unique(self, prompts):
        keys = [(row["name"], row["version"]) for row in prompts]

        assert len(keys) == len(set(keys))

    def test_seed_prompt_ids_are_scoped_to_project(self, prompts):
        seed_rows = prompts[: len(SEED_PROMPTS)]

        assert all(row["id"].endswith(PROJECT_A) for row in seed_rows)
        assert all(row["labels"] == ["production", "latest"] for row in seed_rows)

    def test_variable_prompt_config_accumulates(self, prompts):
        versions = [row for row in prompts if row["name"] == VARIABLE_PROMPT_NAME]

        assert [row["version"] for row in versions] == [1, 2, 3]
        assert versions[0]["config"] == {"temperature": 0.7}
        assert versions[1]["config"] == {"temperature": 0.7, "topP": 0.9}
        assert versions[2]["config"] == {
            "temperature": 0.7,
            "topP": 0.9,
            "frequencyPenalty": 0.5,
        }
        assert versions[0]["labels"] == []
        assert versions[1]["labels"] == ["production"]

    def test_only_last_of_many_versions_is_labelled(self, prompts):
        versions = [row for row in prompts if row["name"] == MANY_VERSIONS_PROMPT_NAME]

        assert len(versions) == MANY_VERSIONS_COUNT
        assert all(row["labels"] == [] for row in versions[:-1])
        assert versions[-1]["labels"] == ["production", "latest"]

    def test_rows_share_key_set(self, prompts):
        assert len({frozenset(row) for row in prompts}) == 1


class TestTraceGenerator:
    """Tests for TraceGenerator."""

    @pytest.fixture
    def generated(self, rng, examples_config, score_configs):
        generator = TraceGenerator(rng, examples_config)
        return generator.generate(
            [PROJECT_A, PROJECT_B],
            prompt_ids={PROJECT_A: ["p1", "p2", "p3", "p4"], PROJECT_B: []},
            queue_ids={PROJECT_A: ["queue-a"], PROJECT_B: []},
            score_configs={PROJECT_A: score_configs},
        )

    def test_generates_configured_trace_volume(self, generated, examples_config):
        assert len(generated.traces) == examples_config.trace_volume

    def test_traces_rotate_over_projects(self, generated):
        projects = [trace["project_id"] for trace in generated.traces[:4]]

        assert projects == [PROJECT_A, PROJECT_B, PROJECT_A, PROJECT_B]

    def test_trace_timestamps_within_ninety_days(self, generated, examples_config):
        oldest = examples_config.now - timedelta(days=90)

        for trace in generated.traces:
            assert oldest <= trace["timestamp"] <= examples_config.now

    def test_every_observation_belongs_to_trace_of_same_project(self, generated):
        trace_projects = {trace["id"]: trace["project_id"] for trace in generated.traces}

        for observation in generated.observations + generated.events:
            assert trace_projects[observation["trace_id"]] == observation["project_id"]

    def test_observation_parents_exist(self, generated):
        ids = {observation["id"] for observation in generated.observations}

        for observation in generated.observations + generated.events:
            parent = observation["parent_observation_id"]
            assert parent is None or parent in ids

    def test_events_hang_off_spans(self, generated):
        span_ids = {o["id"] for o in generated.observations if o["type"] == "SPAN"}

        assert all(event["type"] == "EVENT" for event in generated.events)
        assert all(event["parent_observation_id"] in span_ids for event in generated.events)

    def test_generations_carry_token_usage(self, generated):
        generations = [o for o in generated.observations if o["type"] == "GENERATION"]

        assert generations
        for generation in generations:
            assert generation["total_tokens"] == (
                generation["prompt_tokens"] + generation["completion_tokens"]
            )
            assert generation["unit"] == "TOKENS"
            assert generation["start_time"] <= generation["end_time"]

    def test_generations_link_first_half_of_prompts(self, generated):
        linked = {
            o["prompt_id"]
            for o in generated.observations
            if o["type"] == "GENERATION" and o["project_id"] == PROJECT_A
        }

        assert linked <= {"p1", "p2"}
        project_b = [o for o in generated.observations if o["project_id"] == PROJECT_B]
        assert all(o["prompt_id"] is None for o in project_b)

    def test_score_value_column_matches_data_type(self, generated):
        assert generated.scores
        for score in generated.scores:
            if score["data_type"] == "NUMERIC":
                assert score["value"] is not None
            else:
                assert score["string_value"] is not None

    def test_boolean_annotation_labels(self, generated):
        for score in generated.scores:
            if score["data_type"] == "BOOLEAN":
                assert score["string_value"] == ("True" if score["value"] == 1 else "False")

    def test_sessions_are_unique_per_project(self, generated):
        keys = [(session["id"], session["project_id"]) for session in generated.sessions]

        assert len(keys) == len(set(keys))
        trace_sessions = {
            (trace["session_id"], trace["project_id"])
            for trace in generated.traces
            if trace["session_id"] is not None
        }
        assert set(keys) == trace_sessions

    def test_queue_items_reference_project_queue(self, generated):
        trace_ids = {trace["id"] for trace in generated.traces}

        for item in generated.queue_items:
            assert item["queue_id"] == "queue-a"
            assert item["project_id"] == PROJECT_A
            assert item["object_id"] in trace_ids

    def test_same_seed_reproduces_data(self, examples_config, score_configs):
        def run():
            return TraceGenerator(random.Random(5), examples_config).generate(
                [PROJECT_A], {}, {}, {PROJECT_A: score_configs}
            )

        first, second = run(), run()

        assert [t["id"] for t in first.traces] == [t["id"] for t in second.traces]
        assert len(first.observations) == len(second.observations)

    def test_requires_a_project(self, rng, examples_config):
        with pytest.raises(ValueError, match="project"):
            TraceGenerator(rng, examples_config).generate([], {}, {}, {})

    def test_missing_score_configs_fall_back_to_manual_score(self, rng, examples_config):
        generated = TraceGenerator(rng, examples_config).generate([PROJECT_B], {}, {}, {})

        annotations = [s for s in generated.scores if s["source"] == "ANNOTATION"]
        assert all(s["name"] == "manual-score" for s in annotations)
        assert all(s["config_id"] is None for s in annotations)


class TestDatasetGenerator:
    """Tests for DatasetGenerator."""

    @pytest.fixture
    def observations(self):
        return [
            {"id": f"span-{i}", "trace_id": f"trace-{i}", "project_id": PROJECT_A}
            for i in range(5)
        ]

    def test_first_dataset_has_description(self, rng):
        generator = DatasetGenerator(rng)

        first = generator.generate_dataset(PROJECT_A, 0)
        second = generator.generate_dataset(PROJECT_A, 1)

        assert first["name"] == dataset_name(0) == "demo-dataset-0"
        assert first["description"] == "Dataset test description"
        assert second["description"] is None

    def test_items_sourced_from_observations(self, rng, observations):
        items = DatasetGenerator(rng).generate_items(PROJECT_A, "dataset-1", observations)

        traces = {o["trace_id"] for o in observations}
        assert items
        for item in items:
            assert item["dataset_id"] == "dataset-1"
            assert item["source_trace_id"] in traces

    def test_no_observations_no_items(self, rng):
        assert DatasetGenerator(rng).generate_items(PROJECT_A, "dataset-1", []) == []

    def test_runs_cycle_metadata_shapes(self, rng):
        runs = DatasetGenerator(rng).generate_runs(PROJECT_A, "dataset-1")

        assert len(runs) == RUNS_PER_DATASET
        assert [run["name"] for run in runs][:2] == ["demo-dataset-run-0", "demo-dataset-run-1"]
        assert runs[0]["metadata"] is None
        assert runs[3]["metadata"] == {"key": "value"}

    def test_one_run_item_per_dataset_item(self, rng, observations):
        run_items = DatasetGenerator(rng).generate_run_items(
            PROJECT_A, "run-1", ["item-1", "item-2"], observations
        )

        assert [item["dataset_item_id"] for item in run_items] == ["item-1", "item-2"]
        assert all(item["dataset_run_id"] == "run-1" for item in run_items)


class TestDashboardGenerator:
    """Tests for DashboardGenerator."""

    def test_dashboard_places_both_widgets(self, rng):
        widgets, dashboard = DashboardGenerator(rng).generate(PROJECT_A)

        assert [w["id"] for w in widgets] == [f"cabc-{PROJECT_A}", f"cdef-{PROJECT_A}"]
        assert dashboard["id"] == f"seed-dashboard-{PROJECT_A}"
        placed = [p["widgetId"] for p in dashboard["definition"]["widgets"]]
        assert placed == [w["id"] for w in widgets]


class TestEvalGenerator:
    """Tests for EvalGenerator."""

    def test_job_configuration_references_template(self, rng):
        generator = EvalGenerator(rng)
        template = generator.generate_template(PROJECT_A)

        job = generator.generate_job_configuration(PROJECT_A, template["id"])

        assert template["name"] == TOXICITY_TEMPLATE_NAME
        assert job["eval_template_id"] == template["id"]
        assert job["score_name"] == "toxicity"
        assert job["sampling"] == 1

    def test_llm_schemas(self, rng):
        schemas = EvalGenerator(rng).generate_llm_schemas(PROJECT_A)

        assert [s["name"] for s in schemas] == ["get_weather", "calculator"]
        assert all(s["project_id"] == PROJECT_A for s in schemas)
