"""Core seeder orchestration module."""

from __future__ import annotations

import random
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func, select, text, tuple_

from app.core.logging import get_logger
from app.core.security import encrypt, get_display_secret_key
from app.features.dashboards.models import Dashboard, DashboardWidget
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
from app.features.iam.models import ApiKey, Organization, Project, User
from app.features.tracing.models import Comment, Observation, Score, Trace, TraceSession
from app.shared.seeder.baseline import SEED_PROJECT_ID, BaselineSeeder
from app.shared.seeder.generators import (
    DashboardGenerator,
    DatasetGenerator,
    EvalGenerator,
    GeneratedTraces,
    PromptGenerator,
    QueueGenerator,
    ScoreConfigGenerator,
    TraceGenerator,
    config_descriptor,
)
from app.shared.seeder.generators.datasets import DATASET_COUNT
from app.shared.seeder.uploader import BulkUploader

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.shared.seeder.config import SeederConfig

logger = get_logger(__name__)


@dataclass
class SeederResult:
    """Result of a seeder run.

    Counts are the number of records generated in this run; rows that
    already existed are skipped by the database, not recounted.

    Attributes:
        environment: Seed environment that ran.
        projects_count: Projects populated (baseline included).
        api_keys_created: Seeded API keys created in this run.
        seed: Random seed used.
    """

    environment: str = "default"
    projects_count: int = 0
    api_keys_created: int = 0
    score_configs_count: int = 0
    queues_count: int = 0
    prompts_count: int = 0
    traces_count: int = 0
    observations_count: int = 0
    scores_count: int = 0
    sessions_count: int = 0
    comments_count: int = 0
    queue_items_count: int = 0
    datasets_count: int = 0
    dataset_items_count: int = 0
    dataset_runs_count: int = 0
    dataset_run_items_count: int = 0
    dashboards_count: int = 0
    widgets_count: int = 0
    eval_templates_count: int = 0
    job_configurations_count: int = 0
    llm_api_keys_count: int = 0
    llm_schemas_count: int = 0
    seed: int = 42


class DataSeeder:
    """Orchestrates baseline provisioning and synthetic data generation.

    Projects are populated one after another on a single session; the whole
    run is committed once at the end.
    """

    def __init__(self, config: SeederConfig) -> None:
        """Initialize the data seeder.

        Args:
            config: Seeder configuration.
        """
        self.config = config
        self.rng = random.Random(config.seed)

    async def run(self, db: AsyncSession) -> SeederResult:
        """Seed the database for the configured environment.

        Every event logged during the run carries ``seed_environment`` and
        ``seed``.

        Args:
            db: Async database session.

        Returns:
            SeederResult with counts of generated records.
        """
        with structlog.contextvars.bound_contextvars(
            seed_environment=self.config.environment.value,
            seed=self.config.seed,
        ):
            logger.info("seeder.run.started", trace_volume=self.config.trace_volume)

            uploader = BulkUploader(db, self.config.chunk_size)
            baseline = await BaselineSeeder(self.config, uploader).run()

            result = SeederResult(
                environment=self.config.environment.value,
                projects_count=len(baseline.project_ids),
                api_keys_created=len(baseline.api_keys_created),
                seed=self.config.seed,
            )

            if self.config.environment.generates_examples:
                await self._generate_examples(db, uploader, baseline.project_ids, result)

            await db.commit()

            logger.info(
                "seeder.run.completed",
                traces=result.traces_count,
                observations=result.observations_count,
                scores=result.scores_count,
            )
        return result

    async def _generate_examples(
        self,
        db: AsyncSession,
        uploader: BulkUploader,
        project_ids: list[str],
        result: SeederResult,
    ) -> None:
        configs = await self._seed_score_configs(uploader, project_ids, result)
        queue_ids = await self._seed_queues(db, uploader, configs, result)
        prompt_ids = await self._seed_prompts(db, uploader, project_ids, result)

        generated = TraceGenerator(self.rng, self.config).generate(
            project_ids, prompt_ids, queue_ids, configs
        )
        logger.info(
            "seeder.traces.generated",
            traces=len(generated.traces),
            observations=len(generated.observations) + len(generated.events),
            scores=len(generated.scores),
        )
        await self._upload_traces(uploader, generated, result)

        await self._seed_llm_api_key(uploader, result)
        await self._seed_evals(db, uploader, result)
        await self._seed_datasets(db, uploader, project_ids, generated.observations, result)
        await self._seed_dashboards(uploader, project_ids, result)

        schemas = EvalGenerator(self.rng).generate_llm_schemas(SEED_PROJECT_ID)
        await uploader.upload(
            "llm_schemas", LlmSchema, schemas, conflict_target=["project_id", "name"]
        )
        result.llm_schemas_count = len(schemas)

    # =========================================================================
    # Per-project configuration objects
    # =========================================================================

    async def _seed_score_configs(
        self,
        uploader: BulkUploader,
        project_ids: list[str],
        result: SeederResult,
    ) -> dict[str, list[dict[str, Any]]]:
        generator = ScoreConfigGenerator(self.rng)
        configs: dict[str, list[dict[str, Any]]] = {}
        for project_id in project_ids:
            rows = generator.generate(project_id)
            await uploader.upload("score_configs", ScoreConfig, rows)
            configs[project_id] = [config_descriptor(row) for row in rows]
            result.score_configs_count += len(rows)
        return configs

    async def _seed_queues(
        self,
        db: AsyncSession,
        uploader: BulkUploader,
        configs: dict[str, list[dict[str, Any]]],
        result: SeederResult,
    ) -> dict[str, list[str]]:
        generator = QueueGenerator(self.rng)
        queue_ids: dict[str, list[str]] = {}
        for project_id, project_configs in configs.items():
            row = generator.generate(project_id, [c["id"] for c in project_configs])
            await uploader.upload(
                "annotation_queues",
                AnnotationQueue,
                [row],
                conflict_target=["project_id", "name"],
            )
            stored_id = await db.scalar(
                select(AnnotationQueue.id).where(
                    AnnotationQueue.project_id == project_id,
                    AnnotationQueue.name == row["name"],
                )
            )
            queue_ids[project_id] = [stored_id] if stored_id else []
            result.queues_count += 1
        return queue_ids

    async def _seed_prompts(
        self,
        db: AsyncSession,
        uploader: BulkUploader,
        project_ids: list[str],
        result: SeederResult,
    ) -> dict[str, list[str]]:
        """Insert prompts and return the stored ids in generation order.

        Existing (project, name, version) rows win over generated ones, so
        ids are read back rather than taken from the generated rows.
        """
        generator = PromptGenerator(self.rng)
        prompt_ids: dict[str, list[str]] = {}
        for project_id in project_ids:
            rows = generator.generate(project_id)
            await uploader.upload(
                "prompts", Prompt, rows, conflict_target=["project_id", "name", "version"]
            )
            stored = await db.execute(
                select(Prompt.name, Prompt.version, Prompt.id).where(
                    Prompt.project_id == project_id,
                    tuple_(Prompt.name, Prompt.version).in_(
                        [(row["name"], row["version"]) for row in rows]
                    ),
                )
            )
            ids_by_key = {(name, version): prompt_id for name, version, prompt_id in stored}
            prompt_ids[project_id] = [
                ids_by_key[key]
                for key in ((row["name"], row["version"]) for row in rows)
                if key in ids_by_key
            ]
            result.prompts_count += len(rows)
        return prompt_ids

    # =========================================================================
    # Traces
    # =========================================================================

    async def _upload_traces(
        self,
        uploader: BulkUploader,
        generated: GeneratedTraces,
        result: SeederResult,
    ) -> None:
        await uploader.upload(
            "sessions", TraceSession, generated.sessions, conflict_target=["id", "project_id"]
        )
        await uploader.upload("traces", Trace, generated.traces)
        await uploader.upload("observations", Observation, generated.observations)
        await uploader.upload("events", Observation, generated.events)
        await uploader.upload("scores", Score, generated.scores)
        await uploader.upload("comments", Comment, generated.comments)
        await uploader.upload("annotation_queue_items", AnnotationQueueItem, generated.queue_items)

        result.sessions_count = len(generated.sessions)
        result.traces_count = len(generated.traces)
        result.observations_count = len(generated.observations) + len(generated.events)
        result.scores_count = len(generated.scores)
        result.comments_count = len(generated.comments)
        result.queue_items_count = len(generated.queue_items)

    # =========================================================================
    # Evaluation, datasets, dashboards
    # =========================================================================

    async def _seed_llm_api_key(self, uploader: BulkUploader, result: SeederResult) -> None:
        api_key = self.config.openai_api_key
        if not api_key:
            logger.warning(
                "seeder.llm_api_key.skipped",
                reason="No OPENAI_API_KEY found in environment",
            )
            return

        try:
            secret_key = encrypt(api_key)
        except RuntimeError as e:
            logger.warning("seeder.llm_api_key.skipped", reason=str(e))
            return

        await uploader.upload(
            "llm_api_keys",
            LlmApiKey,
            [
                {
                    "project_id": SEED_PROJECT_ID,
                    "provider": "openai",
                    "adapter": "openai",
                    "secret_key": secret_key,
                    "display_secret_key": get_display_secret_key(api_key),
                    "base_url": None,
                }
            ],
            conflict_target=["project_id", "provider"],
        )
        result.llm_api_keys_count = 1

    async def _seed_evals(
        self,
        db: AsyncSession,
        uploader: BulkUploader,
        result: SeederResult,
    ) -> None:
        generator = EvalGenerator(self.rng)
        template = generator.generate_template(SEED_PROJECT_ID)
        await uploader.upload(
            "eval_templates",
            EvalTemplate,
            [template],
            conflict_target=["project_id", "name", "version"],
        )
        template_id = await db.scalar(
            select(EvalTemplate.id).where(
                EvalTemplate.project_id == SEED_PROJECT_ID,
                EvalTemplate.name == template["name"],
                EvalTemplate.version == template["version"],
            )
        )

        job = generator.generate_job_configuration(SEED_PROJECT_ID, template_id or template["id"])
        await uploader.upload("job_configurations", JobConfiguration, [job])
        result.eval_templates_count = 1
        result.job_configurations_count = 1

    async def _seed_datasets(
        self,
        db: AsyncSession,
        uploader: BulkUploader,
        project_ids: list[str],
        observations: list[dict[str, Any]],
        result: SeederResult,
    ) -> None:
        generator = DatasetGenerator(self.rng)
        observations_by_project: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for observation in observations:
            observations_by_project[observation["project_id"]].append(observation)

        for number in range(DATASET_COUNT):
            for project_id in project_ids:
                project_observations = observations_by_project[project_id]

                dataset = generator.generate_dataset(project_id, number)
                await uploader.upload(
                    "datasets", Dataset, [dataset], conflict_target=["project_id", "name"]
                )
                dataset_id = await db.scalar(
                    select(Dataset.id).where(
                        Dataset.project_id == project_id, Dataset.name == dataset["name"]
                    )
                )

                items = generator.generate_items(project_id, dataset_id, project_observations)
                await uploader.upload("dataset_items", DatasetItem, items)
                item_ids = [item["id"] for item in items]

                runs = generator.generate_runs(project_id, dataset_id)
                await uploader.upload(
                    "dataset_runs",
                    DatasetRun,
                    runs,
                    conflict_target=["dataset_id", "project_id", "name"],
                )
                stored_runs = await db.execute(
                    select(DatasetRun.id).where(
                        DatasetRun.dataset_id == dataset_id,
                        DatasetRun.project_id == project_id,
                        DatasetRun.name.in_([run["name"] for run in runs]),
                    )
                )

                for run_id in stored_runs.scalars().all():
                    run_items = generator.generate_run_items(
                        project_id, run_id, item_ids, project_observations
                    )
                    await uploader.upload("dataset_run_items", DatasetRunItem, run_items)
                    result.dataset_run_items_count += len(run_items)

                result.datasets_count += 1
                result.dataset_items_count += len(items)
                result.dataset_runs_count += len(runs)

    async def _seed_dashboards(
        self,
        uploader: BulkUploader,
        project_ids: list[str],
        result: SeederResult,
    ) -> None:
        generator = DashboardGenerator(self.rng)
        for project_id in project_ids:
            widgets, dashboard = generator.generate(project_id)
            await uploader.upload("dashboard_widgets", DashboardWidget, widgets)
            await uploader.upload("dashboards", Dashboard, [dashboard])
            result.widgets_count += len(widgets)
            result.dashboards_count += 1

    # =========================================================================
    # Status and verification
    # =========================================================================

    async def get_current_counts(self, db: AsyncSession) -> dict[str, int]:
        """Get current row counts for all seeder-relevant tables.

        Args:
            db: Async database session.

        Returns:
            Dictionary of table names to row counts.
        """
        models = [
            Organization,
            Project,
            User,
            ApiKey,
            Prompt,
            ScoreConfig,
            AnnotationQueue,
            AnnotationQueueItem,
            TraceSession,
            Trace,
            Observation,
            Score,
            Comment,
            Dataset,
            DatasetItem,
            DatasetRun,
            DatasetRunItem,
            DashboardWidget,
            Dashboard,
            EvalTemplate,
            JobConfiguration,
            LlmApiKey,
            LlmSchema,
        ]

        counts: dict[str, int] = {}
        for model in models:
            result = await db.execute(select(func.count()).select_from(model))
            counts[model.__tablename__] = result.scalar() or 0

        return counts

    async def verify_data_integrity(self, db: AsyncSession) -> list[str]:
        """Verify referential and type consistency of seeded data.

        Checks:
        - Observations reference an existing trace of the same project
        - Parent observations exist
        - Scores populate the value column matching their data type
        - Queue items reference an existing queue and object
        - Prompt versions are unique per project and name

        Args:
            db: Async database session.

        Returns:
            List of error messages (empty if all checks pass).
        """
        checks = [
            (
                """
                SELECT COUNT(*) FROM observations o
                LEFT JOIN traces t ON o.trace_id = t.id
                WHERE t.id IS NULL OR t.project_id <> o.project_id
                """,
                "Found {} observations without a trace in their project",
            ),
            (
                """
                SELECT COUNT(*) FROM observations o
                LEFT JOIN observations p ON o.parent_observation_id = p.id
                WHERE o.parent_observation_id IS NOT NULL AND p.id IS NULL
                """,
                "Found {} observations with a missing parent",
            ),
            (
                """
                SELECT COUNT(*) FROM scores
                WHERE (data_type = 'NUMERIC' AND value IS NULL)
                   OR (data_type IN ('CATEGORICAL', 'BOOLEAN') AND string_value IS NULL)
                """,
                "Found {} scores without a value for their data type",
            ),
            (
                """
                SELECT COUNT(*) FROM annotation_queue_items i
                LEFT JOIN annotation_queues q ON i.queue_id = q.id
                LEFT JOIN traces t ON i.object_type = 'TRACE' AND i.object_id = t.id
                LEFT JOIN observations o ON i.object_type = 'OBSERVATION' AND i.object_id = o.id
                WHERE q.id IS NULL
                   OR (i.object_type = 'TRACE' AND t.id IS NULL)
                   OR (i.object_type = 'OBSERVATION' AND o.id IS NULL)
                """,
                "Found {} annotation queue items with a missing queue or object",
            ),
            (
                """
                SELECT COUNT(*) FROM (
                    SELECT project_id, name, version FROM prompts
                    GROUP BY project_id, name, version
                    HAVING COUNT(*) > 1
                ) duplicates
                """,
                "Found {} duplicate prompt versions",
            ),
        ]

        errors: list[str] = []
        for sql, message in checks:
            result = await db.execute(text(sql))
            count = result.scalar() or 0
            if count > 0:
                errors.append(message.format(count))

        return errors
