"""Configuration dataclasses for the seeder module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.core.config import Settings


DEFAULT_EXAMPLES_TRACE_VOLUME = 100
DEFAULT_LOAD_TRACE_VOLUME = 10_000


class SeedEnvironment(str, Enum):
    """What the seeder provisions.

    DEFAULT seeds the baseline org/project/users/keys only (docker-compose
    setup). EXAMPLES and LOAD add the demo organization and synthetic
    observability data, differing in trace volume.
    """

    DEFAULT = "default"
    EXAMPLES = "examples"
    LOAD = "load"

    @property
    def generates_examples(self) -> bool:
        """Whether synthetic data is generated on top of the baseline."""
        return self is not SeedEnvironment.DEFAULT


@dataclass
class SeederConfig:
    """Master configuration for the data seeder.

    Attributes:
        environment: Seed environment.
        seed: Random seed; the same seed reproduces the same ids and data.
        trace_volume: Number of traces; derived from the environment if unset.
        chunk_size: Records per bulk insert chunk.
        seed_secret_key: Overrides the secret of the seeded API keys.
        openai_api_key: Seeded as the project's LLM API key when set.
        now: Reference time; trace timestamps fall within 90 days before it.
        env_tags: Candidate environment tags (None means no tag).
        color_tags: Candidate color tags (None means no tag).
        examples_trace_volume: Trace volume for the examples environment.
        load_trace_volume: Trace volume for the load environment.
    """

    environment: SeedEnvironment = SeedEnvironment.DEFAULT
    seed: int = 42
    trace_volume: int | None = None
    chunk_size: int = 10_000
    seed_secret_key: str | None = None
    openai_api_key: str | None = None
    now: datetime = field(default_factory=lambda: datetime.now(UTC))
    env_tags: list[str | None] = field(
        default_factory=lambda: [None, "development", "staging", "production"]
    )
    color_tags: list[str | None] = field(default_factory=lambda: [None, "red", "blue", "yellow"])
    examples_trace_volume: int = DEFAULT_EXAMPLES_TRACE_VOLUME
    load_trace_volume: int = DEFAULT_LOAD_TRACE_VOLUME

    def __post_init__(self) -> None:
        """Normalize the environment and derive the trace volume.

        Raises:
            ValueError: If chunk_size or trace_volume are out of range.
        """
        self.environment = SeedEnvironment(self.environment)
        if self.trace_volume is None:
            self.trace_volume = self.default_trace_volume()
        if self.trace_volume < 0:
            raise ValueError(f"trace_volume must be >= 0, got {self.trace_volume}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.now.tzinfo is None:
            self.now = self.now.replace(tzinfo=UTC)

    def default_trace_volume(self) -> int:
        """Trace volume implied by the environment."""
        if self.environment is SeedEnvironment.LOAD:
            return self.load_trace_volume
        if self.environment is SeedEnvironment.EXAMPLES:
            return self.examples_trace_volume
        return 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        **overrides: Any,
    ) -> SeederConfig:
        """Create configuration from application settings.

        Args:
            settings: Settings instance (defaults to the cached settings).
            **overrides: Field values taking precedence over settings; None
                values are ignored.

        Returns:
            SeederConfig populated from settings.
        """
        if settings is None:
            from app.core.config import get_settings

            settings = get_settings()

        values: dict[str, Any] = {
            "chunk_size": settings.seed_chunk_size,
            "seed_secret_key": settings.seed_secret_key or None,
            "openai_api_key": settings.openai_api_key or None,
            "examples_trace_volume": settings.seed_examples_trace_volume,
            "load_trace_volume": settings.seed_load_trace_volume,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
