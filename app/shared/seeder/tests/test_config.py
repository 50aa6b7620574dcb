"""Tests for seeder configuration."""

from datetime import UTC, datetime

import pytest

from app.core.config import Settings
from app.shared.seeder.config import SeedEnvironment, SeederConfig


class TestSeedEnvironment:
    """Tests for SeedEnvironment."""

    def test_default_does_not_generate_examples(self):
        assert SeedEnvironment.DEFAULT.generates_examples is False

    @pytest.mark.parametrize("environment", [SeedEnvironment.EXAMPLES, SeedEnvironment.LOAD])
    def test_examples_and_load_generate_examples(self, environment):
        assert environment.generates_examples is True


class TestSeederConfig:
    """Tests for SeederConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = SeederConfig()

        assert config.environment is SeedEnvironment.DEFAULT
        assert config.seed == 42
        assert config.trace_volume == 0
        assert config.chunk_size == 10_000
        assert config.seed_secret_key is None
        assert config.openai_api_key is None

    def test_environment_string_is_normalized(self):
        """Test plain strings are accepted for the environment."""
        config = SeederConfig(environment="load")

        assert config.environment is SeedEnvironment.LOAD

    def test_invalid_environment_rejected(self):
        with pytest.raises(ValueError):
            SeederConfig(environment="staging")

    def test_trace_volume_derived_from_environment(self):
        """Test examples and load environments pick their own volume."""
        assert SeederConfig(environment="examples").trace_volume == 100
        assert SeederConfig(environment="load").trace_volume == 10_000

    def test_explicit_trace_volume_wins(self):
        config = SeederConfig(environment="load", trace_volume=25)

        assert config.trace_volume == 25

    def test_negative_trace_volume_rejected(self):
        with pytest.raises(ValueError, match="trace_volume"):
            SeederConfig(trace_volume=-1)

    def test_zero_chunk_size_rejected(self):
        with pytest.raises(ValueError, match="chunk_size"):
            SeederConfig(chunk_size=0)

    def test_naive_reference_time_is_made_utc(self):
        config = SeederConfig(now=datetime(2024, 1, 1, 12, 0))

        assert config.now.tzinfo is UTC

    def test_tag_pools_include_no_tag(self):
        """Test both tag pools can produce an untagged trace."""
        config = SeederConfig()

        assert None in config.env_tags
        assert None in config.color_tags


class TestFromSettings:
    """Tests for SeederConfig.from_settings()."""

    @pytest.fixture
    def settings(self):
        return Settings(
            seed_chunk_size=500,
            seed_secret_key="sk-lf-shared",
            openai_api_key="",
            seed_examples_trace_volume=7,
            seed_load_trace_volume=70,
        )

    def test_reads_seeder_settings(self, settings):
        config = SeederConfig.from_settings(settings, environment="examples")

        assert config.chunk_size == 500
        assert config.seed_secret_key == "sk-lf-shared"
        assert config.trace_volume == 7

    def test_empty_openai_key_becomes_none(self, settings):
        config = SeederConfig.from_settings(settings)

        assert config.openai_api_key is None

    def test_overrides_take_precedence(self, settings):
        config = SeederConfig.from_settings(
            settings, environment="load", seed=9, chunk_size=50, trace_volume=3
        )

        assert config.environment is SeedEnvironment.LOAD
        assert config.seed == 9
        assert config.chunk_size == 50
        assert config.trace_volume == 3

    def test_none_overrides_are_ignored(self, settings):
        config = SeederConfig.from_settings(settings, chunk_size=None, seed=None)

        assert config.chunk_size == 500
        assert config.seed == 42
