"""Tests for the seed CLI (scripts/seed.py)."""

import importlib.util
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.config import Settings
from app.shared.seeder import SeedEnvironment

SEED_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "seed.py"


@pytest.fixture(scope="module")
def seed_cli():
    """The seed script loaded as a module."""
    spec = importlib.util.spec_from_file_location("seed_cli", SEED_SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def session():
    return AsyncMock()


@pytest.fixture
def session_maker(seed_cli, session):
    """Patch the session factory to hand out ``session``."""
    maker = MagicMock()
    maker.return_value.__aenter__.return_value = session
    with patch.object(seed_cli, "get_session_maker", return_value=maker):
        yield maker


class TestParser:
    def test_status_and_verify_are_exclusive(self, seed_cli):
        with pytest.raises(SystemExit):
            seed_cli.create_parser().parse_args(["--status", "--verify"])

    def test_rejects_unknown_environment(self, seed_cli):
        with pytest.raises(SystemExit):
            seed_cli.create_parser().parse_args(["--environment", "staging"])

    def test_flags_default_to_none(self, seed_cli):
        args = seed_cli.create_parser().parse_args([])

        assert args.environment is None
        assert args.seed is None
        assert args.config is None


class TestYamlConfig:
    def test_loads_mapping(self, seed_cli, tmp_path):
        path = tmp_path / "seed.yaml"
        path.write_text("environment: examples\nseed: 7\ntrace_volume: 20\n")

        assert seed_cli.load_config_from_yaml(path) == {
            "environment": "examples",
            "seed": 7,
            "trace_volume": 20,
        }

    def test_missing_file(self, seed_cli, tmp_path):
        with pytest.raises(FileNotFoundError):
            seed_cli.load_config_from_yaml(tmp_path / "missing.yaml")

    def test_rejects_unknown_keys(self, seed_cli, tmp_path):
        path = tmp_path / "seed.yaml"
        path.write_text("seed: 1\ndatabase_url: postgres://elsewhere\n")

        with pytest.raises(ValueError, match="database_url"):
            seed_cli.load_config_from_yaml(path)

    def test_rejects_non_mapping(self, seed_cli, tmp_path):
        path = tmp_path / "seed.yaml"
        path.write_text("- examples\n")

        with pytest.raises(ValueError, match="mapping"):
            seed_cli.load_config_from_yaml(path)


class TestBuildConfig:
    def test_flags_override_yaml(self, seed_cli, tmp_path):
        path = tmp_path / "seed.yaml"
        path.write_text("environment: examples\nseed: 7\ntrace_volume: 20\n")
        args = seed_cli.create_parser().parse_args(["--config", str(path), "--seed", "9"])

        config = seed_cli.build_config(args)

        assert config.environment is SeedEnvironment.EXAMPLES
        assert config.seed == 9
        assert config.trace_volume == 20

    def test_environment_drives_trace_volume(self, seed_cli):
        args = seed_cli.create_parser().parse_args(["--environment", "load"])

        with patch(
            "app.core.config.get_settings", return_value=Settings(seed_load_trace_volume=500)
        ):
            config = seed_cli.build_config(args)

        assert config.trace_volume == 500


class TestRun:
    async def test_refuses_production(self, seed_cli, session_maker, capsys):
        args = seed_cli.create_parser().parse_args([])

        with patch.object(seed_cli, "get_settings", return_value=Settings(app_env="production")):
            assert await seed_cli.run(args) == 1

        session_maker.assert_not_called()
        assert "production" in capsys.readouterr().out

    async def test_status_allowed_in_production(self, seed_cli, session_maker, capsys):
        args = seed_cli.create_parser().parse_args(["--status"])

        with (
            patch.object(seed_cli, "get_settings", return_value=Settings(app_env="production")),
            patch.object(seed_cli, "DataSeeder") as seeder_cls,
        ):
            seeder_cls.return_value.get_current_counts = AsyncMock(
                return_value={"traces": 3, "observations": 12}
            )
            assert await seed_cli.run(args) == 0

        out = capsys.readouterr().out
        assert "traces" in out
        assert "15" in out

    async def test_verify_reports_errors(self, seed_cli, session_maker, capsys):
        args = seed_cli.create_parser().parse_args(["--verify"])

        with patch.object(seed_cli, "DataSeeder") as seeder_cls:
            seeder_cls.return_value.verify_data_integrity = AsyncMock(
                return_value=["Found 2 duplicate prompt versions"]
            )
            assert await seed_cli.run(args) == 1

        assert "Found 2 duplicate prompt versions" in capsys.readouterr().out

    async def test_failed_run_rolls_back(self, seed_cli, session_maker, session):
        args = seed_cli.create_parser().parse_args([])

        with (
            patch.object(seed_cli, "DataSeeder") as seeder_cls,
            pytest.raises(RuntimeError),
        ):
            seeder_cls.return_value.run = AsyncMock(side_effect=RuntimeError("boom"))
            await seed_cli.run(args)

        session.rollback.assert_awaited_once()

    async def test_invalid_config_file_exits_nonzero(self, seed_cli, session_maker, tmp_path):
        args = seed_cli.create_parser().parse_args(["--config", str(tmp_path / "nope.yaml")])

        assert await seed_cli.run(args) == 1
        session_maker.assert_not_called()
