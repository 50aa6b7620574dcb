#!/usr/bin/env python
"""Database seeder CLI.

Provision the baseline tenant and, optionally, synthetic observability data.

Usage:
    # Baseline org, project, users and API keys (docker-compose setup)
    uv run python scripts/seed.py

    # Demo organization plus example traces, datasets and evaluations
    uv run python scripts/seed.py --environment examples --seed 42

    # Load testing volume
    uv run python scripts/seed.py --environment load --trace-volume 50000

    # Show current counts / verify integrity
    uv run python scripts/seed.py --status
    uv run python scripts/seed.py --verify
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

import yaml

from app.core.config import get_settings
from app.core.database import dispose_engine, get_session_maker
from app.core.logging import configure_logging, get_logger
from app.shared.seeder import DataSeeder, SeedEnvironment, SeederConfig, SeederResult

logger = get_logger("scripts.seed")

CONFIG_KEYS = {
    "environment",
    "seed",
    "trace_volume",
    "chunk_size",
    "examples_trace_volume",
    "load_trace_volume",
    "env_tags",
    "color_tags",
}


def load_config_from_yaml(path: Path) -> dict[str, Any]:
    """Load seeder overrides from a YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Overrides for SeederConfig fields.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config file is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open() as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")

    unknown = set(data) - CONFIG_KEYS
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    return data


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="LLM Observatory Database Seeder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Baseline only
  seed.py

  # Example data with a fixed seed
  seed.py --environment examples --seed 7

  # Load configuration from YAML
  seed.py --config seed.yaml
        """,
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--status",
        action="store_true",
        help="Show current data counts",
    )
    mode_group.add_argument(
        "--verify",
        action="store_true",
        help="Verify data integrity",
    )

    parser.add_argument(
        "--environment",
        choices=[e.value for e in SeedEnvironment],
        help="What to seed: default (baseline), examples or load (default: default)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--trace-volume",
        type=int,
        help="Number of traces to generate (default depends on environment)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        help="Records per insert chunk (default: SEED_CHUNK_SIZE)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Load configuration from YAML file (flags take precedence)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable detailed logging",
    )

    return parser


def build_config(args: argparse.Namespace) -> SeederConfig:
    """Merge settings, YAML overrides and CLI flags into a SeederConfig."""
    overrides: dict[str, Any] = {}
    if args.config:
        overrides.update(load_config_from_yaml(args.config))
    flags = {
        "environment": args.environment,
        "seed": args.seed,
        "trace_volume": args.trace_volume,
        "chunk_size": args.chunk_size,
    }
    overrides.update({key: value for key, value in flags.items() if value is not None})
    return SeederConfig.from_settings(**overrides)


def print_counts(counts: dict[str, int], title: str = "Current Data Counts") -> None:
    """Print table counts in a formatted way."""
    print(f"\n{title}:")
    print("-" * 40)
    for table, count in counts.items():
        print(f"  {table:<30} {count:>8,}")
    print("-" * 40)
    print(f"  {'Total':<30} {sum(counts.values()):>8,}")
    print()


def print_result(result: SeederResult) -> None:
    """Print a summary of a seeder run."""
    print("\nSeeding Complete!")
    print("-" * 40)
    print(f"  Environment:      {result.environment:>8}")
    print(f"  Projects:         {result.projects_count:>8,}")
    print(f"  API keys created: {result.api_keys_created:>8,}")
    print(f"  Prompts:          {result.prompts_count:>8,}")
    print(f"  Traces:           {result.traces_count:>8,}")
    print(f"  Observations:     {result.observations_count:>8,}")
    print(f"  Scores:           {result.scores_count:>8,}")
    print(f"  Sessions:         {result.sessions_count:>8,}")
    print(f"  Comments:         {result.comments_count:>8,}")
    print(f"  Queue items:      {result.queue_items_count:>8,}")
    print(f"  Datasets:         {result.datasets_count:>8,}")
    print(f"  Dataset items:    {result.dataset_items_count:>8,}")
    print(f"  Dashboards:       {result.dashboards_count:>8,}")
    print("-" * 40)
    print(f"  Seed used:        {result.seed:>8}")
    print()


async def run(args: argparse.Namespace) -> int:
    """Run the selected operation against the configured database."""
    settings = get_settings()

    if not (args.status or args.verify):
        if settings.is_production and not settings.seeder_allow_production:
            print("ERROR: Cannot run seeder in production environment.")
            print("Set SEEDER_ALLOW_PRODUCTION=true to override (not recommended).")
            return 1

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    seeder = DataSeeder(config)
    session_maker = get_session_maker()

    async with session_maker() as session:
        if args.status:
            print_counts(await seeder.get_current_counts(session))
            return 0

        if args.verify:
            print("Verifying data integrity...")
            errors = await seeder.verify_data_integrity(session)
            if errors:
                print("ERRORS FOUND:")
                for error in errors:
                    print(f"  - {error}")
                return 1
            print("All integrity checks passed!")
            return 0

        print("Configuration:")
        print(f"  Environment:  {config.environment.value}")
        print(f"  Seed:         {config.seed}")
        print(f"  Trace volume: {config.trace_volume}")
        print()

        try:
            result = await seeder.run(session)
        except Exception:
            await session.rollback()
            raise

    print_result(result)
    return 0


async def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else None)

    try:
        return await run(args)
    except Exception as e:
        logger.exception("seeder.run.failed", error=str(e), error_type=type(e).__name__)
        return 1
    finally:
        await dispose_engine()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
