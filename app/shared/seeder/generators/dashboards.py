"""Dashboard and widget generator."""

from __future__ import annotations

import random
from typing import Any

from app.shared.seeder.generators.ids import random_uuid


class DashboardGenerator:
    """Generator for the per-project "Performance Overview" dashboard.

    Widget and dashboard ids are suffixed with the project id so every
    project gets its own copy.
    """

    def __init__(self, rng: random.Random) -> None:
        """Initialize the dashboard generator.

        Args:
            rng: Random number generator for reproducibility.
        """
        self.rng = rng

    def generate(self, project_id: str) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Generate two widgets and a dashboard placing them side by side.

        Args:
            project_id: Owning project.

        Returns:
            (``dashboard_widgets`` rows, ``dashboards`` row).
        """
        widgets = [
            {
                "id": f"cabc-{project_id}",
                "project_id": project_id,
                "name": "Trace Counts",
                "description": "Trace Counts by Name Over Time",
                "view": "TRACES",
                "dimensions": [{"field": "name"}],
                "metrics": [{"measure": "count", "agg": "count"}],
                "filters": [],
                "chart_type": "BAR_TIME_SERIES",
                "chart_config": {"type": "BAR_TIME_SERIES"},
            },
            {
                "id": f"cdef-{project_id}",
                "project_id": project_id,
                "name": "Observation Latencies by Model",
                "description": "p95 Observation Latencies by Model Name",
                "view": "OBSERVATIONS",
                "dimensions": [{"field": "providedModelName"}],
                "metrics": [{"measure": "count", "agg": "sum"}],
                "filters": [],
                "chart_type": "LINE_TIME_SERIES",
                "chart_config": {"type": "LINE_TIME_SERIES"},
            },
        ]

        placements = [
            {
                "type": "widget",
                "id": random_uuid(self.rng),
                "widgetId": widget["id"],
                "x": x,
                "y": 0,
                "x_size": 6,
                "y_size": 6,
            }
            for widget, x in zip(widgets, (0, 6), strict=True)
        ]

        dashboard = {
            "id": f"seed-dashboard-{project_id}",
            "project_id": project_id,
            "name": "Performance Overview",
            "description": "Dashboard with various performance metrics",
            "definition": {"widgets": placements},
        }
        return widgets, dashboard
