"""Dashboard ORM models.

A widget is a saved chart query (view + dimensions + metrics + filters);
a dashboard places widgets on a grid via its JSONB ``definition``.
"""

from typing import Any

from sqlalchemy import CheckConstraint, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.shared.models import StringIdMixin, TimestampMixin

CHART_TYPES = (
    "LINE_TIME_SERIES",
    "BAR_TIME_SERIES",
    "HORIZONTAL_BAR",
    "VERTICAL_BAR",
    "PIE",
    "NUMBER",
    "HISTOGRAM",
    "PIVOT_TABLE",
)


class DashboardWidget(StringIdMixin, TimestampMixin, Base):
    """Saved chart definition.

    Attributes:
        view: Data view queried (TRACES, OBSERVATIONS, SCORES_NUMERIC, ...).
        dimensions: Group-by fields, e.g. ``[{"field": "name"}]``.
        metrics: Measures, e.g. ``[{"measure": "count", "agg": "count"}]``.
        chart_config: Renderer options; ``type`` mirrors ``chart_type``.
    """

    __tablename__ = "dashboard_widgets"

    project_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    view: Mapped[str] = mapped_column(String(50))
    dimensions: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, default=list)
    metrics: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, default=list)
    filters: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, default=list)
    chart_type: Mapped[str] = mapped_column(String(50))
    chart_config: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict)

    __table_args__ = (
        CheckConstraint(f"chart_type IN {CHART_TYPES}", name="ck_dashboard_widget_chart_type"),
    )


class Dashboard(StringIdMixin, TimestampMixin, Base):
    """Grid layout of widgets."""

    __tablename__ = "dashboards"

    project_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    definition: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict)
