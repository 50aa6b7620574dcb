"""Dashboards and their widgets."""

from app.features.dashboards.models import Dashboard, DashboardWidget

__all__ = ["Dashboard", "DashboardWidget"]
