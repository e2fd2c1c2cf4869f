"""Dashboard management exports."""

from .dashboard_merger import DashboardMetricMerger, merge_distribution_names
from .dashboard_store import CloudWatchDashboardStore, DashboardStore
from .dashboard_widgets import (
    DISTRIBUTION_WIDGET,
    FAILED_ASSERTIONS_WIDGET,
    WELL_KNOWN_WIDGETS,
    dashboard_url,
)

__all__ = [
    "DashboardMetricMerger",
    "merge_distribution_names",
    "CloudWatchDashboardStore",
    "DashboardStore",
    "DISTRIBUTION_WIDGET",
    "FAILED_ASSERTIONS_WIDGET",
    "WELL_KNOWN_WIDGETS",
    "dashboard_url",
]
