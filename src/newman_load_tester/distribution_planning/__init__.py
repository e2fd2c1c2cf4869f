"""Distribution planning exports."""

from .distribution_models import Distribution, InvalidRunEventError, RunEvent
from .distribution_validation import (
    DistributionError,
    ensure_distribution_total,
    parse_distributions,
    validate_distributions,
)
from .event_fanout import DEFAULT_RUN_COUNT, create_run_events, planned_event_count

__all__ = [
    "Distribution",
    "RunEvent",
    "InvalidRunEventError",
    "DistributionError",
    "parse_distributions",
    "validate_distributions",
    "ensure_distribution_total",
    "DEFAULT_RUN_COUNT",
    "create_run_events",
    "planned_event_count",
]
