"""Fan-out of weighted distributions into individual run events."""

from __future__ import annotations

import math
from collections.abc import Sequence

from .distribution_models import Distribution, RunEvent

DEFAULT_RUN_COUNT = 1000


def planned_event_count(count: int, percentage: float) -> int:
    """Number of events one distribution receives; rounded up per distribution."""
    return math.ceil(count * percentage / 100)


def create_run_events(count: int, distributions: Sequence[Distribution]) -> list[RunEvent]:
    """Expand validated distributions into a flat, distribution-ordered event list.

    Each distribution is rounded up independently, so the result can hold more
    events than ``count`` (e.g. 7 runs over 33/33/34 yields 9 events).
    """
    events: list[RunEvent] = []
    for distribution in distributions:
        event = RunEvent.from_distribution(distribution)
        events.extend([event] * planned_event_count(count, distribution.percentage or 0))
    return events
