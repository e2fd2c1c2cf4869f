"""Bounded worker pool draining run events through executor lanes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from newman_load_tester.distribution_planning.distribution_models import RunEvent

from .newman_runner import clear_scratch_directory
from .run_contracts import RunEventOutcome
from .run_executor import RunExecutor

logger = logging.getLogger(__name__)


class RunWorkerPool:  # pylint: disable=too-few-public-methods
    """Processes events across `parallelism` lanes, each with its own executor.

    Events are assigned to lanes round-robin and run sequentially inside a lane.
    The runner scratch directory is cleared once every lane has finished.
    """

    def __init__(
        self,
        executor_factory: Callable[[], RunExecutor],
        *,
        parallelism: int,
        scratch_dir: Path,
    ) -> None:
        self._executor_factory = executor_factory
        self._parallelism = max(1, parallelism)
        self._scratch_dir = scratch_dir

    def process(self, events: Sequence[RunEvent]) -> list[RunEventOutcome]:
        """Return one outcome per event, in input order."""
        if not events:
            return []
        lane_count = min(self._parallelism, len(events))
        lanes = [list(range(start, len(events), lane_count)) for start in range(lane_count)]
        outcomes: list[RunEventOutcome | None] = [None] * len(events)
        try:
            with ThreadPoolExecutor(max_workers=lane_count) as pool:
                futures = {
                    pool.submit(self._run_lane, [events[index] for index in lane]): lane
                    for lane in lanes
                }
                for future, lane in futures.items():
                    for index, outcome in zip(lane, future.result()):
                        outcomes[index] = outcome
        finally:
            removed = clear_scratch_directory(self._scratch_dir)
            logger.debug("Removed %d runner scratch entries.", removed)
        return [outcome for outcome in outcomes if outcome is not None]

    def _run_lane(self, events: list[RunEvent]) -> list[RunEventOutcome]:
        executor = self._executor_factory()
        return [executor.process(event) for event in events]
