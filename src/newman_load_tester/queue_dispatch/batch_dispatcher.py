"""Batched, concurrent dispatch of run events to the queue."""

from __future__ import annotations

import json
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from newman_load_tester.distribution_planning.distribution_models import RunEvent

from .dispatch_outcomes import BatchSendResult, DispatchReport, QueueEntry
from .queue_clients import QueueClient

MAX_BATCH_ENTRIES = 10


def build_batches(
    events: Sequence[RunEvent], batch_size: int = MAX_BATCH_ENTRIES
) -> list[list[QueueEntry]]:
    """Split events into consecutive batches whose entry ids restart at "0"."""
    if not 0 < batch_size <= MAX_BATCH_ENTRIES:
        raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_ENTRIES}.")
    batches: list[list[QueueEntry]] = []
    for start in range(0, len(events), batch_size):
        chunk = events[start : start + batch_size]
        batches.append(
            [
                QueueEntry(entry_id=str(index), body=json.dumps(event.to_payload()))
                for index, event in enumerate(chunk)
            ]
        )
    return batches


class BatchDispatcher:  # pylint: disable=too-few-public-methods
    """Submits every batch concurrently and reports each batch's outcome.

    A failing batch never stops the others; its error is recorded in the
    returned report instead of being raised.
    """

    def __init__(self, queue_client: QueueClient, *, max_workers: int = 8) -> None:
        self._queue_client = queue_client
        self._max_workers = max(1, max_workers)

    def dispatch(self, events: Sequence[RunEvent]) -> DispatchReport:
        batches = build_batches(events)
        if not batches:
            return DispatchReport(results=())
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(batches))) as executor:
            futures = [
                executor.submit(self._send_single, index, batch)
                for index, batch in enumerate(batches)
            ]
            results = tuple(future.result() for future in futures)
        return DispatchReport(results=results)

    def _send_single(self, batch_index: int, batch: list[QueueEntry]) -> BatchSendResult:
        try:
            failed_entries = self._queue_client.send_batch(batch)
            return BatchSendResult.sent(batch_index, len(batch), failed_entries)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            return BatchSendResult.failed(batch_index, len(batch), exc)
