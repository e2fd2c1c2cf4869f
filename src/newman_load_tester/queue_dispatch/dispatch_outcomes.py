"""Queue dispatch domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class QueueEntry:
    """One message of a batch; `entry_id` is unique within its batch only."""

    entry_id: str
    body: str


@dataclass(frozen=True)
class BatchSendResult:
    """Outcome of submitting one batch to the queue."""

    batch_index: int
    entry_count: int
    failed_entries: Mapping[str, str]
    error_message: str | None

    @property
    def queued_count(self) -> int:
        if self.error_message is not None:
            return 0
        return self.entry_count - len(self.failed_entries)

    @property
    def failed_count(self) -> int:
        return self.entry_count - self.queued_count

    @property
    def is_ok(self) -> bool:
        return self.failed_count == 0

    @staticmethod
    def sent(
        batch_index: int, entry_count: int, failed_entries: Mapping[str, str] | None = None
    ) -> BatchSendResult:
        return BatchSendResult(
            batch_index=batch_index,
            entry_count=entry_count,
            failed_entries=dict(failed_entries or {}),
            error_message=None,
        )

    @staticmethod
    def failed(batch_index: int, entry_count: int, error: Exception) -> BatchSendResult:
        return BatchSendResult(
            batch_index=batch_index,
            entry_count=entry_count,
            failed_entries={},
            error_message=str(error),
        )


@dataclass(frozen=True)
class DispatchReport:
    """Aggregate of every batch outcome of one dispatch, in batch order."""

    results: tuple[BatchSendResult, ...]

    @property
    def queued_events(self) -> int:
        return sum(result.queued_count for result in self.results)

    @property
    def failed_events(self) -> int:
        return sum(result.failed_count for result in self.results)

    @property
    def failed_batches(self) -> tuple[BatchSendResult, ...]:
        return tuple(result for result in self.results if not result.is_ok)
