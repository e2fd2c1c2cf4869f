"""Local draining of the run event queue."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from newman_load_tester.distribution_planning.distribution_models import (
    InvalidRunEventError,
    RunEvent,
)
from newman_load_tester.run_execution.worker_pool import RunWorkerPool

from .queue_readers import QueueReader
from .queued_messages import QueuedMessage, decode_run_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrainSummary:
    """Counters of one drain session."""

    batches: int
    succeeded: int
    failed: int
    undecodable: int


def decode_messages(
    messages: Sequence[QueuedMessage],
) -> tuple[list[tuple[QueuedMessage, RunEvent]], list[QueuedMessage]]:
    """Split messages into decoded run events and bodies that are not run events."""
    decoded: list[tuple[QueuedMessage, RunEvent]] = []
    undecodable: list[QueuedMessage] = []
    for message in messages:
        try:
            decoded.append((message, decode_run_event(message.body)))
        except InvalidRunEventError as exc:
            logger.error("Message %s is not a run event: %s", message.message_id, exc)
            undecodable.append(message)
    return decoded, undecodable


def drain_queue(
    reader: QueueReader,
    pool: RunWorkerPool,
    *,
    batch_size: int,
    max_batches: int | None = None,
) -> DrainSummary:
    """Process batches until the queue returns nothing (or `max_batches` is reached).

    Only successfully executed events are acknowledged; everything else is left
    to the queue's redelivery policy.
    """
    batches = succeeded = failed = undecodable = 0
    try:
        while max_batches is None or batches < max_batches:
            messages = reader.receive(batch_size)
            if not messages:
                break
            batches += 1
            decoded, rejected = decode_messages(messages)
            undecodable += len(rejected)
            outcomes = pool.process([event for _, event in decoded])
            for (message, _), outcome in zip(decoded, outcomes):
                if outcome.is_ok:
                    reader.acknowledge(message)
                    succeeded += 1
                else:
                    failed += 1
    finally:
        reader.close()
    summary = DrainSummary(
        batches=batches, succeeded=succeeded, failed=failed, undecodable=undecodable
    )
    logger.info(
        "Drained %d batches: %d succeeded, %d failed, %d undecodable.",
        summary.batches,
        summary.succeeded,
        summary.failed,
        summary.undecodable,
    )
    return summary
