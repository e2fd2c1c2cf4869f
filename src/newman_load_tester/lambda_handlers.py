"""AWS Lambda entry points for triggering and executing load tests."""

from __future__ import annotations

import base64
import logging
import os
from collections.abc import Mapping
from typing import Any

from newman_load_tester.configuration import Configuration, load_configuration_from_environment
from newman_load_tester.distribution_planning import InvalidRunEventError, RunEvent
from newman_load_tester.load_trigger import (
    GENERIC_FAILURE_MESSAGE,
    TriggerOutcome,
    build_trigger_collaborators,
    trigger_load_test,
)
from newman_load_tester.queue_consumption import decode_run_event
from newman_load_tester.run_execution import RunWorkerPool, executor_factory_from_configuration

logger = logging.getLogger(__name__)
# The Lambda runtime leaves the root logger at WARNING; run and trigger progress is INFO.
logging.getLogger("newman_load_tester").setLevel(logging.INFO)


class RunBatchError(Exception):
    """Raised when a Kafka-sourced batch contains failed run events."""


def trigger_handler(event: Mapping[str, Any], _context: Any = None) -> dict[str, Any]:
    """Queue a load test; always returns a response body."""
    try:
        collaborators = build_trigger_collaborators(load_configuration_from_environment(os.environ))
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Load test trigger could not be initialized.")
        return TriggerOutcome.failed(GENERIC_FAILURE_MESSAGE).to_response()
    return trigger_load_test(event, collaborators).to_response()


def run_handler(event: Mapping[str, Any], _context: Any = None) -> dict[str, Any]:
    """Execute queued run events from an SQS or Kafka event source."""
    configuration = load_configuration_from_environment(os.environ)
    pool = _build_pool(configuration)
    if "Records" in event:
        return _process_sqs_records(event["Records"], pool)
    return _process_kafka_records(event.get("records") or {}, pool)


def _build_pool(configuration: Configuration) -> RunWorkerPool:
    return RunWorkerPool(
        executor_factory_from_configuration(configuration),
        parallelism=configuration.runner.parallelism,
        scratch_dir=configuration.runner.scratch_dir,
    )


def _process_sqs_records(records: list[Mapping[str, Any]], pool: RunWorkerPool) -> dict[str, Any]:
    failed_ids: list[str] = []
    decoded: list[tuple[str, RunEvent]] = []
    for record in records:
        try:
            decoded.append((record["messageId"], decode_run_event(record["body"])))
        except InvalidRunEventError as exc:
            logger.error("Message %s is not a run event: %s", record["messageId"], exc)
            failed_ids.append(record["messageId"])

    outcomes = pool.process([run_event for _, run_event in decoded])
    failed_ids.extend(
        message_id for (message_id, _), outcome in zip(decoded, outcomes) if not outcome.is_ok
    )
    # Partial batch response: only failed messages become visible again.
    return {"batchItemFailures": [{"itemIdentifier": message_id} for message_id in failed_ids]}


def _process_kafka_records(
    records: Mapping[str, list[Mapping[str, Any]]], pool: RunWorkerPool
) -> dict[str, Any]:
    events: list[RunEvent] = []
    undecodable = 0
    for partition_records in records.values():
        for record in partition_records:
            try:
                events.append(decode_run_event(base64.b64decode(record.get("value") or "")))
            except ValueError as exc:  # bad base64 or InvalidRunEventError
                logger.error(
                    "Record %s-%s is not a run event: %s",
                    record.get("partition"),
                    record.get("offset"),
                    exc,
                )
                undecodable += 1

    outcomes = pool.process(events)
    failed = undecodable + sum(1 for outcome in outcomes if not outcome.is_ok)
    if failed:
        raise RunBatchError(f"{failed} of {undecodable + len(events)} run events failed.")
    return {"processed": len(outcomes)}
