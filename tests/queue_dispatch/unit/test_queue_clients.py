"""Queue client adapter tests."""

from __future__ import annotations

import threading
import time
from typing import Any

import pytest
from newman_load_tester.configuration.loader import ConfigurationError, build_configuration
from newman_load_tester.configuration.runtime_settings import KafkaSettings
from newman_load_tester.distribution_planning.distribution_models import RunEvent
from newman_load_tester.queue_dispatch.batch_dispatcher import BatchDispatcher
from newman_load_tester.queue_dispatch.dispatch_outcomes import QueueEntry
from newman_load_tester.queue_dispatch.queue_clients import (
    KafkaQueueClient,
    SqsQueueClient,
    create_queue_client,
)


class FakeSqsClient:
    def __init__(self, response: dict[str, Any]) -> None:
        self.calls: list[dict[str, Any]] = []
        self._response = response

    def send_message_batch(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(kwargs)
        return self._response


class FakeProducer:
    def __init__(self, outcomes: dict[bytes, Any]) -> None:
        self.produced: list[tuple[str, bytes]] = []
        self.flush_timeouts: list[float] = []
        self._outcomes = outcomes
        self._callbacks: list[tuple[bytes, Any]] = []

    def produce(self, topic: str, value: bytes, on_delivery) -> None:
        self.produced.append((topic, value))
        self._callbacks.append((value, on_delivery))

    def flush(self, timeout: float) -> int:
        self.flush_timeouts.append(timeout)
        pending = 0
        for value, callback in self._callbacks:
            outcome = self._outcomes.get(value, None)
            if outcome == "pending":
                pending += 1
                continue
            callback(outcome, None)
        return pending


class SharedQueueProducer:
    """Delivers every pending record on whichever thread calls flush()."""

    def __init__(self) -> None:
        self._pending: list[Any] = []
        self._lock = threading.Lock()

    def produce(self, topic: str, value: bytes, on_delivery) -> None:
        with self._lock:
            self._pending.append(on_delivery)

    def flush(self, timeout: float) -> int:
        with self._lock:
            callbacks, self._pending = self._pending, []
        time.sleep(0.01)
        for callback in callbacks:
            callback(None, None)
        return 0


def _kafka_settings() -> KafkaSettings:
    return KafkaSettings(
        bootstrap_servers=("broker:9092",),
        topic="run-events",
        group_id=None,
        security={},
        timeout_seconds=5,
        poll_interval_ms=100,
        auto_offset_reset="earliest",
    )


def _entries(*bodies: str) -> list[QueueEntry]:
    return [QueueEntry(entry_id=str(index), body=body) for index, body in enumerate(bodies)]


def test_sqs_client_sends_entries_and_maps_failures() -> None:
    sqs = FakeSqsClient(
        {
            "Successful": [{"Id": "0"}],
            "Failed": [
                {"Id": "1", "Code": "InternalError", "Message": "try again"},
                {"Id": "2", "Code": "Throttled"},
            ],
        }
    )

    failures = SqsQueueClient("https://sqs.example/runs", sqs).send_batch(
        _entries("{}", "{}", "{}")
    )

    assert sqs.calls == [
        {
            "QueueUrl": "https://sqs.example/runs",
            "Entries": [
                {"Id": "0", "MessageBody": "{}"},
                {"Id": "1", "MessageBody": "{}"},
                {"Id": "2", "MessageBody": "{}"},
            ],
        }
    ]
    assert failures == {"1": "try again", "2": "Throttled"}


def test_kafka_client_produces_each_entry_and_collects_errors() -> None:
    producer = FakeProducer({b'{"name": "b"}': "broker down"})

    failures = KafkaQueueClient(_kafka_settings(), producer=producer).send_batch(
        _entries('{"name": "a"}', '{"name": "b"}')
    )

    assert producer.produced == [
        ("run-events", b'{"name": "a"}'),
        ("run-events", b'{"name": "b"}'),
    ]
    assert producer.flush_timeouts == [5]
    assert failures == {"1": "broker down"}


def test_kafka_client_marks_unconfirmed_deliveries_as_failed() -> None:
    producer = FakeProducer({b"{}": "pending"})

    failures = KafkaQueueClient(_kafka_settings(), producer=producer).send_batch(_entries("{}"))

    assert failures == {"0": "Delivery not confirmed within 5s."}


def test_create_queue_client_requires_sqs_url() -> None:
    configuration = build_configuration({}, path=None)

    with pytest.raises(ConfigurationError, match="queue.url"):
        create_queue_client(configuration)


def test_kafka_client_confirms_every_entry_when_batches_share_the_producer() -> None:
    client = KafkaQueueClient(_kafka_settings(), producer=SharedQueueProducer())
    events = [RunEvent(name=f"run-{index}") for index in range(80)]

    report = BatchDispatcher(client, max_workers=8).dispatch(events)

    assert report.failed_events == 0
    assert report.queued_events == 80
