"""Queue reader adapter tests."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pytest
from confluent_kafka import KafkaError
from newman_load_tester.configuration.runtime_settings import KafkaSettings
from newman_load_tester.queue_consumption.queue_readers import (
    KafkaQueueReader,
    QueueReadError,
    SqsQueueReader,
)


def _kafka_settings(timeout_seconds: int = 10) -> KafkaSettings:
    return KafkaSettings(
        bootstrap_servers=("localhost:9092",),
        topic="run-events",
        group_id="runners",
        security={},
        timeout_seconds=timeout_seconds,
        poll_interval_ms=100,
        auto_offset_reset="earliest",
    )


class FakeError:
    def __init__(self, code_value: int, text: str = "boom") -> None:
        self._code_value = code_value
        self._text = text

    def code(self) -> int:
        return self._code_value

    def __str__(self) -> str:
        return self._text


class FakeRecord:
    def __init__(self, payload: bytes, offset: int, *, error_obj: object | None = None) -> None:
        self._payload = payload
        self._offset = offset
        self._error = error_obj

    def error(self) -> object | None:
        return self._error

    def value(self) -> bytes:
        return self._payload

    def topic(self) -> str:
        return "run-events"

    def partition(self) -> int:
        return 0

    def offset(self) -> int:
        return self._offset


class FakeConsumer:
    def __init__(self, records: Iterable[FakeRecord]) -> None:
        self.records = list(records)
        self._index = 0
        self.subscriptions: list[list[str]] = []
        self.commits: list[tuple[Any, bool]] = []
        self.closed = False

    def subscribe(self, topics: list[str], **kwargs: Any) -> None:
        self.subscriptions.append(topics)

    def poll(self, timeout: float) -> FakeRecord | None:
        if self._index >= len(self.records):
            return None
        record = self.records[self._index]
        self._index += 1
        return record

    def commit(self, message: Any = None, asynchronous: bool = True) -> None:
        self.commits.append((message, asynchronous))

    def close(self) -> None:
        self.closed = True


class FakeSqsClient:
    def __init__(self, messages: list[dict[str, Any]]) -> None:
        self._messages = messages
        self.receive_calls: list[dict[str, Any]] = []
        self.deleted: list[dict[str, Any]] = []

    def receive_message(self, **kwargs: Any) -> dict[str, Any]:
        self.receive_calls.append(kwargs)
        return {"Messages": self._messages} if self._messages else {}

    def delete_message(self, **kwargs: Any) -> None:
        self.deleted.append(kwargs)


def test_sqs_reader_long_polls_and_deletes_on_acknowledge() -> None:
    client = FakeSqsClient([{"MessageId": "m-1", "Body": "{}", "ReceiptHandle": "r-1"}])
    reader = SqsQueueReader("https://sqs.example/runs", client, wait_time_seconds=5)

    messages = reader.receive(50)
    reader.acknowledge(messages[0])

    assert client.receive_calls == [
        {"QueueUrl": "https://sqs.example/runs", "MaxNumberOfMessages": 10, "WaitTimeSeconds": 5}
    ]
    assert messages[0].message_id == "m-1"
    assert client.deleted == [{"QueueUrl": "https://sqs.example/runs", "ReceiptHandle": "r-1"}]


def test_sqs_reader_returns_empty_list_when_queue_is_empty() -> None:
    assert SqsQueueReader("url", FakeSqsClient([]), wait_time_seconds=1).receive(5) == []


def test_kafka_reader_collects_records_until_poll_returns_nothing() -> None:
    consumer = FakeConsumer(
        [
            FakeRecord(b'{"name": "a"}', 4),
            FakeRecord(b"", 5, error_obj=FakeError(KafkaError._PARTITION_EOF)),
            FakeRecord(b'{"name": "b"}', 6),
        ]
    )
    reader = KafkaQueueReader(_kafka_settings(), consumer=consumer)

    messages = reader.receive(10)

    assert consumer.subscriptions == [["run-events"]]
    assert [message.message_id for message in messages] == ["run-events-0-4", "run-events-0-6"]
    assert messages[1].body == '{"name": "b"}'


def test_kafka_reader_stops_at_max_messages_and_subscribes_once() -> None:
    consumer = FakeConsumer([FakeRecord(b"{}", offset) for offset in range(5)])
    reader = KafkaQueueReader(_kafka_settings(), consumer=consumer)

    first = reader.receive(3)
    second = reader.receive(3)

    assert len(first) == 3
    assert len(second) == 2
    assert consumer.subscriptions == [["run-events"]]


def test_kafka_reader_returns_empty_after_timeout() -> None:
    reader = KafkaQueueReader(_kafka_settings(timeout_seconds=0), consumer=FakeConsumer([]))

    assert reader.receive(10) == []


def test_kafka_reader_raises_on_broker_error() -> None:
    consumer = FakeConsumer([FakeRecord(b"", 0, error_obj=FakeError(1, "broker down"))])

    with pytest.raises(QueueReadError, match="broker down"):
        KafkaQueueReader(_kafka_settings(), consumer=consumer).receive(10)


def test_kafka_reader_commits_acknowledged_record_and_closes() -> None:
    record = FakeRecord(b"{}", 0)
    consumer = FakeConsumer([record])
    reader = KafkaQueueReader(_kafka_settings(), consumer=consumer)

    reader.acknowledge(reader.receive(1)[0])
    reader.close()

    assert consumer.commits == [(record, False)]
    assert consumer.closed is True
