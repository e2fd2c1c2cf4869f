"""Queue reader adapters for the sqs and kafka backends."""

from __future__ import annotations

import time
from typing import Any, Protocol

from confluent_kafka import Consumer, KafkaError

from newman_load_tester.aws_clients import create_aws_client
from newman_load_tester.configuration import Configuration, ConfigurationError
from newman_load_tester.configuration.runtime_settings import KafkaSettings
from newman_load_tester.kafka_clients import create_kafka_client, kafka_client_config

from .queued_messages import QueuedMessage

SQS_MAX_RECEIVE = 10


class QueueReadError(Exception):
    """Raised when the queue cannot be read."""


class QueueReader(Protocol):
    """Receives run event messages and acknowledges processed ones."""

    def receive(self, max_messages: int) -> list[QueuedMessage]: ...

    def acknowledge(self, message: QueuedMessage) -> None: ...

    def close(self) -> None: ...


class SqsQueueReader:
    """QueueReader long-polling an SQS queue; acknowledging deletes the message."""

    def __init__(self, queue_url: str, sqs_client: Any, *, wait_time_seconds: int) -> None:
        self._queue_url = queue_url
        self._client = sqs_client
        self._wait_time_seconds = wait_time_seconds

    def receive(self, max_messages: int) -> list[QueuedMessage]:
        response = self._client.receive_message(
            QueueUrl=self._queue_url,
            MaxNumberOfMessages=max(1, min(max_messages, SQS_MAX_RECEIVE)),
            WaitTimeSeconds=self._wait_time_seconds,
        )
        return [
            QueuedMessage(
                message_id=message["MessageId"],
                body=message["Body"],
                receipt=message["ReceiptHandle"],
            )
            for message in response.get("Messages", [])
        ]

    def acknowledge(self, message: QueuedMessage) -> None:
        self._client.delete_message(QueueUrl=self._queue_url, ReceiptHandle=message.receipt)

    def close(self) -> None:
        return None


class KafkaConsumerProtocol(Protocol):
    """Protocol implemented by both real and fake consumers."""

    def subscribe(self, topics: list[str], **kwargs: Any) -> None: ...

    def poll(self, timeout: float) -> Any: ...

    def commit(self, message: Any = None, asynchronous: bool = True) -> Any: ...

    def close(self) -> None: ...


class KafkaQueueReader:
    """QueueReader polling a Kafka topic; acknowledging commits the record offset.

    Kafka offsets are positional: committing a record also moves the group past
    earlier uncommitted records of the same partition.
    """

    def __init__(
        self, kafka_settings: KafkaSettings, consumer: KafkaConsumerProtocol | None = None
    ) -> None:
        self._settings = kafka_settings
        self._consumer = consumer or self._create_consumer()
        self._subscribed = False

    def receive(self, max_messages: int) -> list[QueuedMessage]:
        if not self._subscribed:
            self._consumer.subscribe([self._settings.topic])
            self._subscribed = True
        messages: list[QueuedMessage] = []
        deadline = time.monotonic() + self._settings.timeout_seconds
        while len(messages) < max_messages and time.monotonic() < deadline:
            record = self._consumer.poll(timeout=self._settings.poll_interval_ms / 1000.0)
            if record is None:
                if messages:
                    break
                continue
            if record.error():
                if record.error().code() == KafkaError._PARTITION_EOF:
                    continue
                raise QueueReadError(f"Kafka error: {record.error()}")
            value = record.value()
            messages.append(
                QueuedMessage(
                    message_id=f"{record.topic()}-{record.partition()}-{record.offset()}",
                    body=value.decode("utf-8") if isinstance(value, bytes) else str(value or ""),
                    receipt=record,
                )
            )
        return messages

    def acknowledge(self, message: QueuedMessage) -> None:
        self._consumer.commit(message=message.receipt, asynchronous=False)

    def close(self) -> None:
        self._consumer.close()

    def _create_consumer(self) -> KafkaConsumerProtocol:
        config = kafka_client_config(
            self._settings,
            **{
                "group.id": self._settings.group_id or "newman-load-tester",
                "enable.auto.commit": False,
                "auto.offset.reset": self._settings.auto_offset_reset,
            },
        )
        return create_kafka_client(Consumer, config)


def create_queue_reader(configuration: Configuration) -> QueueReader:
    """Build the queue reader for the configured backend."""
    queue = configuration.queue
    if queue.backend == "kafka":
        if queue.kafka is None:
            raise ConfigurationError("queue.kafka is required for the kafka backend.")
        return KafkaQueueReader(queue.kafka)
    if not queue.url:
        raise ConfigurationError("queue.url is required for the sqs backend.")
    return SqsQueueReader(
        queue.url,
        create_aws_client("sqs", configuration.aws),
        wait_time_seconds=queue.wait_time_seconds,
    )
