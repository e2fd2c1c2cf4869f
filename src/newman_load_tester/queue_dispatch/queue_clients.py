"""Queue client adapters for the sqs and kafka backends."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from confluent_kafka import Producer

from newman_load_tester.aws_clients import create_aws_client
from newman_load_tester.configuration import Configuration, ConfigurationError
from newman_load_tester.configuration.runtime_settings import KafkaSettings
from newman_load_tester.kafka_clients import create_kafka_client, kafka_client_config

from .dispatch_outcomes import QueueEntry


class QueueClient(Protocol):  # pylint: disable=too-few-public-methods
    """Sends one batch and returns failure messages keyed by entry id."""

    def send_batch(self, entries: Sequence[QueueEntry]) -> Mapping[str, str]: ...


class SqsQueueClient:  # pylint: disable=too-few-public-methods
    """Queue client backed by SQS `SendMessageBatch`."""

    def __init__(self, queue_url: str, sqs_client: Any) -> None:
        self._queue_url = queue_url
        self._client = sqs_client

    def send_batch(self, entries: Sequence[QueueEntry]) -> Mapping[str, str]:
        response = self._client.send_message_batch(
            QueueUrl=self._queue_url,
            Entries=[{"Id": entry.entry_id, "MessageBody": entry.body} for entry in entries],
        )
        return {
            failure["Id"]: failure.get("Message") or failure.get("Code") or "Unknown failure"
            for failure in response.get("Failed", [])
        }


class KafkaProducerProtocol(Protocol):
    """Subset of the confluent_kafka Producer API used by the client."""

    def produce(self, topic: str, value: bytes, on_delivery: Callable[..., None]) -> None: ...

    def flush(self, timeout: float) -> int: ...


class KafkaQueueClient:  # pylint: disable=too-few-public-methods
    """Queue client producing each entry as one Kafka record and awaiting delivery."""

    def __init__(
        self, kafka_settings: KafkaSettings, producer: KafkaProducerProtocol | None = None
    ) -> None:
        self._settings = kafka_settings
        self._producer = producer or self._create_producer()
        # Delivery callbacks run on whichever thread is inside flush(), so batches
        # sharing the producer are produced and flushed one at a time.
        self._send_lock = threading.Lock()

    def send_batch(self, entries: Sequence[QueueEntry]) -> Mapping[str, str]:
        failures: dict[str, str] = {}
        delivered: set[str] = set()

        def _delivery_callback(entry_id: str) -> Callable[[Any, Any], None]:
            def _on_delivery(error: Any, _message: Any) -> None:
                if error is None:
                    delivered.add(entry_id)
                else:
                    failures[entry_id] = str(error)

            return _on_delivery

        with self._send_lock:
            for entry in entries:
                self._producer.produce(
                    self._settings.topic,
                    value=entry.body.encode("utf-8"),
                    on_delivery=_delivery_callback(entry.entry_id),
                )
            self._producer.flush(self._settings.timeout_seconds)
        for entry in entries:
            if entry.entry_id not in delivered and entry.entry_id not in failures:
                failures[entry.entry_id] = (
                    f"Delivery not confirmed within {self._settings.timeout_seconds}s."
                )
        return failures

    def _create_producer(self) -> KafkaProducerProtocol:
        return create_kafka_client(Producer, kafka_client_config(self._settings))


def create_queue_client(configuration: Configuration) -> QueueClient:
    """Build the queue client for the configured backend."""
    queue = configuration.queue
    if queue.backend == "kafka":
        if queue.kafka is None:
            raise ConfigurationError("queue.kafka is required for the kafka backend.")
        return KafkaQueueClient(queue.kafka)
    if not queue.url:
        raise ConfigurationError("queue.url is required for the sqs backend.")
    return SqsQueueClient(queue.url, create_aws_client("sqs", configuration.aws))
