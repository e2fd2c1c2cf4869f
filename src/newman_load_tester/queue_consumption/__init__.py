"""Queue consumption exports."""

from .queue_drain import DrainSummary, decode_messages, drain_queue
from .queue_readers import (
    KafkaQueueReader,
    QueueReader,
    QueueReadError,
    SqsQueueReader,
    create_queue_reader,
)
from .queued_messages import QueuedMessage, decode_run_event

__all__ = [
    "DrainSummary",
    "decode_messages",
    "drain_queue",
    "KafkaQueueReader",
    "QueueReader",
    "QueueReadError",
    "SqsQueueReader",
    "create_queue_reader",
    "QueuedMessage",
    "decode_run_event",
]
