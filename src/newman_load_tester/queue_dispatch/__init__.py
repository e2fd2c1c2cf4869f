"""Queue dispatch exports."""

from .batch_dispatcher import MAX_BATCH_ENTRIES, BatchDispatcher, build_batches
from .dispatch_outcomes import BatchSendResult, DispatchReport, QueueEntry
from .queue_clients import KafkaQueueClient, QueueClient, SqsQueueClient, create_queue_client

__all__ = [
    "MAX_BATCH_ENTRIES",
    "BatchDispatcher",
    "build_batches",
    "BatchSendResult",
    "DispatchReport",
    "QueueEntry",
    "QueueClient",
    "SqsQueueClient",
    "KafkaQueueClient",
    "create_queue_client",
]
