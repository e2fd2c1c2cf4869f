"""Throughput control exports."""

from .lambda_concurrency_client import ConcurrencyControl, LambdaConcurrencyControl
from .throughput_governor import (
    MAX_DRAIN_BATCH_SIZE,
    ThroughputGovernor,
    ThroughputLimitError,
    resolve_batch_size,
)
from .throughput_models import ConcurrencyQuota, ThroughputPlan, ThroughputRequest

__all__ = [
    "ConcurrencyControl",
    "LambdaConcurrencyControl",
    "MAX_DRAIN_BATCH_SIZE",
    "ThroughputGovernor",
    "ThroughputLimitError",
    "resolve_batch_size",
    "ConcurrencyQuota",
    "ThroughputPlan",
    "ThroughputRequest",
]
