"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AwsSettings:
    """AWS client settings shared by every boto3 client."""

    region: str | None
    max_attempts: int


@dataclass(frozen=True)
class KafkaSettings:
    """Kafka producer/consumer configuration used by the kafka queue backend."""

    bootstrap_servers: tuple[str, ...]
    topic: str
    group_id: str | None
    security: Mapping[str, object]
    timeout_seconds: int
    poll_interval_ms: int
    auto_offset_reset: str


@dataclass(frozen=True)
class QueueSettings:
    """Run event queue configuration."""

    backend: str
    url: str | None
    wait_time_seconds: int
    kafka: KafkaSettings | None


@dataclass(frozen=True)
class StorageSettings:
    """Blob store holding collection and environment definitions."""

    bucket: str | None


@dataclass(frozen=True)
class MetricsSettings:
    """Metrics sink configuration."""

    namespace: str
    dimension_name: str


@dataclass(frozen=True)
class RunnerSettings:
    """Collection runner invocation settings."""

    command: tuple[str, ...]
    scratch_dir: Path
    parallelism: int
    postman_api_host: str
    timeout_ms: int | None


@dataclass(frozen=True)
class ThroughputSettings:
    """Consumer function whose concurrency and drain batch size are governed."""

    function_name: str
    event_source_mapping_uuid: str
    default_batch_size: int


@dataclass(frozen=True)
class DashboardSettings:
    """Monitoring dashboard updated with distribution names."""

    name: str


@dataclass(frozen=True)
class Configuration:  # pylint: disable=too-many-instance-attributes
    """Top-level configuration aggregate."""

    path: Path | None
    aws: AwsSettings
    queue: QueueSettings
    storage: StorageSettings
    metrics: MetricsSettings
    runner: RunnerSettings
    throughput: ThroughputSettings | None
    dashboard: DashboardSettings | None
