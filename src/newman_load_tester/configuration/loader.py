"""Configuration loader service."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    AwsSettings,
    Configuration,
    DashboardSettings,
    KafkaSettings,
    MetricsSettings,
    QueueSettings,
    RunnerSettings,
    StorageSettings,
    ThroughputSettings,
)

QUEUE_BACKENDS = ("sqs", "kafka")
DEFAULT_METRICS_NAMESPACE = "load-test"
DEFAULT_DIMENSION_NAME = "Collection"
DEFAULT_SCRATCH_DIR = "/tmp/newman-load-tester"
DEFAULT_POSTMAN_API_HOST = "api.getpostman.com"
DEFAULT_BATCH_SIZE = 10
MAX_BATCH_SIZE = 100
MAX_WAIT_TIME_SECONDS = 20

_ENVIRONMENT_KEYS = {
    "AWS_REGION": ("aws", "region"),
    "QUEUE_BACKEND": ("queue", "backend"),
    "QUEUE_URL": ("queue", "url"),
    "BUCKET_NAME": ("storage", "bucket"),
    "METRICS_NAMESPACE": ("metrics", "namespace"),
    "NEWMAN_COMMAND": ("runner", "command"),
    "NEWMAN_SCRATCH_DIR": ("runner", "scratch_dir"),
    "RUN_PARALLELISM": ("runner", "parallelism"),
    "NEWMAN_TIMEOUT_MS": ("runner", "timeout_ms"),
    "FUNCTION_NAME": ("throughput", "function_name"),
    "EVENT_SOURCE_MAPPING_UUID": ("throughput", "event_source_mapping_uuid"),
    "DEFAULT_BATCH_SIZE": ("throughput", "default_batch_size"),
    "DASHBOARD_NAME": ("dashboard", "name"),
}
_INTEGER_ENVIRONMENT_KEYS = {"RUN_PARALLELISM", "NEWMAN_TIMEOUT_MS", "DEFAULT_BATCH_SIZE"}


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    return build_configuration(parsed, path=path)


def load_configuration_from_environment(environ: Mapping[str, str]) -> Configuration:
    """Build configuration from Lambda-style environment variables."""
    sections: dict[str, dict[str, Any]] = {}
    for variable, (section, key) in _ENVIRONMENT_KEYS.items():
        raw = environ.get(variable)
        if raw is None or not raw.strip():
            continue
        value: Any = raw.strip()
        if variable in _INTEGER_ENVIRONMENT_KEYS:
            try:
                value = int(value)
            except ValueError as exc:
                raise ConfigurationError(f"{variable} must be an integer.") from exc
        sections.setdefault(section, {})[key] = value

    if environ.get("KAFKA_BOOTSTRAP_SERVERS"):
        sections.setdefault("queue", {})["kafka"] = {
            "bootstrap_servers": environ["KAFKA_BOOTSTRAP_SERVERS"],
            "topic": environ.get("KAFKA_TOPIC"),
            "group_id": environ.get("KAFKA_GROUP_ID"),
        }
    return build_configuration(sections, path=None)


def build_configuration(parsed: Mapping[str, Any], *, path: Path | None) -> Configuration:
    """Validate a parsed configuration mapping."""
    return Configuration(
        path=path,
        aws=_parse_aws_section(parsed.get("aws")),
        queue=_parse_queue_section(parsed.get("queue")),
        storage=_parse_storage_section(parsed.get("storage")),
        metrics=_parse_metrics_section(parsed.get("metrics")),
        runner=_parse_runner_section(parsed.get("runner")),
        throughput=_parse_throughput_section(parsed.get("throughput")),
        dashboard=_parse_dashboard_section(parsed.get("dashboard")),
    )


def _parse_aws_section(value: Any) -> AwsSettings:
    section = _optional_mapping(value, "aws")
    region = _optional_string(section.get("region"), "aws.region")
    max_attempts = _require_positive_int(section.get("max_attempts", 3), "aws.max_attempts")
    return AwsSettings(region=region, max_attempts=max_attempts)


def _parse_queue_section(value: Any) -> QueueSettings:
    section = _optional_mapping(value, "queue")
    backend = _require_non_empty_string(section.get("backend", "sqs"), "queue.backend").lower()
    if backend not in QUEUE_BACKENDS:
        raise ConfigurationError(
            f"queue.backend must be one of {', '.join(QUEUE_BACKENDS)}; got '{backend}'."
        )
    url = _optional_string(section.get("url"), "queue.url")
    wait_time_seconds = _require_int_in_range(
        section.get("wait_time_seconds", 5),
        "queue.wait_time_seconds",
        minimum=0,
        maximum=MAX_WAIT_TIME_SECONDS,
    )
    kafka = None
    if backend == "kafka":
        kafka = _parse_kafka_section(section.get("kafka"))
    return QueueSettings(
        backend=backend,
        url=url,
        wait_time_seconds=wait_time_seconds,
        kafka=kafka,
    )


def _parse_kafka_section(value: Any) -> KafkaSettings:
    section = _require_mapping(value, "queue.kafka")
    bootstrap_servers = _normalize_bootstrap_servers(section.get("bootstrap_servers"))
    topic = _require_non_empty_string(section.get("topic"), "queue.kafka.topic")
    group_id = _optional_string(section.get("group_id"), "queue.kafka.group_id")
    security = section.get("security") or {}
    if not isinstance(security, Mapping):
        raise ConfigurationError("queue.kafka.security must be a mapping.")
    timeout_seconds = _require_positive_int(
        section.get("timeout_seconds", 30), "queue.kafka.timeout_seconds"
    )
    poll_interval_ms = _require_positive_int(
        section.get("poll_interval_ms", 500), "queue.kafka.poll_interval_ms"
    )
    auto_offset_reset = _require_non_empty_string(
        section.get("auto_offset_reset", "earliest"), "queue.kafka.auto_offset_reset"
    ).lower()
    return KafkaSettings(
        bootstrap_servers=bootstrap_servers,
        topic=topic,
        group_id=group_id,
        security=dict(security),
        timeout_seconds=timeout_seconds,
        poll_interval_ms=poll_interval_ms,
        auto_offset_reset=auto_offset_reset,
    )


def _parse_storage_section(value: Any) -> StorageSettings:
    section = _optional_mapping(value, "storage")
    return StorageSettings(bucket=_optional_string(section.get("bucket"), "storage.bucket"))


def _parse_metrics_section(value: Any) -> MetricsSettings:
    section = _optional_mapping(value, "metrics")
    namespace = _require_non_empty_string(
        section.get("namespace", DEFAULT_METRICS_NAMESPACE), "metrics.namespace"
    )
    dimension_name = _require_non_empty_string(
        section.get("dimension_name", DEFAULT_DIMENSION_NAME), "metrics.dimension_name"
    )
    return MetricsSettings(namespace=namespace, dimension_name=dimension_name)


def _parse_runner_section(value: Any) -> RunnerSettings:
    section = _optional_mapping(value, "runner")
    command = _normalize_command(section.get("command", "newman"))
    scratch_dir = Path(
        _require_non_empty_string(
            section.get("scratch_dir", DEFAULT_SCRATCH_DIR), "runner.scratch_dir"
        )
    )
    parallelism = _require_positive_int(section.get("parallelism", 4), "runner.parallelism")
    postman_api_host = _require_non_empty_string(
        section.get("postman_api_host", DEFAULT_POSTMAN_API_HOST), "runner.postman_api_host"
    )
    timeout_value = section.get("timeout_ms")
    timeout_ms = (
        None if timeout_value is None else _require_positive_int(timeout_value, "runner.timeout_ms")
    )
    return RunnerSettings(
        command=command,
        scratch_dir=scratch_dir,
        parallelism=parallelism,
        postman_api_host=postman_api_host,
        timeout_ms=timeout_ms,
    )


def _parse_throughput_section(value: Any) -> ThroughputSettings | None:
    if value is None:
        return None
    section = _require_mapping(value, "throughput")
    function_name = _require_non_empty_string(
        section.get("function_name"), "throughput.function_name"
    )
    mapping_uuid = _require_non_empty_string(
        section.get("event_source_mapping_uuid"), "throughput.event_source_mapping_uuid"
    )
    default_batch_size = _require_positive_int(
        section.get("default_batch_size", DEFAULT_BATCH_SIZE), "throughput.default_batch_size"
    )
    if default_batch_size > MAX_BATCH_SIZE:
        raise ConfigurationError(
            f"throughput.default_batch_size must not exceed {MAX_BATCH_SIZE}."
        )
    return ThroughputSettings(
        function_name=function_name,
        event_source_mapping_uuid=mapping_uuid,
        default_batch_size=default_batch_size,
    )


def _parse_dashboard_section(value: Any) -> DashboardSettings | None:
    if value is None:
        return None
    section = _require_mapping(value, "dashboard")
    return DashboardSettings(name=_require_non_empty_string(section.get("name"), "dashboard.name"))


def _normalize_command(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        parts = tuple(part for part in value.split() if part)
    elif isinstance(value, Sequence):
        if not all(isinstance(item, str) for item in value):
            raise ConfigurationError("runner.command entries must be strings.")
        parts = tuple(item.strip() for item in value if item.strip())
    else:
        raise ConfigurationError("runner.command must be a string or list of strings.")
    if not parts:
        raise ConfigurationError("runner.command must not be empty.")
    return parts


def _normalize_bootstrap_servers(value: Any) -> tuple[str, ...]:
    if value is None:
        raise ConfigurationError("queue.kafka.bootstrap_servers is required.")
    servers: list[str] = []
    if isinstance(value, str):
        servers = [item.strip() for item in value.split(",") if item.strip()]
    elif isinstance(value, Sequence):
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError("queue.kafka.bootstrap_servers entries must be strings.")
            stripped = item.strip()
            if stripped:
                servers.append(stripped)
    else:
        raise ConfigurationError(
            "queue.kafka.bootstrap_servers must be a string or list of strings."
        )
    if not servers:
        raise ConfigurationError("queue.kafka.bootstrap_servers must contain at least one server.")
    return tuple(servers)


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    return _require_mapping(value, section_name)


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value


def _require_int_in_range(value: Any, field_name: str, *, minimum: int, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not minimum <= value <= maximum:
        raise ConfigurationError(f"{field_name} must be between {minimum} and {maximum}.")
    return value


def load_document(path: Path | str) -> Any:
    """Load a YAML or JSON document used as CLI input (trigger requests, run events)."""
    document_path = Path(path)
    if not document_path.exists():
        raise ConfigurationError(f"Input file not found: {document_path}")
    text = document_path.read_text(encoding="utf-8")
    if document_path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Failed to parse {document_path}: {exc}") from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {document_path}: {exc}") from exc
