"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import (
    ConfigurationError,
    build_configuration,
    load_configuration,
    load_configuration_from_environment,
    load_document,
)
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

__all__ = [
    "AwsSettings",
    "Configuration",
    "DashboardSettings",
    "KafkaSettings",
    "MetricsSettings",
    "QueueSettings",
    "RunnerSettings",
    "StorageSettings",
    "ThroughputSettings",
    "ConfigurationError",
    "build_configuration",
    "load_configuration",
    "load_configuration_from_environment",
    "load_document",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
