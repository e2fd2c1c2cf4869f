"""confluent_kafka client construction shared by the kafka queue backend."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from newman_load_tester.configuration.runtime_settings import KafkaSettings

KAFKA_CLIENT_LOGGER = logging.getLogger("newman_load_tester.kafka.client")
KAFKA_CLIENT_LOGGER.addHandler(logging.NullHandler())
KAFKA_CLIENT_LOGGER.propagate = False
KAFKA_CLIENT_LOGGER.setLevel(logging.CRITICAL + 1)

ClientT = TypeVar("ClientT")


def kafka_client_config(settings: KafkaSettings, **overrides: Any) -> dict[str, Any]:
    """Bootstrap servers, then the given overrides, then security settings."""
    config: dict[str, Any] = {"bootstrap.servers": ",".join(settings.bootstrap_servers)}
    config.update(overrides)
    config.update(settings.security)
    return config


def create_kafka_client(client_class: Callable[..., ClientT], config: dict[str, Any]) -> ClientT:
    """Instantiate a Producer/Consumer with librdkafka logs routed to the silenced logger."""
    try:
        return client_class(config, logger=KAFKA_CLIENT_LOGGER)
    except TypeError:
        # Older/mock client implementations may not support the logger kwarg.
        return client_class(config)
