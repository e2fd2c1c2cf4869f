"""Distribution planning entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Attribute name -> queue message key, in message key order.
REFERENCE_KEYS: tuple[tuple[str, str], ...] = (
    ("name", "name"),
    ("s3_collection_path", "s3CollectionPath"),
    ("postman_api_key", "postmanApiKey"),
    ("postman_collection_id", "postmanCollectionId"),
    ("s3_environment_path", "s3EnvironmentPath"),
    ("postman_environment_id", "postmanEnvironmentId"),
)


class InvalidRunEventError(ValueError):
    """Raised when a queued payload does not describe a run event."""


@dataclass
class Distribution:  # pylint: disable=too-many-instance-attributes
    """Weighted reference to one collection and its share of the total load."""

    percentage: float | None = None
    name: str | None = None
    s3_collection_path: str | None = None
    postman_api_key: str | None = None
    postman_collection_id: str | None = None
    s3_environment_path: str | None = None
    postman_environment_id: str | None = None

    @property
    def label(self) -> str:
        """Name used in log lines."""
        return self.name or "Unnamed distribution"

    @property
    def has_collection(self) -> bool:
        return bool(self.postman_collection_id or self.s3_collection_path)

    @property
    def uses_hosted_definitions(self) -> bool:
        return bool(self.postman_collection_id or self.postman_environment_id)


@dataclass(frozen=True)
class RunEvent:
    """One self-contained run of a distribution's collection.

    Every field is optional; an unset field is ``None`` and is left out of the
    queue message entirely.
    """

    name: str | None = None
    s3_collection_path: str | None = None
    postman_api_key: str | None = None
    postman_collection_id: str | None = None
    s3_environment_path: str | None = None
    postman_environment_id: str | None = None

    @classmethod
    def from_distribution(cls, distribution: Distribution) -> RunEvent:
        """Copy the reference fields that are set on the distribution."""
        values = {
            attribute: getattr(distribution, attribute) or None for attribute, _ in REFERENCE_KEYS
        }
        return cls(**values)

    @classmethod
    def from_payload(cls, payload: Any) -> RunEvent:
        """Build a run event from a decoded queue message body."""
        if not isinstance(payload, Mapping):
            raise InvalidRunEventError("Run event payload must be an object.")
        values: dict[str, str | None] = {}
        for attribute, key in REFERENCE_KEYS:
            value = payload.get(key)
            if value is not None and not isinstance(value, str):
                raise InvalidRunEventError(f"Run event field '{key}' must be a string.")
            values[attribute] = value or None
        return cls(**values)

    @property
    def has_hosted_collection(self) -> bool:
        return bool(self.postman_collection_id and self.postman_api_key)

    @property
    def has_hosted_environment(self) -> bool:
        return bool(self.postman_environment_id and self.postman_api_key)

    def to_payload(self) -> dict[str, str]:
        """Return the queue message body, omitting unset fields."""
        payload: dict[str, str] = {}
        for attribute, key in REFERENCE_KEYS:
            value = getattr(self, attribute)
            if value:
                payload[key] = value
        return payload

