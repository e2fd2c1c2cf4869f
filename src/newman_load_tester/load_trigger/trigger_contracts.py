"""Load trigger entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from newman_load_tester.distribution_planning import (
    DEFAULT_RUN_COUNT,
    Distribution,
    DistributionError,
    parse_distributions,
)

GENERIC_FAILURE_MESSAGE = "Load test could not be triggered."


class TriggerValidationError(Exception):
    """Raised when a trigger request is malformed or cannot be honored."""


@dataclass(frozen=True)
class TriggerOptions:
    """Operational options applied before queueing."""

    throughput_limit: int | None = None
    batch_size: int | None = None
    update_dashboard: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> TriggerOptions:
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise TriggerValidationError("options must be an object.")
        update_dashboard = payload.get("updateDashboardWithDistributionNames", False)
        if not isinstance(update_dashboard, bool):
            raise TriggerValidationError(
                "options.updateDashboardWithDistributionNames must be a boolean."
            )
        return cls(
            throughput_limit=_optional_int(payload.get("throughputLimit"), "throughputLimit"),
            batch_size=_optional_int(payload.get("batchSize"), "batchSize"),
            update_dashboard=update_dashboard,
        )


@dataclass(frozen=True)
class TriggerRequest:
    """Parsed trigger input."""

    distributions: list[Distribution]
    count: int = DEFAULT_RUN_COUNT
    options: TriggerOptions = field(default_factory=TriggerOptions)

    @classmethod
    def from_payload(cls, payload: Any) -> TriggerRequest:
        if not isinstance(payload, Mapping):
            raise TriggerValidationError("Trigger request must be an object.")
        count = payload.get("count")
        if count is None:
            count = DEFAULT_RUN_COUNT
        elif isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise TriggerValidationError("count must be a positive integer.")
        try:
            distributions = parse_distributions(payload.get("distributions"))
        except DistributionError as exc:
            raise TriggerValidationError(str(exc)) from exc
        return cls(
            distributions=distributions,
            count=count,
            options=TriggerOptions.from_payload(payload.get("options")),
        )


@dataclass(frozen=True)
class TriggerOutcome:
    """Result of one trigger; `message` is set only on failure."""

    dashboard_url: str | None
    queued_events: int
    failed_events: int
    message: str | None

    @property
    def is_ok(self) -> bool:
        return self.message is None

    @staticmethod
    def succeeded(
        dashboard_url: str | None, queued_events: int, failed_events: int = 0
    ) -> TriggerOutcome:
        return TriggerOutcome(
            dashboard_url=dashboard_url,
            queued_events=queued_events,
            failed_events=failed_events,
            message=None,
        )

    @staticmethod
    def failed(message: str) -> TriggerOutcome:
        return TriggerOutcome(dashboard_url=None, queued_events=0, failed_events=0, message=message)

    def to_response(self) -> dict[str, Any]:
        if self.message is not None:
            return {"message": self.message}
        return {
            "dashboardUrl": self.dashboard_url,
            "queuedEvents": self.queued_events,
            "failedEvents": self.failed_events,
        }


def _optional_int(value: Any, field_name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TriggerValidationError(f"options.{field_name} must be an integer.")
    return value
