"""Run execution entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from newman_load_tester.distribution_planning.distribution_models import RunEvent


class RunExecutionError(Exception):
    """Raised when one run event cannot be executed."""


@dataclass(frozen=True)
class ExecutionCounts:
    """Total/pending/failed counters reported by the collection runner."""

    total: int
    pending: int
    failed: int

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any] | None) -> ExecutionCounts:
        raw = raw or {}
        return cls(
            total=int(raw.get("total", 0)),
            pending=int(raw.get("pending", 0)),
            failed=int(raw.get("failed", 0)),
        )

    @property
    def succeeded(self) -> int:
        return self.total - self.pending - self.failed

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "pending": self.pending, "failed": self.failed}


@dataclass(frozen=True)
class RunStats:
    """Normalized statistics of one collection run; times are in milliseconds."""

    requests: ExecutionCounts
    assertions: ExecutionCounts
    prerequest_scripts: ExecutionCounts
    average_response_time: float
    run_time: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "requests": self.requests.to_dict(),
            "assertions": self.assertions.to_dict(),
            "prerequestScripts": self.prerequest_scripts.to_dict(),
            "averageResponseTime": self.average_response_time,
            "runTime": self.run_time,
        }


@dataclass(frozen=True)
class RunFailure:
    """One failed assertion or script error."""

    request: str | None
    test: str | None
    message: str | None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"request": self.request}
        if self.url is not None:
            payload["url"] = self.url
        payload["test"] = self.test
        payload["message"] = self.message
        return payload


@dataclass(frozen=True)
class RunReport:
    """Normalized result of one run event."""

    stats: RunStats
    failures: tuple[RunFailure, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "failures": [failure.to_dict() for failure in self.failures],
        }


@dataclass(frozen=True)
class RunEventOutcome:
    """Outcome of processing one run event."""

    event: RunEvent
    report: RunReport | None
    error_message: str | None

    @property
    def is_ok(self) -> bool:
        return self.error_message is None

    @staticmethod
    def succeeded(event: RunEvent, report: RunReport) -> RunEventOutcome:
        return RunEventOutcome(event=event, report=report, error_message=None)

    @staticmethod
    def failed(event: RunEvent, error: Exception) -> RunEventOutcome:
        return RunEventOutcome(event=event, report=None, error_message=str(error))
