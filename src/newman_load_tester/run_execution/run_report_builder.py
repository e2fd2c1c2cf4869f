"""Normalization of raw runner output into run reports."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .run_contracts import ExecutionCounts, RunExecutionError, RunFailure, RunReport, RunStats


class RunResultError(RunExecutionError):
    """Raised when the runner's summary lacks the fields a report needs."""


def build_run_report(run: Mapping[str, Any]) -> RunReport:
    """Map a Newman `run` summary onto a RunReport."""
    stats = run.get("stats")
    timings = run.get("timings")
    if not isinstance(stats, Mapping) or not isinstance(timings, Mapping):
        raise RunResultError("Run summary must contain stats and timings.")
    try:
        run_stats = RunStats(
            requests=ExecutionCounts.from_raw(stats.get("requests")),
            assertions=ExecutionCounts.from_raw(stats.get("assertions")),
            prerequest_scripts=ExecutionCounts.from_raw(stats.get("prerequestScripts")),
            average_response_time=float(timings.get("responseAverage") or 0),
            run_time=float(timings.get("completed") or 0) - float(timings.get("started") or 0),
        )
    except (TypeError, ValueError) as exc:
        raise RunResultError(f"Run summary contains non-numeric statistics: {exc}") from exc
    failures = tuple(_build_failure(failure) for failure in run.get("failures") or ())
    return RunReport(stats=run_stats, failures=failures)


def _build_failure(failure: Mapping[str, Any]) -> RunFailure:
    source = failure.get("source") or {}
    error = failure.get("error") or {}
    return RunFailure(
        request=source.get("name"),
        test=error.get("test"),
        message=error.get("message"),
        url=describe_request(source.get("request")),
    )


def describe_request(request: Mapping[str, Any] | None) -> str | None:
    """Render `"<METHOD> <host.parts>/<path/parts>"`; `None` when the request is unknown."""
    if not isinstance(request, Mapping):
        return None
    url = request.get("url") or {}
    host = _segments(url.get("host"))
    path = _segments(url.get("path"))
    rendered_path = "/" + "/".join(path) if path else ""
    return f"{request.get('method')} {'.'.join(host)}{rendered_path}"


def _segments(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value]
    return []
