"""Run metrics and the CloudWatch metrics sink."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .run_contracts import RunReport

COUNT = "Count"
MILLISECONDS = "Milliseconds"


@dataclass(frozen=True)
class MetricDatum:
    """One metric value, optionally scoped by dimensions."""

    name: str
    value: float
    unit: str
    dimensions: tuple[tuple[str, str], ...] = ()

    def to_cloudwatch(self) -> dict[str, Any]:
        datum: dict[str, Any] = {"MetricName": self.name, "Value": self.value, "Unit": self.unit}
        if self.dimensions:
            datum["Dimensions"] = [{"Name": key, "Value": value} for key, value in self.dimensions]
        return datum


def build_run_metrics(
    report: RunReport, *, name: str | None, dimension_name: str
) -> list[MetricDatum]:
    """Unlabeled run metrics, plus the same set labeled by name for named runs."""
    assertions = report.stats.assertions
    base = [
        MetricDatum("total-runs", 1, COUNT),
        MetricDatum("failed-assertions", assertions.failed, COUNT),
        MetricDatum("successful-assertions", assertions.succeeded, COUNT),
        MetricDatum("average-run-duration", report.stats.run_time, MILLISECONDS),
        MetricDatum("average-response-time", report.stats.average_response_time, MILLISECONDS),
    ]
    if not name:
        return base
    labeled = [
        MetricDatum(datum.name, datum.value, datum.unit, ((dimension_name, name),))
        for datum in base
    ]
    return base + labeled


class MetricsSink(Protocol):  # pylint: disable=too-few-public-methods
    """Receives metric data for a namespace."""

    def put_metrics(self, namespace: str, metrics: Sequence[MetricDatum]) -> None: ...


class CloudWatchMetricsSink:  # pylint: disable=too-few-public-methods
    """MetricsSink wrapping a boto3 CloudWatch client."""

    def __init__(self, cloudwatch_client: Any) -> None:
        self._client = cloudwatch_client

    def put_metrics(self, namespace: str, metrics: Sequence[MetricDatum]) -> None:
        if not metrics:
            return
        self._client.put_metric_data(
            Namespace=namespace, MetricData=[datum.to_cloudwatch() for datum in metrics]
        )
