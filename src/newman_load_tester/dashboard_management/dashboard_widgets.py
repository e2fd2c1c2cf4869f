"""Well-known load test dashboard widgets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote


@dataclass(frozen=True)
class WidgetTemplate:  # pylint: disable=too-many-instance-attributes
    """Fixed layout and style of one metric widget keyed by title."""

    title: str
    metric_name: str
    view: str
    stat: str
    x: int
    y: int
    width: int
    height: int


DISTRIBUTION_WIDGET = WidgetTemplate(
    title="Load Test Distribution",
    metric_name="total-runs",
    view="pie",
    stat="Sum",
    x=0,
    y=0,
    width=12,
    height=6,
)
FAILED_ASSERTIONS_WIDGET = WidgetTemplate(
    title="Failed Assertions by Collection",
    metric_name="failed-assertions",
    view="timeSeries",
    stat="Sum",
    x=12,
    y=0,
    width=12,
    height=6,
)
WELL_KNOWN_WIDGETS = (DISTRIBUTION_WIDGET, FAILED_ASSERTIONS_WIDGET)


def build_widget(template: WidgetTemplate, *, region: str) -> dict[str, Any]:
    """Create an empty metric widget from its template."""
    return {
        "type": "metric",
        "x": template.x,
        "y": template.y,
        "width": template.width,
        "height": template.height,
        "properties": {
            "title": template.title,
            "view": template.view,
            "stacked": False,
            "region": region,
            "stat": template.stat,
            "period": 300,
            "metrics": [],
        },
    }


def build_metric_entry(
    template: WidgetTemplate, *, namespace: str, dimension_name: str, name: str
) -> list[str]:
    return [namespace, template.metric_name, dimension_name, name]


def dashboard_url(region: str, dashboard_name: str) -> str:
    """CloudWatch console link for a dashboard."""
    return (
        f"https://{region}.console.aws.amazon.com/cloudwatch/home?region={region}"
        f"#dashboards:name={quote(dashboard_name)}"
    )
