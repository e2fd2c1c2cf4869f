"""Idempotent merge of distribution names into dashboard metric widgets."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from .dashboard_store import DashboardStore
from .dashboard_widgets import WELL_KNOWN_WIDGETS, build_metric_entry, build_widget

logger = logging.getLogger(__name__)


def merge_distribution_names(
    definition: Mapping[str, Any],
    names: Iterable[str],
    *,
    namespace: str,
    dimension_name: str,
    region: str,
) -> tuple[dict[str, Any], bool]:
    """Return a merged copy of the definition and whether anything changed.

    Each well-known widget is created when no widget carries its title. A
    name already present in a widget's metric entries is never added twice.
    """
    merged = copy.deepcopy(dict(definition))
    widgets: list[dict[str, Any]] = merged.setdefault("widgets", [])
    unique_names = list(dict.fromkeys(name for name in names if name))
    changed = False

    for template in WELL_KNOWN_WIDGETS:
        widget = _find_widget(widgets, template.title)
        if widget is None:
            widget = build_widget(template, region=region)
            widgets.append(widget)
            changed = True
        metrics: list[list[Any]] = widget.setdefault("properties", {}).setdefault("metrics", [])
        present = {
            value for entry in metrics for value in _dimension_values(entry, dimension_name)
        }
        for name in unique_names:
            if name in present:
                continue
            metrics.append(
                build_metric_entry(
                    template, namespace=namespace, dimension_name=dimension_name, name=name
                )
            )
            present.add(name)
            changed = True

    return merged, changed


def _find_widget(widgets: Sequence[dict[str, Any]], title: str) -> dict[str, Any] | None:
    for widget in widgets:
        if widget.get("properties", {}).get("title") == title:
            return widget
    return None


def _dimension_values(entry: Sequence[Any], dimension_name: str) -> Iterator[Any]:
    # Metric entries are [namespace, metric, dim1, value1, ..., {options}?].
    for index in range(2, len(entry) - 1, 2):
        if entry[index] == dimension_name:
            yield entry[index + 1]


class DashboardMetricMerger:  # pylint: disable=too-few-public-methods
    """Adds distribution names to an existing dashboard; never creates one."""

    def __init__(
        self,
        store: DashboardStore,
        *,
        dashboard_name: str,
        namespace: str,
        dimension_name: str,
        region: str,
    ) -> None:
        self._store = store
        self._dashboard_name = dashboard_name
        self._namespace = namespace
        self._dimension_name = dimension_name
        self._region = region

    def merge(self, names: Iterable[str]) -> bool:
        """Merge names into the stored dashboard; return True when it was rewritten."""
        definition = self._store.get(self._dashboard_name)
        if definition is None:
            logger.warning(
                "Dashboard %s does not exist; distribution names were not added.",
                self._dashboard_name,
            )
            return False
        merged, changed = merge_distribution_names(
            definition,
            names,
            namespace=self._namespace,
            dimension_name=self._dimension_name,
            region=self._region,
        )
        if not changed:
            return False
        self._store.put(self._dashboard_name, merged)
        logger.info("Dashboard %s updated with distribution names.", self._dashboard_name)
        return True
