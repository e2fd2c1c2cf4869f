"""Distribution parsing and validation service."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from .distribution_models import REFERENCE_KEYS, Distribution

logger = logging.getLogger(__name__)

FULL_PERCENTAGE = 100


class DistributionError(Exception):
    """Raised when the distributions of a trigger request cannot be queued."""


def parse_distributions(payload: Any) -> list[Distribution]:
    """Convert the `distributions` field of a trigger request into entities."""
    if payload is None:
        return []
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise DistributionError("distributions must be a list of objects.")
    return [_parse_distribution(item, index) for index, item in enumerate(payload)]


def _parse_distribution(item: Any, index: int) -> Distribution:
    if not isinstance(item, Mapping):
        raise DistributionError(f"distributions[{index}] must be an object.")
    values: dict[str, Any] = {}
    for attribute, key in REFERENCE_KEYS:
        value = item.get(key)
        if value is not None and not isinstance(value, str):
            raise DistributionError(f"distributions[{index}].{key} must be a string.")
        values[attribute] = value
    values["percentage"] = _parse_percentage(item.get("percentage"), index)
    return Distribution(**values)


def _parse_percentage(value: Any, index: int) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DistributionError(f"distributions[{index}].percentage must be a number.")
    if not 0 <= value <= FULL_PERCENTAGE:
        raise DistributionError(
            f"distributions[{index}].percentage must be between 0 and {FULL_PERCENTAGE}."
        )
    return value


def validate_distributions(distributions: list[Distribution]) -> list[Distribution]:
    """Warn about incomplete distributions and default missing percentages.

    The list is updated in place and returned. Entries are never dropped: a
    distribution without a collection is kept and only reported.
    """
    for distribution in distributions:
        if distribution.uses_hosted_definitions and not distribution.postman_api_key:
            logger.warning(
                "%s uses a Postman collection or environment but does not have an API key "
                "provided.",
                distribution.label,
            )
        if not distribution.has_collection:
            logger.warning("%s does not have a collection provided.", distribution.label)

        if not distribution.percentage:
            logger.warning(
                "%s was not given a distribution percentage, so it will be defaulted to 100%%.",
                distribution.label,
            )
            distribution.percentage = FULL_PERCENTAGE

    return distributions


def ensure_distribution_total(distributions: Sequence[Distribution]) -> None:
    """Fail unless at least one distribution exists and the percentages total exactly 100."""
    if not distributions:
        raise DistributionError("No valid collections were provided.")
    total = math.fsum(distribution.percentage or 0 for distribution in distributions)
    if total != FULL_PERCENTAGE:
        raise DistributionError(
            f"Provided collection distributions do not equal 100 (got {total:g})."
        )
