"""Throughput governor: consumer concurrency limit and drain batch size."""

from __future__ import annotations

import logging

from newman_load_tester.configuration.runtime_settings import ThroughputSettings

from .lambda_concurrency_client import ConcurrencyControl
from .throughput_models import ConcurrencyQuota, ThroughputPlan, ThroughputRequest

logger = logging.getLogger(__name__)

MAX_DRAIN_BATCH_SIZE = 100


class ThroughputLimitError(Exception):
    """Raised when requested consumer limits cannot be honored."""


def resolve_batch_size(requested: int | None, default: int) -> int:
    """Use the requested drain batch size when it lies in (0, 100], else the default."""
    if requested is not None and 0 < requested <= MAX_DRAIN_BATCH_SIZE:
        return requested
    return default


class ThroughputGovernor:
    """Validates and applies consumer limits for one function/event source mapping.

    `plan` only reads; `apply_concurrency` and `apply_batch_size` only write and
    are independent of each other.
    """

    def __init__(self, settings: ThroughputSettings, control: ConcurrencyControl) -> None:
        self._settings = settings
        self._control = control

    def plan(self, request: ThroughputRequest) -> ThroughputPlan:
        """Validate a request against the account quota.

        Raises:
          ThroughputLimitError: If the requested reservation exceeds the
            unreserved ceiling plus the function's current reservation.
        """
        reserved = request.reserved_concurrency or None
        if reserved is not None:
            if reserved < 0:
                raise ThroughputLimitError("throughputLimit must not be negative.")
            quota = self.read_quota()
            if reserved > quota.allowed:
                raise ThroughputLimitError(
                    f"Requested throughput limit {reserved} exceeds the available concurrency "
                    f"of {quota.allowed} ({quota.unreserved_ceiling} unreserved + "
                    f"{quota.current_reservation} already reserved by "
                    f"{self._settings.function_name})."
                )
        return ThroughputPlan(
            reserved_concurrency=reserved,
            batch_size=resolve_batch_size(request.batch_size, self._settings.default_batch_size),
        )

    def read_quota(self) -> ConcurrencyQuota:
        current = self._control.get_reserved_concurrency(self._settings.function_name)
        return ConcurrencyQuota(
            unreserved_ceiling=self._control.get_unreserved_concurrency(),
            current_reservation=current or 0,
        )

    def apply_concurrency(self, plan: ThroughputPlan) -> None:
        function_name = self._settings.function_name
        if plan.reserved_concurrency is None:
            self._control.delete_reserved_concurrency(function_name)
            logger.info("Cleared reserved concurrency for %s.", function_name)
            return
        self._control.put_reserved_concurrency(function_name, plan.reserved_concurrency)
        logger.info(
            "Reserved concurrency for %s set to %d.", function_name, plan.reserved_concurrency
        )

    def apply_batch_size(self, plan: ThroughputPlan) -> None:
        self._control.update_batch_size(self._settings.event_source_mapping_uuid, plan.batch_size)
        logger.info(
            "Event source mapping %s enabled with batch size %d.",
            self._settings.event_source_mapping_uuid,
            plan.batch_size,
        )
