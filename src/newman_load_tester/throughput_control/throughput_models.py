"""Throughput control entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ThroughputRequest:
    """Caller-requested consumer limits; `None` means not requested."""

    reserved_concurrency: int | None = None
    batch_size: int | None = None


@dataclass(frozen=True)
class ConcurrencyQuota:
    """Account capacity available to the consumer function."""

    unreserved_ceiling: int
    current_reservation: int

    @property
    def allowed(self) -> int:
        """Largest reservation the function may hold.

        The function's own reservation is already excluded from the account's
        unreserved pool, so it is added back.
        """
        return self.unreserved_ceiling + self.current_reservation


@dataclass(frozen=True)
class ThroughputPlan:
    """Validated consumer settings, ready to be written."""

    reserved_concurrency: int | None
    batch_size: int
