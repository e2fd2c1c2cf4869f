"""Dashboard definition persistence backed by CloudWatch."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol

from botocore.exceptions import ClientError

_NOT_FOUND_CODES = frozenset({"ResourceNotFound", "ResourceNotFoundException"})


class DashboardStore(Protocol):
    """Get/put a dashboard definition by name."""

    def get(self, name: str) -> dict[str, Any] | None: ...

    def put(self, name: str, definition: Mapping[str, Any]) -> None: ...


class CloudWatchDashboardStore:
    """DashboardStore wrapping a boto3 CloudWatch client."""

    def __init__(self, cloudwatch_client: Any) -> None:
        self._client = cloudwatch_client

    def get(self, name: str) -> dict[str, Any] | None:
        try:
            response = self._client.get_dashboard(DashboardName=name)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return None
            raise
        return json.loads(response.get("DashboardBody") or "{}")

    def put(self, name: str, definition: Mapping[str, Any]) -> None:
        self._client.put_dashboard(DashboardName=name, DashboardBody=json.dumps(definition))
