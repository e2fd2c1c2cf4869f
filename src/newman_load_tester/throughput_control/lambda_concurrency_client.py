"""Concurrency and event source mapping control backed by AWS Lambda."""

from __future__ import annotations

from typing import Any, Protocol


class ConcurrencyControl(Protocol):
    """Quota reads and consumer writes used by the throughput governor."""

    def get_unreserved_concurrency(self) -> int: ...

    def get_reserved_concurrency(self, function_name: str) -> int | None: ...

    def put_reserved_concurrency(self, function_name: str, reserved: int) -> None: ...

    def delete_reserved_concurrency(self, function_name: str) -> None: ...

    def update_batch_size(self, mapping_uuid: str, batch_size: int) -> None: ...


class LambdaConcurrencyControl:
    """ConcurrencyControl implementation wrapping a boto3 Lambda client."""

    def __init__(self, lambda_client: Any) -> None:
        self._client = lambda_client

    def get_unreserved_concurrency(self) -> int:
        response = self._client.get_account_settings()
        return int(response["AccountLimit"]["UnreservedConcurrentExecutions"])

    def get_reserved_concurrency(self, function_name: str) -> int | None:
        response = self._client.get_function_concurrency(FunctionName=function_name)
        reserved = response.get("ReservedConcurrentExecutions")
        return None if reserved is None else int(reserved)

    def put_reserved_concurrency(self, function_name: str, reserved: int) -> None:
        self._client.put_function_concurrency(
            FunctionName=function_name, ReservedConcurrentExecutions=reserved
        )

    def delete_reserved_concurrency(self, function_name: str) -> None:
        self._client.delete_function_concurrency(FunctionName=function_name)

    def update_batch_size(self, mapping_uuid: str, batch_size: int) -> None:
        self._client.update_event_source_mapping(
            UUID=mapping_uuid, BatchSize=batch_size, Enabled=True
        )
