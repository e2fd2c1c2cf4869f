"""Resolution of collection and environment definitions for a run event."""

from __future__ import annotations

import json
from typing import Any, Protocol
from urllib.parse import quote

from newman_load_tester.distribution_planning.distribution_models import RunEvent

from .run_contracts import RunExecutionError

# A hosted definition is handed to the runner as a URL, a stored one as parsed JSON.
CollectionSource = str | dict[str, Any]


class CollectionResolutionError(RunExecutionError):
    """Raised when a collection or environment definition cannot be obtained."""


class BlobStore(Protocol):  # pylint: disable=too-few-public-methods
    """Fetches raw bytes by key."""

    def get(self, key: str) -> bytes: ...


class S3BlobStore:  # pylint: disable=too-few-public-methods
    """BlobStore reading objects from one S3 bucket."""

    def __init__(self, bucket: str, s3_client: Any) -> None:
        self._bucket = bucket
        self._client = s3_client

    def get(self, key: str) -> bytes:
        response = self._client.get_object(Bucket=self._bucket, Key=key)
        return response["Body"].read()


class BlobCache:
    """Parsed definitions keyed by blob path.

    Entries are never evicted or invalidated; a cache lives only as long as the
    executor that owns it.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str) -> Any:
        return self._entries[path]

    def put(self, path: str, definition: Any) -> None:
        self._entries[path] = definition


class CollectionResolver:
    """Turns the references of a run event into runner inputs."""

    def __init__(
        self,
        blob_store: BlobStore | None,
        cache: BlobCache,
        *,
        postman_api_host: str,
    ) -> None:
        self._blob_store = blob_store
        self._cache = cache
        self._postman_api_host = postman_api_host

    def resolve_collection(self, event: RunEvent) -> CollectionSource:
        if event.has_hosted_collection:
            return self.hosted_url(
                "collections", event.postman_collection_id, event.postman_api_key
            )
        if event.s3_collection_path:
            return self._load_blob(event.s3_collection_path)
        raise CollectionResolutionError("Run event does not reference a collection.")

    def resolve_environment(self, event: RunEvent) -> CollectionSource | None:
        if event.has_hosted_environment:
            return self.hosted_url(
                "environments", event.postman_environment_id, event.postman_api_key
            )
        if event.s3_environment_path:
            return self._load_blob(event.s3_environment_path)
        return None

    def hosted_url(self, kind: str, definition_id: str | None, api_key: str | None) -> str:
        return (
            f"https://{self._postman_api_host}/{kind}/{quote(definition_id or '', safe='')}"
            f"?apikey={quote(api_key or '', safe='')}"
        )

    def _load_blob(self, path: str) -> Any:
        if path in self._cache:
            return self._cache.get(path)
        if self._blob_store is None:
            raise CollectionResolutionError(
                f"Cannot load {path}: storage.bucket is not configured."
            )
        try:
            raw = self._blob_store.get(path)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise CollectionResolutionError(f"Failed to fetch {path}: {exc}") from exc
        try:
            definition = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CollectionResolutionError(f"{path} is not valid JSON: {exc}") from exc
        self._cache.put(path, definition)
        return definition
