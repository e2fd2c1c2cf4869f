"""Load trigger flow tests with in-memory collaborators."""

from __future__ import annotations

import json
import logging
import threading
from collections import Counter
from collections.abc import Mapping, Sequence
from typing import Any

from newman_load_tester.configuration.runtime_settings import ThroughputSettings
from newman_load_tester.dashboard_management.dashboard_merger import DashboardMetricMerger
from newman_load_tester.load_trigger.trigger_contracts import GENERIC_FAILURE_MESSAGE
from newman_load_tester.load_trigger.trigger_use_case import (
    TriggerCollaborators,
    trigger_load_test,
)
from newman_load_tester.queue_dispatch.batch_dispatcher import BatchDispatcher
from newman_load_tester.queue_dispatch.dispatch_outcomes import QueueEntry
from newman_load_tester.throughput_control.throughput_governor import ThroughputGovernor

DASHBOARD_URL = "https://eu-west-1.console.aws.amazon.com/cloudwatch/home#dashboards:name=lt"


class RecordingQueueClient:
    def __init__(self, fail_all: bool = False) -> None:
        self.entries: list[QueueEntry] = []
        self._fail_all = fail_all
        self._lock = threading.Lock()

    def send_batch(self, entries: Sequence[QueueEntry]) -> Mapping[str, str]:
        if self._fail_all:
            raise ConnectionError("queue unavailable")
        with self._lock:
            self.entries.extend(entries)
        return {}

    def names(self) -> Counter:
        return Counter(json.loads(entry.body).get("name") for entry in self.entries)


class FakeConcurrencyControl:
    def __init__(self, unreserved: int = 100, barrier: threading.Barrier | None = None) -> None:
        self.unreserved = unreserved
        self.writes: list[tuple[Any, ...]] = []
        self._barrier = barrier

    def _wait(self) -> None:
        if self._barrier is not None:
            self._barrier.wait()

    def get_unreserved_concurrency(self) -> int:
        return self.unreserved

    def get_reserved_concurrency(self, function_name: str) -> int | None:
        return None

    def put_reserved_concurrency(self, function_name: str, reserved: int) -> None:
        self._wait()
        self.writes.append(("put", reserved))

    def delete_reserved_concurrency(self, function_name: str) -> None:
        self._wait()
        self.writes.append(("delete",))

    def update_batch_size(self, mapping_uuid: str, batch_size: int) -> None:
        self._wait()
        self.writes.append(("batch", batch_size))


class InMemoryDashboardStore:
    def __init__(self, barrier: threading.Barrier | None = None) -> None:
        self.definition: dict[str, Any] = {"widgets": []}
        self._barrier = barrier

    def get(self, name: str) -> dict[str, Any] | None:
        if self._barrier is not None:
            self._barrier.wait()
        return self.definition

    def put(self, name: str, definition: Mapping[str, Any]) -> None:
        self.definition = dict(definition)


def _governor(control: FakeConcurrencyControl) -> ThroughputGovernor:
    settings = ThroughputSettings(
        function_name="run-collection", event_source_mapping_uuid="uuid", default_batch_size=10
    )
    return ThroughputGovernor(settings, control)


def _merger(store: InMemoryDashboardStore) -> DashboardMetricMerger:
    return DashboardMetricMerger(
        store,
        dashboard_name="lt",
        namespace="load-test",
        dimension_name="Collection",
        region="eu-west-1",
    )


def _request(*distributions: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {"distributions": list(distributions), **extra}


def test_weighted_request_is_fanned_out_and_queued() -> None:
    client = RecordingQueueClient()
    collaborators = TriggerCollaborators(
        dispatcher=BatchDispatcher(client), dashboard_url=DASHBOARD_URL
    )

    outcome = trigger_load_test(
        _request(
            {"percentage": 60, "name": "A", "s3CollectionPath": "a.json"},
            {"percentage": 40, "name": "B", "s3CollectionPath": "b.json"},
            count=10,
        ),
        collaborators,
    )

    assert outcome.to_response() == {
        "dashboardUrl": DASHBOARD_URL,
        "queuedEvents": 10,
        "failedEvents": 0,
    }
    assert client.names() == {"A": 6, "B": 4}


def test_default_count_produces_thousand_events() -> None:
    client = RecordingQueueClient()

    outcome = trigger_load_test(
        _request({"s3CollectionPath": "a.json"}),
        TriggerCollaborators(dispatcher=BatchDispatcher(client)),
    )

    assert outcome.queued_events == 1000
    assert len(client.entries) == 1000


def test_distributions_not_totalling_hundred_send_nothing(caplog) -> None:
    client = RecordingQueueClient()
    control = FakeConcurrencyControl()

    outcome = trigger_load_test(
        _request({"percentage": 60, "s3CollectionPath": "a.json"}, {"percentage": 30}),
        TriggerCollaborators(dispatcher=BatchDispatcher(client), governor=_governor(control)),
    )

    assert outcome.to_response() == {
        "message": "Provided collection distributions do not equal 100 (got 90)."
    }
    assert client.entries == []
    assert control.writes == []
    assert "do not equal 100" in caplog.text


def test_empty_distributions_are_rejected() -> None:
    client = RecordingQueueClient()

    outcome = trigger_load_test(
        _request(), TriggerCollaborators(dispatcher=BatchDispatcher(client))
    )

    assert outcome.message == "No valid collections were provided."
    assert client.entries == []


def test_throughput_limit_above_quota_aborts_before_any_write() -> None:
    client = RecordingQueueClient()
    control = FakeConcurrencyControl(unreserved=100)
    store = InMemoryDashboardStore()

    outcome = trigger_load_test(
        _request(
            {"name": "A", "s3CollectionPath": "a.json"},
            options={"throughputLimit": 101, "updateDashboardWithDistributionNames": True},
        ),
        TriggerCollaborators(
            dispatcher=BatchDispatcher(client),
            governor=_governor(control),
            dashboard_merger=_merger(store),
        ),
    )

    assert outcome.message is not None
    assert "exceeds the available concurrency of 100" in outcome.message
    assert client.entries == []
    assert control.writes == []
    assert store.definition == {"widgets": []}


def test_throughput_and_dashboard_updates_run_concurrently() -> None:
    barrier = threading.Barrier(3, timeout=5)
    client = RecordingQueueClient()
    control = FakeConcurrencyControl(barrier=barrier)
    store = InMemoryDashboardStore(barrier=barrier)

    outcome = trigger_load_test(
        _request(
            {"percentage": 50, "name": "A", "s3CollectionPath": "a.json"},
            {"percentage": 50, "name": "B", "s3CollectionPath": "b.json"},
            count=4,
            options={
                "throughputLimit": 20,
                "batchSize": 50,
                "updateDashboardWithDistributionNames": True,
            },
        ),
        TriggerCollaborators(
            dispatcher=BatchDispatcher(client),
            governor=_governor(control),
            dashboard_merger=_merger(store),
        ),
    )

    assert outcome.is_ok
    assert sorted(control.writes) == [("batch", 50), ("put", 20)]
    metrics = store.definition["widgets"][0]["properties"]["metrics"]
    assert [entry[3] for entry in metrics] == ["A", "B"]
    assert len(client.entries) == 4


def test_missing_throughput_limit_clears_reservation() -> None:
    control = FakeConcurrencyControl()

    outcome = trigger_load_test(
        _request({"s3CollectionPath": "a.json"}, count=1),
        TriggerCollaborators(
            dispatcher=BatchDispatcher(RecordingQueueClient()), governor=_governor(control)
        ),
    )

    assert outcome.is_ok
    assert sorted(control.writes) == [("batch", 10), ("delete",)]


def test_throughput_options_without_governor_are_rejected() -> None:
    outcome = trigger_load_test(
        _request({"s3CollectionPath": "a.json"}, options={"throughputLimit": 5}),
        TriggerCollaborators(dispatcher=BatchDispatcher(RecordingQueueClient())),
    )

    assert outcome.message is not None
    assert "require the throughput configuration section" in outcome.message


def test_queue_failures_are_reported_not_raised(caplog) -> None:
    with caplog.at_level(logging.ERROR):
        outcome = trigger_load_test(
            _request({"s3CollectionPath": "a.json"}, count=25),
            TriggerCollaborators(dispatcher=BatchDispatcher(RecordingQueueClient(fail_all=True))),
        )

    assert outcome.is_ok
    assert outcome.queued_events == 0
    assert outcome.failed_events == 25
    assert "could not be queued: queue unavailable" in caplog.text


def test_unexpected_errors_return_generic_message(caplog) -> None:
    class BrokenControl(FakeConcurrencyControl):
        def update_batch_size(self, mapping_uuid: str, batch_size: int) -> None:
            raise RuntimeError("AccessDenied")

    client = RecordingQueueClient()

    outcome = trigger_load_test(
        _request({"s3CollectionPath": "a.json"}),
        TriggerCollaborators(
            dispatcher=BatchDispatcher(client), governor=_governor(BrokenControl())
        ),
    )

    assert outcome.to_response() == {"message": GENERIC_FAILURE_MESSAGE}
    assert client.entries == []
    assert "Unexpected error while triggering the load test." in caplog.text
