"""Resolve, execute, normalize and report one run event at a time."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from newman_load_tester.aws_clients import create_aws_client
from newman_load_tester.configuration.runtime_settings import Configuration, MetricsSettings
from newman_load_tester.distribution_planning.distribution_models import RunEvent

from .collection_resolution import BlobCache, CollectionResolver, S3BlobStore
from .newman_runner import CollectionRunner, NewmanCliRunner
from .run_contracts import RunEventOutcome, RunReport
from .run_metrics import CloudWatchMetricsSink, MetricsSink, build_run_metrics
from .run_report_builder import build_run_report

logger = logging.getLogger(__name__)

FAILED_ASSERTIONS_TYPE = "Postman Failed Assertions"


def failed_assertions_type(name: str | None) -> str:
    """Log tag for failed assertions, suffixed with the distribution name when known."""
    if name:
        return f"{FAILED_ASSERTIONS_TYPE} ({name})"
    return FAILED_ASSERTIONS_TYPE


class RunExecutor:
    """Executes run events sequentially with its own blob cache."""

    def __init__(
        self,
        *,
        resolver: CollectionResolver,
        runner: CollectionRunner,
        metrics_sink: MetricsSink,
        metrics_settings: MetricsSettings,
    ) -> None:
        self._resolver = resolver
        self._runner = runner
        self._metrics_sink = metrics_sink
        self._metrics_settings = metrics_settings

    def execute(self, event: RunEvent) -> RunReport:
        """Run one event end to end; any failure propagates to the caller."""
        collection = self._resolver.resolve_collection(event)
        environment = self._resolver.resolve_environment(event)
        raw_run = self._runner.run(collection, environment)
        report = build_run_report(raw_run)
        self._metrics_sink.put_metrics(
            self._metrics_settings.namespace,
            build_run_metrics(
                report, name=event.name, dimension_name=self._metrics_settings.dimension_name
            ),
        )
        _log_report(report, event.name)
        return report

    def process(self, event: RunEvent) -> RunEventOutcome:
        """Execute one event, confining any failure to that event's outcome."""
        try:
            return RunEventOutcome.succeeded(event, self.execute(event))
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.error("Run of %s failed: %s", event.name or "unnamed collection", exc)
            return RunEventOutcome.failed(event, exc)


def _log_report(report: RunReport, name: str | None) -> None:
    if report.failures:
        logger.warning(
            json.dumps(
                {
                    "type": failed_assertions_type(name),
                    "failures": [failure.to_dict() for failure in report.failures],
                }
            )
        )
    elif name:
        logger.info("Successfully ran %s with no failed assertions", name)


def executor_factory_from_configuration(configuration: Configuration) -> Callable[[], RunExecutor]:
    """Share AWS clients across executors; give every executor a fresh cache."""
    bucket = configuration.storage.bucket
    s3_client = create_aws_client("s3", configuration.aws) if bucket else None
    metrics_sink = CloudWatchMetricsSink(create_aws_client("cloudwatch", configuration.aws))
    runner = NewmanCliRunner(configuration.runner)

    def _create_executor() -> RunExecutor:
        blob_store = S3BlobStore(bucket, s3_client) if bucket else None
        resolver = CollectionResolver(
            blob_store,
            BlobCache(),
            postman_api_host=configuration.runner.postman_api_host,
        )
        return RunExecutor(
            resolver=resolver,
            runner=runner,
            metrics_sink=metrics_sink,
            metrics_settings=configuration.metrics,
        )

    return _create_executor
