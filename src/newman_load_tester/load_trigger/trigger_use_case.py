"""Load trigger use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from newman_load_tester.aws_clients import create_aws_client
from newman_load_tester.configuration import Configuration
from newman_load_tester.dashboard_management import (
    CloudWatchDashboardStore,
    DashboardMetricMerger,
    dashboard_url,
)
from newman_load_tester.distribution_planning import (
    Distribution,
    DistributionError,
    create_run_events,
    ensure_distribution_total,
    validate_distributions,
)
from newman_load_tester.queue_dispatch import BatchDispatcher, DispatchReport, create_queue_client
from newman_load_tester.throughput_control import (
    LambdaConcurrencyControl,
    ThroughputGovernor,
    ThroughputLimitError,
    ThroughputPlan,
    ThroughputRequest,
)

from .trigger_contracts import (
    GENERIC_FAILURE_MESSAGE,
    TriggerOptions,
    TriggerOutcome,
    TriggerRequest,
    TriggerValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggerCollaborators:
    """External collaborators of a trigger; governor and merger are optional."""

    dispatcher: BatchDispatcher
    governor: ThroughputGovernor | None = None
    dashboard_merger: DashboardMetricMerger | None = None
    dashboard_url: str | None = None


def trigger_load_test(payload: Any, collaborators: TriggerCollaborators) -> TriggerOutcome:
    """Validate, configure and queue one load test.

    Never raises: validation failures return their reason and anything
    unexpected returns a generic failure message.
    """
    try:
        return _trigger(payload, collaborators)
    except (TriggerValidationError, DistributionError, ThroughputLimitError) as exc:
        logger.error("%s", exc)
        return TriggerOutcome.failed(str(exc))
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Unexpected error while triggering the load test.")
        return TriggerOutcome.failed(GENERIC_FAILURE_MESSAGE)


def _trigger(payload: Any, collaborators: TriggerCollaborators) -> TriggerOutcome:
    request = TriggerRequest.from_payload(payload)
    distributions = validate_distributions(request.distributions)
    ensure_distribution_total(distributions)

    plan = _plan_throughput(request.options, collaborators.governor)
    _apply_operational_settings(plan, request.options, distributions, collaborators)

    events = create_run_events(request.count, distributions)
    report = collaborators.dispatcher.dispatch(events)
    _log_dispatch_failures(report)
    logger.info(
        "Queued %d of %d run events for %d distributions.",
        report.queued_events,
        len(events),
        len(distributions),
    )
    return TriggerOutcome.succeeded(
        collaborators.dashboard_url, report.queued_events, report.failed_events
    )


def _plan_throughput(
    options: TriggerOptions, governor: ThroughputGovernor | None
) -> ThroughputPlan | None:
    if governor is None:
        if options.throughput_limit is not None or options.batch_size is not None:
            raise TriggerValidationError(
                "throughputLimit and batchSize require the throughput configuration section."
            )
        return None
    return governor.plan(
        ThroughputRequest(
            reserved_concurrency=options.throughput_limit, batch_size=options.batch_size
        )
    )


def _apply_operational_settings(
    plan: ThroughputPlan | None,
    options: TriggerOptions,
    distributions: Sequence[Distribution],
    collaborators: TriggerCollaborators,
) -> None:
    tasks: list[Callable[[], Any]] = []
    governor = collaborators.governor
    if plan is not None and governor is not None:
        tasks.append(lambda: governor.apply_concurrency(plan))
        tasks.append(lambda: governor.apply_batch_size(plan))
    if options.update_dashboard:
        merger = collaborators.dashboard_merger
        if merger is None:
            logger.warning("No dashboard is configured; distribution names were not added.")
        else:
            names = [distribution.name for distribution in distributions if distribution.name]
            tasks.append(lambda: merger.merge(names))
    if not tasks:
        return
    with ThreadPoolExecutor(max_workers=len(tasks)) as executor:
        futures = [executor.submit(task) for task in tasks]
        for future in futures:
            future.result()


def _log_dispatch_failures(report: DispatchReport) -> None:
    for result in report.failed_batches:
        if result.error_message is not None:
            logger.error(
                "Batch %d (%d events) could not be queued: %s",
                result.batch_index,
                result.entry_count,
                result.error_message,
            )
        else:
            logger.error(
                "Batch %d: %d of %d events could not be queued: %s",
                result.batch_index,
                len(result.failed_entries),
                result.entry_count,
                dict(result.failed_entries),
            )


def build_trigger_collaborators(configuration: Configuration) -> TriggerCollaborators:
    """Wire AWS/Kafka-backed collaborators from configuration."""
    dispatcher = BatchDispatcher(create_queue_client(configuration))
    governor = None
    if configuration.throughput is not None:
        governor = ThroughputGovernor(
            configuration.throughput,
            LambdaConcurrencyControl(create_aws_client("lambda", configuration.aws)),
        )
    merger = None
    url = None
    if configuration.dashboard is not None:
        cloudwatch = create_aws_client("cloudwatch", configuration.aws)
        region = configuration.aws.region or cloudwatch.meta.region_name
        merger = DashboardMetricMerger(
            CloudWatchDashboardStore(cloudwatch),
            dashboard_name=configuration.dashboard.name,
            namespace=configuration.metrics.namespace,
            dimension_name=configuration.metrics.dimension_name,
            region=region,
        )
        url = dashboard_url(region, configuration.dashboard.name)
    return TriggerCollaborators(
        dispatcher=dispatcher, governor=governor, dashboard_merger=merger, dashboard_url=url
    )
