"""Run execution domain exports."""

from .collection_resolution import (
    BlobCache,
    BlobStore,
    CollectionResolutionError,
    CollectionResolver,
    S3BlobStore,
)
from .newman_runner import (
    CollectionRunner,
    CollectionRunnerError,
    NewmanCliRunner,
    clear_scratch_directory,
)
from .run_contracts import (
    ExecutionCounts,
    RunEventOutcome,
    RunExecutionError,
    RunFailure,
    RunReport,
    RunStats,
)
from .run_executor import (
    FAILED_ASSERTIONS_TYPE,
    RunExecutor,
    executor_factory_from_configuration,
    failed_assertions_type,
)
from .run_metrics import CloudWatchMetricsSink, MetricDatum, MetricsSink, build_run_metrics
from .run_report_builder import RunResultError, build_run_report, describe_request
from .worker_pool import RunWorkerPool

__all__ = [
    "BlobCache",
    "BlobStore",
    "CollectionResolutionError",
    "CollectionResolver",
    "S3BlobStore",
    "CollectionRunner",
    "CollectionRunnerError",
    "NewmanCliRunner",
    "clear_scratch_directory",
    "ExecutionCounts",
    "RunEventOutcome",
    "RunExecutionError",
    "RunFailure",
    "RunReport",
    "RunStats",
    "FAILED_ASSERTIONS_TYPE",
    "RunExecutor",
    "executor_factory_from_configuration",
    "failed_assertions_type",
    "CloudWatchMetricsSink",
    "MetricDatum",
    "MetricsSink",
    "build_run_metrics",
    "RunResultError",
    "build_run_report",
    "describe_request",
    "RunWorkerPool",
]
