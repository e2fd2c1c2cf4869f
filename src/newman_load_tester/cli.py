"""Command line interface entry point."""

from __future__ import annotations

import json
import logging
import sys

import click
from botocore.exceptions import BotoCoreError

from newman_load_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    Configuration,
    ConfigurationError,
    load_configuration,
    load_document,
    write_placeholder_configuration,
)
from newman_load_tester.distribution_planning import InvalidRunEventError, RunEvent
from newman_load_tester.load_trigger import build_trigger_collaborators, trigger_load_test
from newman_load_tester.queue_consumption import QueueReadError, create_queue_reader, drain_queue
from newman_load_tester.queue_dispatch import MAX_BATCH_ENTRIES
from newman_load_tester.run_execution import RunWorkerPool, executor_factory_from_configuration

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="newman-load-tester")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging threshold for run and dispatch logs",
)
def cli(log_level: str) -> None:
    """Weighted Newman load test distributor and runner."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="trigger")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON configuration file",
)
@click.option(
    "--request",
    "request_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the YAML/JSON trigger request (count, distributions, options)",
)
def trigger(config_path: str, request_path: str) -> None:
    """Validate distributions, apply throughput settings and queue run events."""
    try:
        payload = load_document(request_path)
        collaborators = build_trigger_collaborators(load_configuration(config_path))
    except (ConfigurationError, BotoCoreError) as exc:
        raise CliError(str(exc)) from exc
    outcome = trigger_load_test(payload, collaborators)
    if not outcome.is_ok:
        raise CliError(outcome.message)
    click.echo(json.dumps(outcome.to_response(), indent=2))


@cli.command(name="drain")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON configuration file",
)
@click.option(
    "--max-batches",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many batches even if the queue still holds messages.",
)
def drain(config_path: str, max_batches: int | None) -> None:
    """Execute queued run events locally until the queue is empty."""
    try:
        configuration = load_configuration(config_path)
        reader = create_queue_reader(configuration)
        summary = drain_queue(
            reader,
            _build_pool(configuration),
            batch_size=_drain_batch_size(configuration),
            max_batches=max_batches,
        )
    except (ConfigurationError, QueueReadError, BotoCoreError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(
        json.dumps(
            {
                "batches": summary.batches,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "undecodable": summary.undecodable,
            },
            indent=2,
        )
    )
    if summary.failed or summary.undecodable:
        raise CliError(f"{summary.failed + summary.undecodable} queued run events failed.")


@cli.command(name="run")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON configuration file",
)
@click.option(
    "--event",
    "event_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to a YAML/JSON run event (or list of run events)",
)
def run_events(config_path: str, event_path: str) -> None:
    """Execute run events directly, without a queue."""
    try:
        configuration = load_configuration(config_path)
        document = load_document(event_path)
        items = document if isinstance(document, list) else [document]
        events = [RunEvent.from_payload(item) for item in items]
        outcomes = _build_pool(configuration).process(events)
    except (ConfigurationError, InvalidRunEventError, BotoCoreError) as exc:
        raise CliError(str(exc)) from exc
    for outcome in outcomes:
        line = {"name": outcome.event.name, "ok": outcome.is_ok}
        if outcome.report is not None:
            line["report"] = outcome.report.to_dict()
        else:
            line["error"] = outcome.error_message
        click.echo(json.dumps(line))
    failed = sum(1 for outcome in outcomes if not outcome.is_ok)
    if failed:
        raise CliError(f"{failed} of {len(outcomes)} run events failed.")


def _build_pool(configuration: Configuration) -> RunWorkerPool:
    return RunWorkerPool(
        executor_factory_from_configuration(configuration),
        parallelism=configuration.runner.parallelism,
        scratch_dir=configuration.runner.scratch_dir,
    )


def _drain_batch_size(configuration: Configuration) -> int:
    if configuration.throughput is not None:
        return configuration.throughput.default_batch_size
    return MAX_BATCH_ENTRIES


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
