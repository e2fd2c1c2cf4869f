"""Collection runner adapter invoking the Newman CLI."""

from __future__ import annotations

import json
import shlex
import shutil
import subprocess
import uuid
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from newman_load_tester.configuration.runtime_settings import RunnerSettings

from .collection_resolution import CollectionSource
from .run_contracts import RunExecutionError

CommandRunner = Callable[[Sequence[str]], subprocess.CompletedProcess]


class CollectionRunnerError(RunExecutionError):
    """Raised when the collection runner does not produce a run result."""


class CollectionRunner(Protocol):  # pylint: disable=too-few-public-methods
    """Executes a collection and returns the runner's raw `run` summary."""

    def run(
        self, collection: CollectionSource, environment: CollectionSource | None = None
    ) -> Mapping[str, Any]: ...


class NewmanCliRunner:  # pylint: disable=too-few-public-methods
    """Runs `newman run` with the JSON reporter exporting into the scratch directory."""

    def __init__(self, settings: RunnerSettings, run_command: CommandRunner | None = None) -> None:
        self._settings = settings
        self._run_command = run_command or _run_newman_command

    def run(
        self, collection: CollectionSource, environment: CollectionSource | None = None
    ) -> Mapping[str, Any]:
        scratch_dir = self._settings.scratch_dir
        scratch_dir.mkdir(parents=True, exist_ok=True)
        token = uuid.uuid4().hex
        report_path = scratch_dir / f"{token}-report.json"

        command = [
            *self._settings.command,
            "run",
            _materialize(collection, scratch_dir / f"{token}-collection.json"),
            "--reporters",
            "json",
            "--reporter-json-export",
            str(report_path),
        ]
        if environment is not None:
            command += [
                "--environment",
                _materialize(environment, scratch_dir / f"{token}-environment.json"),
            ]
        if self._settings.timeout_ms is not None:
            command += ["--timeout", str(self._settings.timeout_ms)]

        completed = self._run_command(command)
        # Newman exits non-zero when assertions fail; only a missing report is an error.
        if not report_path.exists():
            raise CollectionRunnerError(
                f"Newman exited with {completed.returncode}: {_tail(completed.stderr)}"
            )
        try:
            summary = json.loads(report_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise CollectionRunnerError(f"Newman report is not valid JSON: {exc}") from exc

        run = summary.get("run") if isinstance(summary, Mapping) else None
        if not isinstance(run, Mapping):
            raise CollectionRunnerError("Newman report does not contain a run summary.")
        if run.get("error"):
            raise CollectionRunnerError(f"Newman run failed: {_describe_error(run['error'])}")
        return run


def clear_scratch_directory(scratch_dir: Path) -> int:
    """Delete everything inside the scratch directory and return the number of entries removed."""
    if not scratch_dir.is_dir():
        return 0
    removed = 0
    for entry in scratch_dir.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink(missing_ok=True)
        removed += 1
    return removed


def _materialize(source: CollectionSource, path: Path) -> str:
    if isinstance(source, str):
        return source
    path.write_text(json.dumps(source), encoding="utf-8")
    return str(path)


def _run_newman_command(command: Sequence[str]) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(list(command), capture_output=True, text=True, check=False)
    except FileNotFoundError as exc:
        raise CollectionRunnerError(
            f"Collection runner command not found: {shlex.join(command[:1])}"
        ) from exc


def _describe_error(error: Any) -> str:
    if isinstance(error, Mapping):
        return str(error.get("message") or error.get("name") or error)
    return str(error)


def _tail(text: str | None, limit: int = 500) -> str:
    stripped = (text or "").strip()
    return stripped[-limit:] if stripped else "no output"
