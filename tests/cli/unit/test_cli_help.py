"""CLI smoke tests."""

from click.testing import CliRunner
from newman_load_tester.cli import cli


def test_cli_displays_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("generate-config", "trigger", "drain", "run"):
        assert command in result.output
    assert "--log-level" in result.output


def test_trigger_help_lists_required_options() -> None:
    result = CliRunner().invoke(cli, ["trigger", "-h"])

    assert result.exit_code == 0
    assert "--config" in result.output
    assert "--request" in result.output
