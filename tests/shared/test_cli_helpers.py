from __future__ import annotations

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from ynap_cli.shared.cli import (
    CLIContext,
    common_cli_options,
    handle_cli_errors,
    pass_cli_context,
)
from ynap_cli.shared.exceptions import ConfigurationError, MappingError, YnapError


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_common_cli_options_builds_context(
    monkeypatch: pytest.MonkeyPatch, runner: CliRunner, tmp_path: Path
) -> None:
    monkeypatch.setenv("YNAP_CONFIG_DIR", str(tmp_path / "config"))

    @click.command()
    @common_cli_options
    def sample(cli_ctx: CLIContext) -> None:
        click.echo(f"dry={cli_ctx.dry_run} verbose={cli_ctx.verbose}")
        click.echo(f"encoding={cli_ctx.config.input.fallback_encoding}")

    result = runner.invoke(sample, ["--dry-run", "--verbose"])

    assert result.exit_code == 0, result.output
    assert "dry=True verbose=True" in result.output
    assert "encoding=iso-8859-1" in result.output


def test_common_cli_options_uses_config_flag(runner: CliRunner, tmp_path: Path) -> None:
    cfg_file = tmp_path / "custom.yaml"
    cfg_file.write_text("input:\n  fallback_encoding: cp1252\n", encoding="utf-8")

    @click.command()
    @common_cli_options
    def sample(cli_ctx: CLIContext) -> None:
        click.echo(cli_ctx.config.input.fallback_encoding)

    result = runner.invoke(sample, ["--config", str(cfg_file)])

    assert result.exit_code == 0, result.output
    assert "cp1252" in result.output


def test_common_cli_options_reports_bad_config(runner: CliRunner, tmp_path: Path) -> None:
    cfg_file = tmp_path / "broken.yaml"
    cfg_file.write_text("- not a mapping", encoding="utf-8")

    @click.command()
    @common_cli_options
    def sample(cli_ctx: CLIContext) -> None:
        click.echo("unreachable")

    result = runner.invoke(sample, ["--config", str(cfg_file)])

    assert result.exit_code != 0
    assert "mapping root object" in result.output


def test_handle_cli_errors_wraps_known_exceptions() -> None:
    @handle_cli_errors
    def boom() -> None:
        raise YnapError("boom")

    with pytest.raises(click.ClickException) as excinfo:
        boom()
    assert str(excinfo.value) == "boom"


def test_handle_cli_errors_keeps_conversion_messages() -> None:
    @handle_cli_errors
    def short_row() -> None:
        raise MappingError("Line 3: row too short")

    with pytest.raises(click.ClickException) as excinfo:
        short_row()
    assert str(excinfo.value) == "Line 3: row too short"


def test_handle_cli_errors_formats_configuration_errors() -> None:
    @handle_cli_errors
    def misconfigured() -> None:
        raise ConfigurationError("missing value")

    with pytest.raises(click.ClickException) as excinfo:
        misconfigured()
    assert "Configuration error" in str(excinfo.value)


def test_handle_cli_errors_wraps_unexpected_exceptions() -> None:
    @handle_cli_errors
    def explode() -> None:
        raise RuntimeError("kapow")

    with pytest.raises(click.ClickException) as excinfo:
        explode()
    assert "Unexpected error: kapow" == str(excinfo.value)


def test_pass_cli_context_reaches_subcommands(
    monkeypatch: pytest.MonkeyPatch, runner: CliRunner, tmp_path: Path
) -> None:
    monkeypatch.setenv("YNAP_CONFIG_DIR", str(tmp_path / "config"))

    @click.group()
    @common_cli_options
    def group(cli_ctx: CLIContext) -> None:
        return

    @group.command()
    @pass_cli_context
    def child(cli_ctx: CLIContext) -> None:
        cli_ctx.logger.warning("careful")
        click.echo(f"warnings={cli_ctx.logger.warning_count} dry={cli_ctx.dry_run}")

    result = runner.invoke(group, ["--dry-run", "child"])

    assert result.exit_code == 0, result.output
    assert "warnings=1 dry=True" in result.output
