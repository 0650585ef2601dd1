"""ynap-rules CLI entrypoint: helpers for writing and debugging rule files."""

from __future__ import annotations

import click

from ynap_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context
from ynap_cli.shared.exceptions import ConfigurationError
from ynap_cli.ynap_convert.types import Record

from .chain import RuleChain, build_chain
from .loader import RuleSet, load_rule_files


@click.group(help="Inspect and debug ynap rule files.")
@common_cli_options
def main(cli_ctx: CLIContext) -> None:
    return


@main.command("validate")
@click.argument("rule_files", nargs=-1, required=True, type=click.Path(exists=True, path_type=str))
@handle_cli_errors
@pass_cli_context
def validate_command(cli_ctx: CLIContext, rule_files: tuple[str, ...]) -> None:
    """Load RULE_FILES and report what they define."""
    rule_set, _ = _load_chain(cli_ctx, rule_files)
    cli_ctx.logger.info(f"Pre-transform rules: {len(rule_set.pre_transform)}")
    cli_ctx.logger.info(f"Payees: {len(rule_set.payees)}")
    cli_ctx.logger.info(f"Post-transform rules: {len(rule_set.post_transform)}")
    cli_ctx.logger.success("Rule files validated successfully.")


@main.command("explain")
@click.argument("rule_files", nargs=-1, required=True, type=click.Path(exists=True, path_type=str))
@click.option(
    "-f",
    "--field",
    "fields",
    multiple=True,
    metavar="KEY=VALUE",
    help="Record field to set before applying rules (repeatable).",
)
@handle_cli_errors
@pass_cli_context
def explain_command(cli_ctx: CLIContext, rule_files: tuple[str, ...], fields: tuple[str, ...]) -> None:
    """Run RULE_FILES against a single hand-built record and show which rules fire."""
    record = Record()
    for item in fields:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--field")
        record.replace(key.strip(), value)

    _, chain = _load_chain(cli_ctx, rule_files)
    for index, rule in enumerate(chain, start=1):
        fired = rule.transform(record)
        status = "fired" if fired else "skipped"
        click.echo(f"{index:>3}. {rule.describe()}: {status}")

    click.echo("")
    for key in record.keys():
        click.echo(f"{key}: {record.get(key)}")
    click.echo(f"transformed: {record.transformed}")


def _load_chain(cli_ctx: CLIContext, rule_files: tuple[str, ...]) -> tuple[RuleSet, RuleChain]:
    rule_set = load_rule_files(rule_files)
    if not len(rule_set):
        raise ConfigurationError("Rule files define no rules")
    chain = build_chain(
        rule_set,
        case_insensitive_payees=cli_ctx.config.rules.case_insensitive_payees,
        logger=cli_ctx.logger,
    )
    return rule_set, chain


if __name__ == "__main__":  # pragma: no cover
    main()
