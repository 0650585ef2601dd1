"""ynap-convert CLI entrypoint."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import click

from ynap_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors
from ynap_cli.ynap_rules.chain import RuleChain, build_chain
from ynap_cli.ynap_rules.loader import load_rule_files

from .bank import BankFormat, load_bank, resolve_bank_path
from .output import render_records, write_records
from .types import Record


@click.command(help="Convert a bank CSV export into the Date,Payee,Category,Memo,Amount layout.")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option(
    "-b",
    "--bank",
    "bank",
    required=True,
    help="Bank format descriptor: a YAML path or a name from the configured bank directories.",
)
@click.option(
    "-r",
    "--rules",
    "rule_paths",
    multiple=True,
    type=click.Path(path_type=str),
    help="Rule file to apply (repeatable).",
)
@click.option("-o", "--output", "output_path", type=click.Path(path_type=str), help="Write CSV to a file.")
@click.option(
    "--untransformed-only",
    is_flag=True,
    help="Only emit records that no rule rewrote.",
)
@common_cli_options
@handle_cli_errors
def main(
    input_file: str,
    bank: str,
    rule_paths: tuple[str, ...],
    output_path: str | None,
    untransformed_only: bool,
    cli_ctx: CLIContext,
) -> None:
    logger = cli_ctx.logger
    bank_path = resolve_bank_path(bank, cli_ctx.config.banks.paths)
    bank_format = load_bank(bank_path)
    logger.debug(f"Loaded bank format '{bank_format.name}' from {bank_path}")

    input_name = Path(input_file).name
    if not bank_format.matches_filename(input_name):
        logger.warning(
            f"'{input_name}' does not match the file pattern of {bank_format.name}"
        )

    # Rule files are configuration: load them before touching any row.
    chain: RuleChain | None = None
    rule_files = _collect_rule_files(cli_ctx, bank_format, rule_paths)
    if rule_files:
        for path in rule_files:
            logger.debug(f"Loading rules: {path}")
        chain = build_chain(
            load_rule_files(rule_files),
            case_insensitive_payees=cli_ctx.config.rules.case_insensitive_payees,
            logger=logger,
        )

    records = bank_format.read_from_path(
        input_file, fallback_encoding=cli_ctx.config.input.fallback_encoding
    )
    transformed = chain.apply(records) if chain is not None else 0

    if untransformed_only:
        records = [record for record in records if not record.transformed]

    if cli_ctx.dry_run:
        _emit_dry_run_summary(cli_ctx, bank_format, records, transformed)
        return

    _write_output(records, output_path)
    logger.info(f"Converted {len(records)} records ({transformed} transformed)")
    if logger.warning_count:
        logger.info(f"{logger.warning_count} warning(s) reported")


def _collect_rule_files(
    cli_ctx: CLIContext,
    bank_format: BankFormat,
    rule_paths: Sequence[str],
) -> list[Path]:
    files: list[Path] = list(cli_ctx.config.rules.default_files)
    files.extend(bank_format.rule_files)
    files.extend(Path(path).expanduser() for path in rule_paths)
    return files


def _emit_dry_run_summary(
    cli_ctx: CLIContext,
    bank_format: BankFormat,
    records: Sequence[Record],
    transformed: int,
) -> None:
    cli_ctx.logger.info("Dry run summary:")
    cli_ctx.logger.info(f"  Bank format: {bank_format.name}")
    cli_ctx.logger.info(f"  Records: {len(records)}")
    cli_ctx.logger.info(f"  Transformed: {transformed}")
    dates = sorted(record.date for record in records if record.date)
    if dates:
        cli_ctx.logger.info(f"  Date range: {dates[0]} to {dates[-1]}")
    if cli_ctx.logger.warning_count:
        cli_ctx.logger.info(f"  Warnings: {cli_ctx.logger.warning_count}")


def _write_output(records: Sequence[Record], output_path: str | None) -> None:
    if output_path:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with output_file.open("w", newline="", encoding="utf-8") as handle:
            write_records(records, handle)
    else:
        click.echo(render_records(records), nl=False)


if __name__ == "__main__":  # pragma: no cover
    main()
