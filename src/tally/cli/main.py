#!/usr/bin/env python3
"""
Main CLI Entry Point for Tally

Provides a unified command-line interface for statement import, ledger
reconciliation and analysis.
"""

import logging
import os

import click

from ..core.config import get_config, reload_config


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Tally - Statement Import and Reconciliation

    Imports bank and card statements (CSV, fixed-layout text, PDF) into a
    local ledger, keeps transactions categorized, and finds recurring
    payments and transfers between accounts.
    """
    ctx.ensure_object(dict)

    if config_env:
        os.environ["TALLY_ENV"] = config_env

    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("tally").setLevel(logging.DEBUG)

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = reload_config() if config_env or debug else get_config()

    if verbose:
        click.echo(f"Environment: {ctx.obj['config'].environment.value}")
        click.echo(f"Data directory: {ctx.obj['config'].data_dir}")

    if debug:
        click.echo("Debug logging enabled")


@main.command()
def version() -> None:
    """Show version information."""
    from tally import __author__, __version__

    click.echo(f"Tally v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    config_obj = ctx.obj["config"]

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {config_obj.environment.value}")
    click.echo(f"  Data Directory: {config_obj.data_dir}")
    click.echo(f"  Ledger File: {config_obj.ledger.ledger_file}")
    click.echo(f"  Preview Rows: {config_obj.imports.preview_rows}")
    click.echo(f"  Document Preview Rows: {config_obj.imports.document_preview_rows}")
    click.echo(f"  Recurring Window: {config_obj.analysis.recurring_window_days} days")
    click.echo(f"  Transfer Window: {config_obj.analysis.transfer_window_days} days")
    click.echo(f"  Debug Mode: {config_obj.debug}")
    click.echo(f"  Log Level: {config_obj.log_level}")


from .analysis import recurring, transfers  # noqa: E402
from .imports import import_group  # noqa: E402
from .ledger import accounts, transactions  # noqa: E402
from .rules import rules  # noqa: E402

main.add_command(accounts)
main.add_command(transactions)
main.add_command(import_group)
main.add_command(rules)
main.add_command(recurring)
main.add_command(transfers)


if __name__ == "__main__":
    main()
