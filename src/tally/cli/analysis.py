#!/usr/bin/env python3
"""
Analysis CLI - Recurring Payments and Transfers
"""

import click

from ..analysis import detect_recurring, detect_transfers, link_transfer, save_detected_series, unlink_transfer
from ..core.config import get_config
from ..core.errors import TallyError
from ..core.json_utils import format_json
from ..ledger import open_ledger


@click.group()
def recurring() -> None:
    """Recurring payment detection commands."""
    pass


@recurring.command("detect")
@click.option("--save", is_flag=True, help="Persist new detected series as recurring rules")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def detect_recurring_cmd(save: bool, as_json: bool) -> None:
    """Detect recurring payment series in the last year of transactions."""
    config = get_config()
    store = open_ledger(config)
    detected = detect_recurring(store, window_days=config.analysis.recurring_window_days)

    if as_json:
        click.echo(format_json([series.to_dict() for series in detected]))
    else:
        for series in detected:
            click.echo(
                f"{series.frequency_class.value:<10} {series.payee[:32]:<32} {str(series.average_amount):>12}  "
                f"x{series.occurrence_count}  next {series.next_expected_date}"
            )
        click.echo(f"{len(detected)} recurring series")

    if save:
        saved, skipped = save_detected_series(store, detected)
        click.echo(f"Saved {len(saved)} recurring rules ({skipped} already saved)")


@click.group()
def transfers() -> None:
    """Transfer detection and linking commands."""
    pass


@transfers.command("detect")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def detect_transfers_cmd(as_json: bool) -> None:
    """List likely transfer pairs among recent unlinked transactions."""
    config = get_config()
    store = open_ledger(config)
    candidates = detect_transfers(store, window_days=config.analysis.transfer_window_days)

    if as_json:
        click.echo(format_json([candidate.to_dict() for candidate in candidates]))
        return

    for candidate in candidates:
        click.echo(
            f"{candidate.confidence:.2f}  {candidate.transaction_a_id}  {candidate.transaction_b_id}  "
            f"({candidate.days_apart} days apart)"
        )
    click.echo(f"{len(candidates)} candidates")


@transfers.command("link")
@click.argument("transaction_a")
@click.argument("transaction_b")
def link_cmd(transaction_a: str, transaction_b: str) -> None:
    """Link two transactions as one transfer."""
    store = open_ledger(get_config())
    try:
        transfer_id = link_transfer(store, transaction_a, transaction_b)
    except TallyError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Linked as transfer {transfer_id}")


@transfers.command("unlink")
@click.argument("transaction_id")
def unlink_cmd(transaction_id: str) -> None:
    """Remove the transfer link from a transaction and its counterpart."""
    store = open_ledger(get_config())
    try:
        count = unlink_transfer(store, transaction_id)
    except TallyError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Unlinked {count} transactions")
