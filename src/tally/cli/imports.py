#!/usr/bin/env python3
"""
Import CLI - Statement Preview and Import

Preview commands only parse; import commands parse and then write the rows
into a ledger account (unless --dry-run).
"""

from pathlib import Path

import click

from ..core.config import get_config
from ..core.errors import TallyError
from ..core.json_utils import format_json
from ..core.models import ColumnMapping, ParsedTransaction
from ..importers import (
    parse_document,
    parse_fixed_layout,
    parse_tabular,
    preview_document,
    preview_fixed_layout,
    preview_tabular,
)
from ..ledger import open_ledger
from ..reconcile import import_transactions


def _column(value: str | None) -> str | int | None:
    """Column option as a header name, or a 0-based index when numeric."""
    if value is None:
        return None
    return int(value) if value.isdigit() else value


def _echo_transactions(parsed: list[ParsedTransaction]) -> None:
    for txn in parsed:
        hint = f"  [{txn.category_hint}]" if txn.category_hint else ""
        click.echo(f"  {txn.date}  {str(txn.amount):>12}  {txn.payee or ''}{hint}")


def _import_parsed(account_id: str, parsed: list[ParsedTransaction], source: str, dry_run: bool) -> None:
    if dry_run:
        click.echo(f"Dry run: {len(parsed)} transactions parsed, nothing written")
        _echo_transactions(parsed)
        return

    store = open_ledger(get_config())
    result = import_transactions(store, account_id, parsed, source=source)
    click.echo(f"Batch {result.batch_id}")
    click.echo(f"  Imported: {result.imported}")
    click.echo(f"  Skipped (duplicates): {result.skipped}")
    click.echo(f"  Failed: {result.failed}")
    click.echo(f"  Auto-categorized: {result.categorized}")


@click.group("import")
def import_group() -> None:
    """Statement preview and import commands."""
    pass


@import_group.command("preview-csv")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--rows", type=int, help="Rows to show (default: TALLY_PREVIEW_ROWS)")
@click.option("--delimiter", help="Field delimiter (default: detected)")
@click.option("--json", "as_json", is_flag=True, help="Print the preview as JSON")
def preview_csv(file: Path, rows: int | None, delimiter: str | None, as_json: bool) -> None:
    """Show the header and first rows of a delimited file."""
    max_rows = rows or get_config().imports.preview_rows
    try:
        preview = preview_tabular(file, max_rows=max_rows, delimiter=delimiter)
    except TallyError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(format_json(preview.to_dict()))
        return

    click.echo(f"Columns: {', '.join(f'{i}:{h}' for i, h in enumerate(preview.headers))}")
    for row in preview.rows:
        click.echo("  " + " | ".join(row))
    click.echo(f"Total rows: {preview.total_rows}")


@import_group.command("csv")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--account", "account_id", required=True, help="Destination account id")
@click.option("--date-col", required=True, help="Date column name or index")
@click.option("--amount-col", help="Amount column name or index")
@click.option("--debit-col", help="Debit column name or index")
@click.option("--credit-col", help="Credit column name or index")
@click.option("--payee-col", help="Payee column name or index")
@click.option("--memo-col", help="Memo column name or index")
@click.option("--category-col", help="Category column name or index")
@click.option("--date-format", default="", help="strptime date format (default: detected)")
@click.option("--invert", is_flag=True, help="Flip the sign of every amount")
@click.option("--delimiter", help="Field delimiter (default: detected)")
@click.option("--dry-run", is_flag=True, help="Parse only; do not write to the ledger")
def import_csv(
    file: Path,
    account_id: str,
    date_col: str,
    amount_col: str | None,
    debit_col: str | None,
    credit_col: str | None,
    payee_col: str | None,
    memo_col: str | None,
    category_col: str | None,
    date_format: str,
    invert: bool,
    delimiter: str | None,
    dry_run: bool,
) -> None:
    """
    Import a delimited file into an account.

    Examples:
      tally import csv checking.csv --account ID --date-col Date --amount-col Amount --payee-col Description
      tally import csv card.csv --account ID --date-col 0 --debit-col 3 --credit-col 4 --dry-run
    """
    mapping = ColumnMapping(
        date_column=_column(date_col),  # type: ignore[arg-type]
        amount_column=_column(amount_col),
        debit_column=_column(debit_col),
        credit_column=_column(credit_col),
        payee_column=_column(payee_col),
        memo_column=_column(memo_col),
        category_column=_column(category_col),
        date_format=date_format,
        invert_amounts=invert,
    )

    try:
        result = parse_tabular(file, mapping, delimiter=delimiter)
        for error in result.errors:
            click.echo(f"Row {error.row_number} rejected: {error.message}", err=True)
        _import_parsed(account_id, result.transactions, "csv", dry_run)
    except TallyError as e:
        raise click.ClickException(str(e)) from e


@import_group.command("preview-statement")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--limit", type=int, help="Transactions to show (default: TALLY_DOCUMENT_PREVIEW_ROWS)")
@click.option("--json", "as_json", is_flag=True, help="Print the preview as JSON")
def preview_statement(file: Path, limit: int | None, as_json: bool) -> None:
    """Preview a fixed-layout bank text statement."""
    limit = limit or get_config().imports.document_preview_rows
    try:
        preview = preview_fixed_layout(file, limit=limit)
    except TallyError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(format_json(preview.to_dict()))
        return

    if preview.beginning_balance is not None:
        click.echo(f"Beginning balance: {preview.beginning_balance}")
    if preview.ending_balance is not None:
        click.echo(f"Ending balance: {preview.ending_balance}")
    _echo_transactions(preview.transactions)
    click.echo(f"Total transactions: {preview.total_rows}")


@import_group.command("statement")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--account", "account_id", required=True, help="Destination account id")
@click.option("--dry-run", is_flag=True, help="Parse only; do not write to the ledger")
def import_statement(file: Path, account_id: str, dry_run: bool) -> None:
    """Import a fixed-layout bank text statement."""
    try:
        _import_parsed(account_id, parse_fixed_layout(file), "statement", dry_run)
    except TallyError as e:
        raise click.ClickException(str(e)) from e


@import_group.command("preview-pdf")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--limit", type=int, help="Transactions to show (default: TALLY_DOCUMENT_PREVIEW_ROWS)")
@click.option("--json", "as_json", is_flag=True, help="Print the preview as JSON")
def preview_pdf(file: Path, limit: int | None, as_json: bool) -> None:
    """Preview a PDF statement and report parse confidence."""
    config = get_config()
    limit = limit or config.imports.document_preview_rows
    try:
        preview = preview_document(file, limit=limit, min_chars=config.imports.min_document_chars)
    except TallyError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(format_json(preview.to_dict()))
        return

    click.echo(f"Detected format: {preview.detected_format or 'unknown'}")
    if preview.detected_columns:
        click.echo(f"Columns: {', '.join(preview.detected_columns)}")
    click.echo(f"Confidence: {preview.confidence:.0%}")
    _echo_transactions(preview.transactions)
    click.echo(f"Total transactions: {preview.total_rows}")


@import_group.command("pdf")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--account", "account_id", required=True, help="Destination account id")
@click.option("--dry-run", is_flag=True, help="Parse only; do not write to the ledger")
def import_pdf(file: Path, account_id: str, dry_run: bool) -> None:
    """Import a PDF statement."""
    config = get_config()
    try:
        parsed = parse_document(file, min_chars=config.imports.min_document_chars)
        _import_parsed(account_id, parsed, "pdf", dry_run)
    except TallyError as e:
        raise click.ClickException(str(e)) from e
