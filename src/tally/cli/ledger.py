#!/usr/bin/env python3
"""
Ledger CLI - Accounts and Transactions

Commands for creating accounts, listing transactions and soft-deleting them.
"""

import uuid

import click

from ..core.config import get_config
from ..core.errors import TallyError
from ..core.models import Account, TransactionFilters
from ..ledger import list_transactions, open_ledger, soft_delete_transactions


@click.group()
def accounts() -> None:
    """Ledger account management commands."""
    pass


@accounts.command("create")
@click.argument("name")
@click.option("--type", "account_type", default="checking", help="Account type (default: checking)")
@click.option("--currency", default="USD", help="Currency code (default: USD)")
def create_account(name: str, account_type: str, currency: str) -> None:
    """Create a new account and print its id."""
    store = open_ledger(get_config())
    account = store.insert_account(
        Account(id=str(uuid.uuid4()), name=name, account_type=account_type, currency=currency)
    )
    click.echo(f"Created account {account.name}: {account.id}")


@accounts.command("list")
def list_accounts() -> None:
    """List accounts with their balances."""
    store = open_ledger(get_config())
    found = store.list_accounts()
    if not found:
        click.echo("No accounts")
        return

    for account in found:
        click.echo(f"{account.id}  {account.name:<24} {account.account_type:<10} {account.current_balance}")
    click.echo(store.summary_text())


@click.group()
def transactions() -> None:
    """Ledger transaction commands."""
    pass


@transactions.command("list")
@click.option("--account", "account_id", help="Only this account")
@click.option("--month", help="Only this month (YYYY-MM)")
@click.option("--uncategorized", is_flag=True, help="Only uncategorized transactions")
@click.option("--limit", type=int, default=50, help="Maximum rows (default: 50)")
def list_cmd(account_id: str | None, month: str | None, uncategorized: bool, limit: int) -> None:
    """List transactions, newest first."""
    store = open_ledger(get_config())
    filters = TransactionFilters(account_id=account_id, month=month, uncategorized_only=uncategorized, limit=limit)

    try:
        found = list_transactions(store, filters)
    except TallyError as e:
        raise click.ClickException(str(e)) from e

    for txn in found:
        category = txn.category_id or "-"
        click.echo(f"{txn.date}  {str(txn.amount):>12}  {(txn.payee or '')[:40]:<40}  {category}  {txn.id}")
    click.echo(f"{len(found)} transactions")


@transactions.command("delete")
@click.argument("transaction_ids", nargs=-1, required=True)
def delete_cmd(transaction_ids: tuple[str, ...]) -> None:
    """Soft-delete transactions and refresh account balances."""
    store = open_ledger(get_config())
    deleted = soft_delete_transactions(store, list(transaction_ids))
    click.echo(f"Deleted {deleted} transactions")
