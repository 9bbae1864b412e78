#!/usr/bin/env python3
"""
Ledger Operations

Account balance maintenance, filtered transaction listing and soft delete.
"""

import logging
import re
from datetime import datetime

from ..core.errors import NotFound, ValidationError
from ..core.models import LedgerTransaction, TransactionFilters
from ..core.money import Money
from .store import LedgerStore

logger = logging.getLogger(__name__)

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def _parse_month(month: str) -> tuple[int, int]:
    match = _MONTH_PATTERN.match(month)
    if not match:
        raise ValidationError(f"Month must be YYYY-MM, got {month!r}")
    year, month_num = int(match.group(1)), int(match.group(2))
    if not 1 <= month_num <= 12:
        raise ValidationError(f"Month out of range: {month!r}")
    return year, month_num


def recompute_account_balance(store: LedgerStore, account_id: str) -> Money:
    """
    Set an account's balance to the sum of its non-deleted transactions.

    Raises:
        NotFound: If the account does not exist
    """
    with store.transaction():
        account = store.get_account(account_id)
        if account is None:
            raise NotFound(f"Account not found: {account_id}")

        total = Money.zero()
        for txn in store.query_transactions(lambda t: t.account_id == account_id):
            total = total + txn.amount

        account.current_balance = total
        store.update_account(account)

    logger.debug(f"Account {account_id} balance is now {total}")
    return total


def list_transactions(store: LedgerStore, filters: TransactionFilters | None = None) -> list[LedgerTransaction]:
    """
    List ledger transactions, newest first.

    Args:
        store: Ledger store
        filters: Optional account/category/month filters

    Returns:
        Matching transactions sorted by date descending

    Raises:
        ValidationError: If filters.month is not a valid YYYY-MM month
    """
    filters = filters or TransactionFilters()
    month = _parse_month(filters.month) if filters.month else None

    def matches(txn: LedgerTransaction) -> bool:
        if filters.account_id and txn.account_id != filters.account_id:
            return False
        if filters.category_id and txn.category_id != filters.category_id:
            return False
        if filters.uncategorized_only and txn.category_id is not None:
            return False
        if month and (txn.date.date.year, txn.date.date.month) != month:
            return False
        return True

    results = store.query_transactions(matches, include_deleted=filters.include_deleted)
    results.sort(key=lambda t: t.date, reverse=True)

    if filters.limit is not None:
        results = results[: filters.limit]
    return results


def soft_delete_transactions(store: LedgerStore, transaction_ids: list[str]) -> int:
    """
    Mark transactions deleted and refresh the affected account balances.

    Unknown or already-deleted ids are ignored.

    Returns:
        Number of transactions newly marked deleted
    """
    deleted = 0
    touched_accounts: set[str] = set()

    with store.transaction():
        now = datetime.now()
        for transaction_id in transaction_ids:
            txn = store.get_transaction(transaction_id)
            if txn is None or txn.is_deleted:
                continue
            txn.deleted_at = now
            store.update_transaction(txn)
            touched_accounts.add(txn.account_id)
            deleted += 1

        for account_id in touched_accounts:
            if store.get_account(account_id) is not None:
                recompute_account_balance(store, account_id)

    logger.info(f"Soft-deleted {deleted} transactions")
    return deleted
