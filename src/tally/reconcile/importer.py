#!/usr/bin/env python3
"""
Import Reconciler

Writes a batch of ParsedTransactions into one ledger account, skipping rows
that already exist, then runs the category rule engine over the new rows.

A row is a duplicate when a non-deleted transaction in the same account has
the same date, amount and payee (a missing payee matches a missing payee).
Memo and check numbers are not compared, so two genuinely identical
same-day purchases collapse into one.
"""

import logging
import uuid

from ..core.errors import NotFound
from ..core.models import ImportResult, LedgerTransaction, ParsedTransaction
from ..ledger.operations import recompute_account_balance
from ..ledger.store import LedgerStore
from .rules import apply_category_rules

logger = logging.getLogger(__name__)


def _category_name_index(store: LedgerStore) -> dict[str, str]:
    """Lowercased category name -> category id for non-deleted categories."""
    return {category.name.lower(): category.id for category in store.list_categories()}


def find_duplicate(store: LedgerStore, account_id: str, txn: ParsedTransaction) -> LedgerTransaction | None:
    """Existing non-deleted ledger transaction matching account, date, amount and payee."""
    matches = store.query_transactions(
        lambda t: t.account_id == account_id
        and t.date == txn.date
        and t.amount == txn.amount
        and t.payee == txn.payee
    )
    return matches[0] if matches else None


def import_transactions(
    store: LedgerStore,
    account_id: str,
    transactions: list[ParsedTransaction],
    source: str = "csv",
    category_ids: list[str | None] | None = None,
) -> ImportResult:
    """
    Import parsed transactions into an account.

    Args:
        store: Ledger store
        account_id: Destination account
        transactions: Parsed rows, in statement order
        source: Import source tag stored on each new transaction
        category_ids: Optional explicit category per row (same length as
            transactions). Rows without one fall back to a case-insensitive
            lookup of their category_hint against category names.

    Returns:
        ImportResult with imported/skipped/failed/categorized counts

    Raises:
        NotFound: If the account does not exist or is deleted
    """
    batch_id = str(uuid.uuid4())
    imported_ids: list[str] = []
    skipped = 0
    failed = 0

    with store.transaction():
        account = store.get_account(account_id)
        if account is None or account.is_deleted:
            raise NotFound(f"Account not found: {account_id}")

        category_index = _category_name_index(store)

        for index, parsed in enumerate(transactions):
            if find_duplicate(store, account_id, parsed) is not None:
                logger.debug(f"Skipping duplicate {parsed.date} {parsed.amount} {parsed.payee!r}")
                skipped += 1
                continue

            category_id = None
            explicit = category_ids[index] if category_ids and index < len(category_ids) else None
            if explicit:
                if store.get_category(explicit) is not None:
                    category_id = explicit
                else:
                    logger.warning(f"Ignoring unknown category {explicit!r} for row {index + 1}")
            elif parsed.category_hint:
                category_id = category_index.get(parsed.category_hint.strip().lower())

            new_txn = LedgerTransaction(
                id=str(uuid.uuid4()),
                account_id=account_id,
                date=parsed.date,
                amount=parsed.amount,
                payee=parsed.payee,
                original_payee=parsed.payee,
                memo=parsed.memo,
                category_id=category_id,
                status="cleared",
                import_source=source,
                import_batch_id=batch_id,
            )

            try:
                store.insert_transaction(new_txn)
            except (ValueError, TypeError) as e:
                logger.warning(f"Failed to import row {index + 1} ({parsed.payee!r}): {e}")
                failed += 1
                continue

            imported_ids.append(new_txn.id)

        recompute_account_balance(store, account_id)
        categorized = apply_category_rules(store, ids=imported_ids)

    logger.info(
        f"Import batch {batch_id}: {len(imported_ids)} imported, {skipped} skipped, "
        f"{failed} failed, {categorized} categorized"
    )
    return ImportResult(
        imported=len(imported_ids),
        skipped=skipped,
        categorized=categorized,
        batch_id=batch_id,
        failed=failed,
        imported_ids=imported_ids,
    )
