#!/usr/bin/env python3
"""
Transfer Matching

Finds pairs of unlinked transactions in different accounts that are likely
the two sides of one transfer: exactly opposite amounts, dated within five
days of each other. Candidates are scored on date proximity and on whether
the payees look like transfers.

Confidence Scoring:
- 60% date proximity: 1.0 on the same day, falling to 0.0 at five days apart
- 40% payee similarity: 0.8 when both payees mention a transfer keyword,
  0.5 when one does, 0.3 otherwise (or when either payee is missing)

Only candidates scoring above 0.5 are reported, best first, at most 20.
Linking is a separate, explicit step.
"""

import logging
import uuid

from ..core.dates import FinancialDate
from ..core.errors import NotFound, ValidationError
from ..core.models import LedgerTransaction, TransferCandidate
from ..ledger.store import LedgerStore

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 90
MAX_DAYS_APART = 5
MIN_CONFIDENCE = 0.5
MAX_CANDIDATES = 20
DATE_WEIGHT = 0.6
PAYEE_WEIGHT = 0.4

TRANSFER_KEYWORDS = ["transfer", "xfer", "payment", "ach", "wire", "zelle", "venmo"]


def _mentions_transfer(payee: str) -> bool:
    lower = payee.lower()
    return any(keyword in lower for keyword in TRANSFER_KEYWORDS)


def payee_similarity(payee_a: str | None, payee_b: str | None) -> float:
    """Score how transfer-like a pair of payees looks."""
    if payee_a is None or payee_b is None:
        return 0.3

    a_has = _mentions_transfer(payee_a)
    b_has = _mentions_transfer(payee_b)
    if a_has and b_has:
        return 0.8
    if a_has or b_has:
        return 0.5
    return 0.3


def transfer_confidence(days_apart: int, payee_a: str | None, payee_b: str | None) -> float:
    """Combined confidence for a candidate pair."""
    date_score = 1.0 - (days_apart / MAX_DAYS_APART)
    return DATE_WEIGHT * date_score + PAYEE_WEIGHT * payee_similarity(payee_a, payee_b)


def detect_transfers(
    store: LedgerStore, today: FinancialDate | None = None, window_days: int = DEFAULT_WINDOW_DAYS
) -> list[TransferCandidate]:
    """
    Find likely transfer pairs among recent unlinked transactions.

    Args:
        store: Ledger store
        today: Reference date (default: today)
        window_days: Lookback window in days

    Returns:
        Up to 20 candidates with confidence above 0.5, highest first
    """
    today = today or FinancialDate.today()
    window_start = today.add_days(-window_days)

    transactions = store.query_transactions(lambda t: t.transfer_id is None and t.date >= window_start)
    transactions.sort(key=lambda t: t.date, reverse=True)

    candidates: list[TransferCandidate] = []
    for i, txn_a in enumerate(transactions):
        for txn_b in transactions[i + 1 :]:
            if txn_a.account_id == txn_b.account_id:
                continue
            if txn_a.amount != -txn_b.amount:
                continue

            days_apart = abs(txn_a.date.days_until(txn_b.date))
            if days_apart > MAX_DAYS_APART:
                continue

            confidence = transfer_confidence(days_apart, txn_a.payee, txn_b.payee)
            if confidence > MIN_CONFIDENCE:
                candidates.append(
                    TransferCandidate(
                        transaction_a_id=txn_a.id,
                        transaction_b_id=txn_b.id,
                        confidence=confidence,
                        days_apart=days_apart,
                    )
                )

    candidates.sort(key=lambda c: c.confidence, reverse=True)
    logger.info(f"Found {len(candidates)} transfer candidates among {len(transactions)} transactions")
    return candidates[:MAX_CANDIDATES]


def _require_transaction(store: LedgerStore, transaction_id: str) -> LedgerTransaction:
    txn = store.get_transaction(transaction_id)
    if txn is None or txn.is_deleted:
        raise NotFound(f"Transaction not found: {transaction_id}")
    return txn


def link_transfer(store: LedgerStore, transaction_a_id: str, transaction_b_id: str) -> str:
    """
    Link two transactions as the sides of one transfer.

    Returns:
        The new shared transfer id

    Raises:
        NotFound: If either transaction does not exist
        ValidationError: If both ids name the same transaction
    """
    if transaction_a_id == transaction_b_id:
        raise ValidationError("Cannot link a transaction to itself")

    transfer_id = str(uuid.uuid4())
    with store.transaction():
        txn_a = _require_transaction(store, transaction_a_id)
        txn_b = _require_transaction(store, transaction_b_id)

        txn_a.transfer_id = transfer_id
        txn_a.transfer_account_id = txn_b.account_id
        txn_b.transfer_id = transfer_id
        txn_b.transfer_account_id = txn_a.account_id

        store.update_transaction(txn_a)
        store.update_transaction(txn_b)

    logger.info(f"Linked {transaction_a_id} and {transaction_b_id} as transfer {transfer_id}")
    return transfer_id


def unlink_transfer(store: LedgerStore, transaction_id: str) -> int:
    """
    Clear the transfer link on a transaction and on every transaction sharing it.

    Returns:
        Number of transactions unlinked (0 if the transaction was not linked)

    Raises:
        NotFound: If the transaction does not exist
    """
    with store.transaction():
        txn = store.get_transaction(transaction_id)
        if txn is None:
            raise NotFound(f"Transaction not found: {transaction_id}")
        if txn.transfer_id is None:
            return 0

        transfer_id = txn.transfer_id
        linked = store.query_transactions(lambda t: t.transfer_id == transfer_id, include_deleted=True)
        for other in linked:
            other.transfer_id = None
            other.transfer_account_id = None
            store.update_transaction(other)

    logger.info(f"Unlinked transfer {transfer_id} ({len(linked)} transactions)")
    return len(linked)
