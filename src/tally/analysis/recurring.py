#!/usr/bin/env python3
"""
Recurring Payment Detection

Finds subscriptions, rent, payroll and other periodic payments in the
ledger. Transactions are grouped by normalized payee, account and a $5
amount bucket; a group of three or more whose average spacing falls in a
known frequency band is reported as a recurring series.

Detection is advisory and never writes to the ledger. Turning a detected
series into a persisted RecurringRule is a separate call.
"""

import logging
import re
import uuid
from collections import defaultdict

from ..core.currency import amount_bucket, truncating_mean
from ..core.dates import FinancialDate
from ..core.errors import NotFound, ValidationError
from ..core.models import (
    DetectedRecurringSeries,
    Frequency,
    LedgerTransaction,
    RecurringRule,
    RecurringRuleInput,
)
from ..core.money import Money
from ..ledger.store import LedgerStore

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 365
MIN_OCCURRENCES = 3
MIN_NORMALIZED_PAYEE_LENGTH = 3
AMOUNT_BUCKET_CENTS = 500

# (frequency, min mean gap, max mean gap, canonical days), bounds inclusive
FREQUENCY_BANDS = [
    (Frequency.WEEKLY, 5, 9, 7),
    (Frequency.BIWEEKLY, 12, 17, 14),
    (Frequency.MONTHLY, 25, 35, 30),
    (Frequency.QUARTERLY, 85, 100, 91),
    (Frequency.YEARLY, 350, 380, 365),
]

_PAYEE_NOISE_PATTERNS = [
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}"),
    re.compile(r"\d{1,2}-\d{1,2}-\d{2,4}"),
    re.compile(r"\d{6,}"),  # reference / transaction ids
    re.compile(r"#\d+"),
    re.compile(r"\*\d+"),  # masked card suffix
]


def normalize_payee(payee: str) -> str:
    """
    Reduce a payee to a stable grouping key.

    Example:
        normalize_payee("NETFLIX.COM #123 01/15/25") -> "netflix.com"
    """
    normalized = payee.lower()
    for pattern in _PAYEE_NOISE_PATTERNS:
        normalized = pattern.sub("", normalized)
    return " ".join(normalized.split())


def classify_frequency(dates: list[FinancialDate]) -> tuple[Frequency, int] | None:
    """
    Classify sorted dates by their mean positive gap.

    Returns:
        (frequency, canonical days), or None when there are fewer than three
        dates or the mean gap is outside every band
    """
    if len(dates) < MIN_OCCURRENCES:
        return None

    gaps = [earlier.days_until(later) for earlier, later in zip(dates, dates[1:], strict=False)]
    gaps = [gap for gap in gaps if gap > 0]
    if not gaps:
        return None

    mean_gap = sum(gaps) / len(gaps)
    for frequency, low, high, canonical_days in FREQUENCY_BANDS:
        if low <= mean_gap <= high:
            return frequency, canonical_days
    return None


def detect_recurring(
    store: LedgerStore, today: FinancialDate | None = None, window_days: int = DEFAULT_WINDOW_DAYS
) -> list[DetectedRecurringSeries]:
    """
    Detect recurring payment series in the recent ledger.

    Considers non-deleted, non-transfer transactions with a payee dated
    within window_days of today.

    Args:
        store: Ledger store
        today: Reference date (default: today)
        window_days: Lookback window in days

    Returns:
        Detected series sorted by next expected date, earliest first
    """
    today = today or FinancialDate.today()
    window_start = today.add_days(-window_days)

    candidates = store.query_transactions(
        lambda t: t.transfer_id is None and bool(t.payee and t.payee.strip()) and t.date >= window_start
    )

    groups: dict[tuple[str, str, int], list[LedgerTransaction]] = defaultdict(list)
    for txn in candidates:
        normalized = normalize_payee(txn.payee)  # type: ignore[arg-type]
        if len(normalized) < MIN_NORMALIZED_PAYEE_LENGTH:
            continue
        key = (normalized, txn.account_id, amount_bucket(txn.amount.to_cents(), AMOUNT_BUCKET_CENTS))
        groups[key].append(txn)

    detected: list[DetectedRecurringSeries] = []
    for (normalized, account_id, _bucket), members in groups.items():
        if len(members) < MIN_OCCURRENCES:
            continue

        members.sort(key=lambda t: t.date)
        classified = classify_frequency([t.date for t in members])
        if classified is None:
            continue
        frequency, canonical_days = classified

        first, last = members[0], members[-1]
        detected.append(
            DetectedRecurringSeries(
                payee=first.payee,  # type: ignore[arg-type]
                normalized_payee=normalized,
                account_id=account_id,
                average_amount=Money.from_cents(truncating_mean([t.amount.to_cents() for t in members])),
                frequency_class=frequency,
                frequency_days=canonical_days,
                occurrence_count=len(members),
                first_date=first.date,
                last_date=last.date,
                next_expected_date=last.date.add_days(canonical_days),
                member_transaction_ids=[t.id for t in members],
                category_id=first.category_id,
            )
        )

    detected.sort(key=lambda s: s.next_expected_date)
    logger.info(f"Detected {len(detected)} recurring series from {len(candidates)} transactions")
    return detected


def create_recurring_rule(store: LedgerStore, data: RecurringRuleInput) -> RecurringRule:
    """
    Persist a recurring rule.

    Raises:
        NotFound: If the account does not exist
        ValidationError: If the payee is empty, the category unknown or the
            tolerance negative
    """
    with store.transaction():
        account = store.get_account(data.account_id)
        if account is None or account.is_deleted:
            raise NotFound(f"Account not found: {data.account_id}")
        if not data.payee.strip():
            raise ValidationError("Recurring rule payee must not be empty")
        if data.category_id is not None and store.get_category(data.category_id) is None:
            raise ValidationError(f"Unknown category: {data.category_id}")
        if data.tolerance_days < 0 or data.tolerance_amount.to_cents() < 0:
            raise ValidationError("Tolerances must be non-negative")

        rule = RecurringRule(
            id=str(uuid.uuid4()),
            account_id=data.account_id,
            payee=data.payee,
            amount=data.amount,
            frequency=data.frequency,
            start_date=data.start_date,
            next_expected_date=data.next_expected_date,
            end_date=data.end_date,
            category_id=data.category_id,
            tolerance_days=data.tolerance_days,
            tolerance_amount=data.tolerance_amount,
            is_auto_detected=data.is_auto_detected,
        )
        created = store.insert_recurring_rule(rule)

    logger.info(f"Created {rule.frequency.value} recurring rule for {rule.payee!r}")
    return created


def recurring_rule_from_detection(series: DetectedRecurringSeries) -> RecurringRuleInput:
    """Build the input for persisting a detected series as a recurring rule."""
    return RecurringRuleInput(
        account_id=series.account_id,
        payee=series.payee,
        amount=series.average_amount,
        frequency=series.frequency_class,
        start_date=series.first_date,
        next_expected_date=series.next_expected_date,
        category_id=series.category_id,
        is_auto_detected=True,
    )


def save_detected_series(
    store: LedgerStore, detected: list[DetectedRecurringSeries]
) -> tuple[list[RecurringRule], int]:
    """
    Persist detected series as recurring rules, once each.

    A series is skipped when a rule with the same account, payee and
    frequency already exists, so repeated detection runs do not pile up
    copies of the same rule.

    Returns:
        Tuple of (rules created, number of series skipped)
    """
    created: list[RecurringRule] = []
    skipped = 0

    with store.transaction():
        existing = {(r.account_id, r.payee, r.frequency) for r in store.list_recurring_rules()}
        for series in detected:
            key = (series.account_id, series.payee, series.frequency_class)
            if key in existing:
                skipped += 1
                continue
            created.append(create_recurring_rule(store, recurring_rule_from_detection(series)))
            existing.add(key)

    logger.info(f"Saved {len(created)} recurring rules, skipped {skipped} already saved")
    return created, skipped
