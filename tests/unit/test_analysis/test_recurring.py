#!/usr/bin/env python3
"""Tests for recurring payment detection."""

import pytest

from tally.analysis.recurring import (
    classify_frequency,
    create_recurring_rule,
    detect_recurring,
    normalize_payee,
    recurring_rule_from_detection,
    save_detected_series,
)
from tally.core.dates import FinancialDate
from tally.core.errors import NotFound, ValidationError
from tally.core.models import Frequency, RecurringRuleInput
from tally.core.money import Money
from tests.fixtures.synthetic_data import make_ledger_transaction, periodic_transactions

START = FinancialDate.from_ymd(2025, 1, 1)
TODAY = FinancialDate.from_ymd(2025, 6, 1)


def _dates(*offsets: int) -> list[FinancialDate]:
    return [START.add_days(offset) for offset in offsets]


class TestHelpers:
    """Test payee normalization and frequency classification."""

    @pytest.mark.analysis
    def test_normalize_payee_strips_noise(self):
        """Test removal of dates, reference numbers and card suffixes."""
        assert normalize_payee("NETFLIX.COM #123 01/15/25") == "netflix.com"
        assert normalize_payee("Example Gym 2025-01-15 REF 1234567") == "example gym ref"
        assert normalize_payee("SAMPLE STREAMING *4421") == "sample streaming"

    @pytest.mark.analysis
    @pytest.mark.parametrize(
        "offsets,expected",
        [
            ((0, 7, 14, 21), (Frequency.WEEKLY, 7)),
            ((0, 14, 28), (Frequency.BIWEEKLY, 14)),
            ((0, 30, 61, 90), (Frequency.MONTHLY, 30)),
            ((0, 91, 182), (Frequency.QUARTERLY, 91)),
            ((0, 365, 730), (Frequency.YEARLY, 365)),
        ],
    )
    def test_frequency_bands(self, offsets, expected):
        """Test each frequency band."""
        assert classify_frequency(_dates(*offsets)) == expected

    @pytest.mark.analysis
    def test_band_bounds_are_inclusive(self):
        """Test mean gaps exactly on a band edge."""
        assert classify_frequency(_dates(0, 25, 50)) == (Frequency.MONTHLY, 30)
        assert classify_frequency(_dates(0, 35, 70)) == (Frequency.MONTHLY, 30)

    @pytest.mark.analysis
    def test_unclassifiable(self):
        """Test too few dates, gaps between bands and same-day duplicates."""
        assert classify_frequency(_dates(0, 30)) is None
        assert classify_frequency(_dates(0, 20, 40)) is None
        assert classify_frequency(_dates(0, 0, 0)) is None


class TestDetectRecurring:
    """Test detection over a ledger."""

    @pytest.mark.analysis
    def test_detects_monthly_subscription(self, store, checking):
        """Test a four-payment monthly series."""
        for txn in periodic_transactions("sub", checking.id, "SAMPLE STREAMING", -1599, START, [30, 31, 29]):
            store.insert_transaction(txn)

        detected = detect_recurring(store, today=TODAY)

        assert len(detected) == 1
        series = detected[0]
        assert series.frequency_class == Frequency.MONTHLY
        assert series.frequency_days == 30
        assert series.occurrence_count == 4
        assert series.average_amount.to_cents() == -1599
        assert series.first_date == START
        assert series.last_date == START.add_days(90)
        assert series.next_expected_date == START.add_days(120)
        assert series.member_transaction_ids == ["sub_0", "sub_1", "sub_2", "sub_3"]
        assert series.payee == "SAMPLE STREAMING"

    @pytest.mark.analysis
    def test_noisy_payees_group_together(self, store, checking):
        """Test grouping on the normalized payee with a truncated average."""
        for i, (date, cents, payee) in enumerate(
            [
                ("2025-01-03", -1599, "SAMPLE GYM #1001 01/03/25"),
                ("2025-02-03", -1599, "SAMPLE GYM #1002 02/03/25"),
                ("2025-03-03", -1599, "SAMPLE GYM #1003 03/03/25"),
                ("2025-04-03", -1501, "SAMPLE GYM #1004 04/03/25"),
            ]
        ):
            store.insert_transaction(make_ledger_transaction(f"gym{i}", checking.id, date, cents, payee=payee))

        detected = detect_recurring(store, today=TODAY)
        assert len(detected) == 1
        assert detected[0].normalized_payee == "sample gym"
        assert detected[0].average_amount.to_cents() == -1574
        assert detected[0].payee == "SAMPLE GYM #1001 01/03/25"

    @pytest.mark.analysis
    def test_amount_bucket_splits_groups(self, store, checking):
        """Test that a price jump across a $5 boundary breaks the series."""
        for i, (date, cents) in enumerate(
            [("2025-01-03", -1599), ("2025-02-03", -1599), ("2025-03-03", -2099), ("2025-04-03", -2099)]
        ):
            store.insert_transaction(make_ledger_transaction(f"s{i}", checking.id, date, cents, payee="Sample Service"))
        assert detect_recurring(store, today=TODAY) == []

    @pytest.mark.analysis
    def test_excludes_transfers_old_and_unnamed(self, store, checking):
        """Test the candidate filter."""
        for txn in periodic_transactions("t", checking.id, "Savings Sweep", -10000, START, [30, 30, 30]):
            txn.transfer_id = "xfer"
            store.insert_transaction(txn)
        for txn in periodic_transactions(
            "old", checking.id, "Old Subscription", -999, FinancialDate.from_ymd(2023, 1, 1), [30, 30, 30]
        ):
            store.insert_transaction(txn)
        for txn in periodic_transactions("anon", checking.id, "", -500, START, [30, 30, 30]):
            store.insert_transaction(txn)

        assert detect_recurring(store, today=TODAY) == []

    @pytest.mark.analysis
    def test_sorted_by_next_expected_date(self, store, checking):
        """Test result ordering."""
        for txn in periodic_transactions("m", checking.id, "Monthly Thing", -1000, START, [30, 30, 30]):
            store.insert_transaction(txn)
        for txn in periodic_transactions("w", checking.id, "Weekly Thing", -2000, START, [7, 7, 7]):
            store.insert_transaction(txn)

        detected = detect_recurring(store, today=TODAY)
        assert [s.frequency_class for s in detected] == [Frequency.WEEKLY, Frequency.MONTHLY]

    @pytest.mark.analysis
    def test_window_days(self, store, checking):
        """Test a shorter lookback window drops older members."""
        for txn in periodic_transactions("sub", checking.id, "SAMPLE STREAMING", -1599, START, [30, 31, 29]):
            store.insert_transaction(txn)
        assert detect_recurring(store, today=START.add_days(100), window_days=50) == []


class TestRecurringRules:
    """Test persisting recurring rules."""

    @pytest.mark.analysis
    def test_save_detected_series(self, store, checking):
        """Test turning a detection into a stored rule."""
        for txn in periodic_transactions("sub", checking.id, "SAMPLE STREAMING", -1599, START, [30, 31, 29]):
            store.insert_transaction(txn)
        series = detect_recurring(store, today=TODAY)[0]

        rule = create_recurring_rule(store, recurring_rule_from_detection(series))

        assert rule.is_auto_detected
        assert rule.start_date == START
        assert rule.next_expected_date == series.next_expected_date
        assert rule.amount == Money.from_cents(-1599)
        assert [r.id for r in store.list_recurring_rules()] == [rule.id]

    @pytest.mark.analysis
    def test_saving_detections_twice_keeps_one_rule(self, store, checking):
        """Test that re-saving the same series does not duplicate its rule."""
        for txn in periodic_transactions("sub", checking.id, "SAMPLE STREAMING", -1599, START, [30, 31, 29]):
            store.insert_transaction(txn)
        detected = detect_recurring(store, today=TODAY)

        created, skipped = save_detected_series(store, detected)
        assert len(created) == 1
        assert skipped == 0

        created, skipped = save_detected_series(store, detect_recurring(store, today=TODAY))
        assert created == []
        assert skipped == 1
        assert len(store.list_recurring_rules()) == 1

    @pytest.mark.analysis
    def test_saving_keys_on_frequency(self, store, checking):
        """Test that a series with a new frequency for the same payee is saved."""
        for txn in periodic_transactions("sub", checking.id, "SAMPLE STREAMING", -1599, START, [30, 31, 29]):
            store.insert_transaction(txn)
        series = detect_recurring(store, today=TODAY)[0]
        create_recurring_rule(
            store,
            RecurringRuleInput(
                account_id=checking.id,
                payee=series.payee,
                amount=series.average_amount,
                frequency=Frequency.YEARLY,
                start_date=START,
            ),
        )

        created, skipped = save_detected_series(store, [series])
        assert [r.frequency for r in created] == [Frequency.MONTHLY]
        assert skipped == 0

    @pytest.mark.analysis
    def test_validation(self, store, checking):
        """Test rejected recurring rule inputs."""

        def rule_input(**overrides) -> RecurringRuleInput:
            fields = {
                "account_id": checking.id,
                "payee": "Rent",
                "amount": Money.from_cents(-150000),
                "frequency": Frequency.MONTHLY,
                "start_date": START,
            }
            fields.update(overrides)
            return RecurringRuleInput(**fields)

        with pytest.raises(NotFound):
            create_recurring_rule(store, rule_input(account_id="missing"))
        with pytest.raises(ValidationError):
            create_recurring_rule(store, rule_input(payee="   "))
        with pytest.raises(ValidationError):
            create_recurring_rule(store, rule_input(category_id="cat_missing"))
        with pytest.raises(ValidationError):
            create_recurring_rule(store, rule_input(tolerance_days=-1))
        assert store.list_recurring_rules() == []

        assert create_recurring_rule(store, rule_input(category_id="cat_housing_rent")).tolerance_days == 3
