#!/usr/bin/env python3
"""Tests for the fixed-layout bank text importer."""

import io

import pytest

from tally.core.errors import SourceUnreadable
from tally.importers.fixed_layout import (
    extract_trailing_numbers,
    find_amount_start,
    is_header_line,
    parse_fixed_layout,
    parse_transaction_line,
    preview_fixed_layout,
    preview_fixed_layout_text,
)
from tests.fixtures.synthetic_data import SYNTHETIC_FIXED_LAYOUT


class TestLineHelpers:
    """Test the per-line building blocks."""

    @pytest.mark.importers
    def test_header_detection_is_case_and_spacing_tolerant(self):
        """Test header row recognition."""
        assert is_header_line("Date        Description        Amount  Running Bal.")
        assert is_header_line("DATE DESCRIPTION AMOUNT")
        assert not is_header_line("Date        Amount")

    @pytest.mark.importers
    def test_extract_trailing_numbers(self):
        """Test collecting at most two numbers from the right."""
        assert extract_trailing_numbers("  Zelle payment from TEST PERSON   1,285.00     8,988.79") == [128500, 898879]
        assert extract_trailing_numbers("  DEBIT CARD PURCHASE COFFEE      -5.50") == [-550]
        assert extract_trailing_numbers("  no numbers here") == []

    @pytest.mark.importers
    def test_punctuation_only_tokens_are_ignored(self):
        """Test that a lone dash between columns is not a number."""
        assert extract_trailing_numbers("  FEE   -   12.00") == [1200]

    @pytest.mark.importers
    def test_find_amount_start(self):
        """Test locating the end of the description."""
        line = "01/06/2025  Zelle payment from TEST PERSON              1,285.00     8,988.79"
        end = find_amount_start(line)
        assert line[12:end] == "Zelle payment from TEST PERSON"

    @pytest.mark.importers
    def test_parse_transaction_line_with_running_balance(self):
        """Test a full line with amount and running balance."""
        txn = parse_transaction_line(
            "01/07/2025  ONLINE BANKING TRANSFER TO SAV             -1,050.00     7,938.79"
        )
        assert txn is not None
        assert txn.date.to_iso_string() == "2025-01-07"
        assert txn.amount.to_cents() == -105000
        assert txn.payee == "ONLINE BANKING TRANSFER TO SAV"
        assert txn.memo == txn.payee
        assert txn.raw_fields["running_balance"] == "793879"

    @pytest.mark.importers
    def test_parse_transaction_line_rejects_noise(self):
        """Test lines without a date or an amount."""
        assert parse_transaction_line("short line") is None
        assert parse_transaction_line("this line has no date and is ignored") is None
        assert parse_transaction_line("02/30/2025  IMPOSSIBLE DATE          -1.00") is None
        assert parse_transaction_line("01/09/2025  PENDING WITH NO AMOUNT") is None


class TestPreviewFixedLayout:
    """Test statement-level parsing."""

    @pytest.mark.importers
    def test_statement_transactions_and_balances(self):
        """Test summary balances and transaction extraction."""
        preview = preview_fixed_layout_text(SYNTHETIC_FIXED_LAYOUT)

        assert preview.beginning_balance.to_cents() == 770379
        assert preview.ending_balance.to_cents() == 763329
        assert preview.total_rows == 4
        assert [t.amount.to_cents() for t in preview.transactions] == [128500, -105000, -550, -30000]
        assert preview.transactions[0].payee == "Zelle payment from TEST PERSON"

    @pytest.mark.importers
    def test_beginning_balance_row_is_not_a_transaction(self):
        """Test that the opening balance row inside the table is skipped."""
        preview = preview_fixed_layout_text(SYNTHETIC_FIXED_LAYOUT)
        assert all("Beginning balance" not in (t.payee or "") for t in preview.transactions)

    @pytest.mark.importers
    def test_amounts_reconcile_with_balances(self):
        """Test that parsed amounts explain the change in balance."""
        preview = preview_fixed_layout_text(SYNTHETIC_FIXED_LAYOUT)
        net = sum(t.amount.to_cents() for t in preview.transactions)
        assert preview.beginning_balance.to_cents() + net == preview.ending_balance.to_cents()

    @pytest.mark.importers
    def test_limit_keeps_true_count(self):
        """Test that the preview limit does not change total_rows."""
        preview = preview_fixed_layout(io.StringIO(SYNTHETIC_FIXED_LAYOUT), limit=2)
        assert len(preview.transactions) == 2
        assert preview.total_rows == 4

    @pytest.mark.importers
    def test_no_header_means_no_transactions(self):
        """Test that lines are only parsed after the column header."""
        text = "01/06/2025  Zelle payment from TEST PERSON              1,285.00     8,988.79\n"
        preview = preview_fixed_layout_text(text)
        assert preview.total_rows == 0
        assert preview.beginning_balance is None

    @pytest.mark.importers
    def test_parse_from_file(self, tmp_path):
        """Test parse_fixed_layout returns every transaction from a file."""
        path = tmp_path / "statement.txt"
        path.write_text(SYNTHETIC_FIXED_LAYOUT, encoding="utf-8")
        assert len(parse_fixed_layout(path)) == 4

    @pytest.mark.importers
    def test_missing_file_is_unreadable(self, tmp_path):
        """Test that a missing file raises SourceUnreadable."""
        with pytest.raises(SourceUnreadable):
            parse_fixed_layout(tmp_path / "missing.txt")

    @pytest.mark.importers
    def test_to_dict(self):
        """Test JSON-friendly preview output."""
        data = preview_fixed_layout_text(SYNTHETIC_FIXED_LAYOUT, limit=1).to_dict()
        assert data["total_rows"] == 4
        assert data["beginning_balance"] == 770379
        assert data["transactions"][0]["amount"] == 128500
