#!/usr/bin/env python3
"""
Unit tests for the JSON ledger store.
"""

import pytest

from tally.core.errors import StorageUnavailable, ValidationError
from tally.core.json_utils import read_json
from tally.core.models import Account, Category
from tally.ledger.store import DEFAULT_CATEGORIES, LEDGER_FORMAT_VERSION, JsonLedgerStore
from tests.fixtures.synthetic_data import make_ledger_transaction


class TestJsonLedgerStore:
    """Test JsonLedgerStore persistence and isolation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.account = Account(id="a1", name="Everyday Checking")

    @pytest.mark.ledger
    def test_new_store_starts_empty(self, tmp_path):
        """Test opening a ledger file that does not exist yet."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        assert store.list_accounts() == []
        assert store.list_categories() == []
        assert not (tmp_path / "ledger.json").exists()

    @pytest.mark.ledger
    def test_writes_persist_across_instances(self, tmp_path):
        """Test that committed writes are visible after reopening."""
        path = tmp_path / "ledger.json"
        store = JsonLedgerStore(path)
        store.insert_account(self.account)
        store.insert_transaction(make_ledger_transaction("t1", "a1", "2025-01-15", -550, payee="Sample Coffee"))

        reopened = JsonLedgerStore(path)
        assert reopened.get_account("a1").name == "Everyday Checking"
        txn = reopened.get_transaction("t1")
        assert txn.amount.to_cents() == -550
        assert txn.date.to_iso_string() == "2025-01-15"
        assert read_json(path)["version"] == LEDGER_FORMAT_VERSION

    @pytest.mark.ledger
    def test_insert_sets_timestamps(self, tmp_path):
        """Test created_at/updated_at are filled in on insert."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        stored = store.insert_account(self.account)
        assert stored.created_at is not None
        assert stored.updated_at is not None

    @pytest.mark.ledger
    def test_duplicate_insert_rejected(self, tmp_path):
        """Test that ids are unique per collection."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        store.insert_account(self.account)
        with pytest.raises(ValidationError):
            store.insert_account(Account(id="a1", name="Other"))

    @pytest.mark.ledger
    def test_update_unknown_rejected(self, tmp_path):
        """Test that updating a missing entity raises."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        with pytest.raises(ValidationError):
            store.update_account(self.account)

    @pytest.mark.ledger
    def test_reads_return_copies(self, tmp_path):
        """Test that mutating a returned entity does not change the store."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        store.insert_account(self.account)

        fetched = store.get_account("a1")
        fetched.name = "Changed Locally"
        assert store.get_account("a1").name == "Everyday Checking"

    @pytest.mark.ledger
    def test_transaction_rolls_back_on_error(self, tmp_path):
        """Test that a failed scope leaves memory and disk untouched."""
        path = tmp_path / "ledger.json"
        store = JsonLedgerStore(path)
        store.insert_account(self.account)

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.insert_account(Account(id="a2", name="Second"))
                store.insert_transaction(make_ledger_transaction("t1", "a1", "2025-01-15", -100))
                raise RuntimeError("boom")

        assert store.get_account("a2") is None
        assert store.get_transaction("t1") is None
        assert [a.id for a in JsonLedgerStore(path).list_accounts()] == ["a1"]

    @pytest.mark.ledger
    def test_nested_scopes_commit_once(self, tmp_path):
        """Test that inner scopes join the outermost one."""
        path = tmp_path / "ledger.json"
        store = JsonLedgerStore(path)

        with store.transaction():
            store.insert_account(self.account)
            with store.transaction():
                store.insert_account(Account(id="a2", name="Second"))
            assert not path.exists()

        assert len(JsonLedgerStore(path).list_accounts()) == 2

    @pytest.mark.ledger
    def test_query_excludes_deleted_by_default(self, tmp_path):
        """Test soft-deleted transactions are hidden unless requested."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        store.insert_transaction(make_ledger_transaction("t1", "a1", "2025-01-15", -100))
        deleted = make_ledger_transaction("t2", "a1", "2025-01-16", -200)
        store.insert_transaction(deleted)
        deleted = store.get_transaction("t2")
        deleted.deleted_at = deleted.created_at
        store.update_transaction(deleted)

        assert [t.id for t in store.query_transactions()] == ["t1"]
        assert {t.id for t in store.query_transactions(include_deleted=True)} == {"t1", "t2"}
        assert store.query_transactions(lambda t: t.amount.to_cents() < -150) == []

    @pytest.mark.ledger
    def test_seed_default_categories_once(self, tmp_path):
        """Test that seeding only happens on an empty category table."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        assert store.seed_default_categories() == len(DEFAULT_CATEGORIES)
        assert store.seed_default_categories() == 0
        assert store.get_category("cat_food_groceries").parent_id == "cat_food"

    @pytest.mark.ledger
    def test_seed_skipped_when_categories_exist(self, tmp_path):
        """Test that custom categories suppress the defaults."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        store.insert_category(Category(id="mine", name="Mine"))
        assert store.seed_default_categories() == 0
        assert [c.id for c in store.list_categories()] == ["mine"]

    @pytest.mark.ledger
    def test_corrupt_file_is_unavailable(self, tmp_path):
        """Test that an unreadable ledger raises StorageUnavailable."""
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageUnavailable):
            JsonLedgerStore(path)

    @pytest.mark.ledger
    def test_closed_store_is_unavailable(self, tmp_path):
        """Test that every access after close() fails."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        store.close()
        with pytest.raises(StorageUnavailable):
            store.list_accounts()
        with pytest.raises(StorageUnavailable):
            store.insert_account(self.account)

    @pytest.mark.ledger
    def test_delete_category_rule_reports_presence(self, tmp_path):
        """Test delete returns False for unknown rules."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        assert store.delete_category_rule("missing") is False

    @pytest.mark.ledger
    def test_summary_text(self, tmp_path):
        """Test the one-line ledger summary."""
        store = JsonLedgerStore(tmp_path / "ledger.json")
        store.insert_account(self.account)
        assert store.summary_text() == "1 accounts, 0 transactions, 0 rules"
