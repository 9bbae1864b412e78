#!/usr/bin/env python3
"""
Ledger Store - Persistence for accounts, categories, rules and transactions.

LedgerStore is the storage interface the reconciler, rule engine and batch
analyses depend on. JsonLedgerStore is the concrete implementation: the whole
ledger lives in one JSON document that is loaded at open and rewritten on
every committed transaction scope.
"""

import copy
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from ..core.errors import StorageUnavailable, ValidationError
from ..core.json_utils import read_json, write_json
from ..core.models import (
    Account,
    Category,
    CategoryRule,
    LedgerTransaction,
    RecurringRule,
)

logger = logging.getLogger(__name__)

LEDGER_FORMAT_VERSION = 1

TransactionPredicate = Callable[[LedgerTransaction], bool]

# (id, name, parent_id, category_type)
DEFAULT_CATEGORIES = [
    ("cat_income", "Income", None, "income"),
    ("cat_income_salary", "Salary", "cat_income", "income"),
    ("cat_income_interest", "Interest", "cat_income", "income"),
    ("cat_income_refunds", "Refunds", "cat_income", "income"),
    ("cat_housing", "Housing", None, "expense"),
    ("cat_housing_rent", "Rent/Mortgage", "cat_housing", "expense"),
    ("cat_housing_utilities", "Utilities", "cat_housing", "expense"),
    ("cat_transport", "Transportation", None, "expense"),
    ("cat_transport_gas", "Gas & Fuel", "cat_transport", "expense"),
    ("cat_food", "Food & Dining", None, "expense"),
    ("cat_food_groceries", "Groceries", "cat_food", "expense"),
    ("cat_food_restaurants", "Restaurants", "cat_food", "expense"),
    ("cat_food_coffee", "Coffee Shops", "cat_food", "expense"),
    ("cat_shopping", "Shopping", None, "expense"),
    ("cat_entertainment", "Entertainment", None, "expense"),
    ("cat_subscriptions", "Subscriptions", "cat_entertainment", "expense"),
    ("cat_healthcare", "Healthcare", None, "expense"),
    ("cat_other", "Other", None, "expense"),
    ("cat_transfer", "Transfer", None, "transfer"),
]

_COLLECTIONS: dict[str, Any] = {
    "accounts": Account,
    "categories": Category,
    "category_rules": CategoryRule,
    "transactions": LedgerTransaction,
    "recurring_rules": RecurringRule,
}


class LedgerStore(Protocol):
    """
    Protocol for ledger persistence.

    Every mutating operation in Tally runs inside transaction(), which gives
    the caller exclusive access for the duration of the scope and commits or
    rolls back atomically. Getters return copies; changes only take effect
    through the update/insert methods.
    """

    def transaction(self) -> Any:
        """
        Context manager for an exclusive, atomic unit of work.

        Scopes nest; only the outermost scope commits. An exception leaving
        the outermost scope discards every change made inside it.
        """
        ...

    def get_account(self, account_id: str) -> Account | None:
        """Look up an account by id (deleted accounts included)."""
        ...

    def list_accounts(self) -> list[Account]:
        """All non-deleted accounts."""
        ...

    def insert_account(self, account: Account) -> Account:
        """Insert a new account."""
        ...

    def update_account(self, account: Account) -> Account:
        """Replace a stored account."""
        ...

    def get_category(self, category_id: str) -> Category | None:
        """Look up a category by id."""
        ...

    def list_categories(self) -> list[Category]:
        """All non-deleted categories."""
        ...

    def insert_category(self, category: Category) -> Category:
        """Insert a new category."""
        ...

    def get_category_rule(self, rule_id: str) -> CategoryRule | None:
        """Look up a category rule by id."""
        ...

    def list_category_rules(self) -> list[CategoryRule]:
        """All category rules in insertion order."""
        ...

    def insert_category_rule(self, rule: CategoryRule) -> CategoryRule:
        """Insert a new category rule."""
        ...

    def update_category_rule(self, rule: CategoryRule) -> CategoryRule:
        """Replace a stored category rule."""
        ...

    def delete_category_rule(self, rule_id: str) -> bool:
        """Remove a category rule. Returns False when it did not exist."""
        ...

    def get_transaction(self, transaction_id: str) -> LedgerTransaction | None:
        """Look up a transaction by id (soft-deleted ones included)."""
        ...

    def query_transactions(
        self, predicate: TransactionPredicate | None = None, include_deleted: bool = False
    ) -> list[LedgerTransaction]:
        """Transactions matching a predicate, in insertion order."""
        ...

    def insert_transaction(self, transaction: LedgerTransaction) -> LedgerTransaction:
        """Insert a new transaction."""
        ...

    def update_transaction(self, transaction: LedgerTransaction) -> LedgerTransaction:
        """Replace a stored transaction (soft delete sets deleted_at here)."""
        ...

    def list_recurring_rules(self) -> list[RecurringRule]:
        """All recurring rules."""
        ...

    def insert_recurring_rule(self, rule: RecurringRule) -> RecurringRule:
        """Insert a new recurring rule."""
        ...


class JsonLedgerStore:
    """
    LedgerStore backed by a single JSON file.

    A reentrant lock serializes all access, so one writer at a time holds the
    ledger and readers never observe a half-applied scope. Writes made
    outside an explicit transaction() are wrapped in one of their own.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._depth = 0
        self._snapshot: dict[str, dict[str, Any]] | None = None
        self._closed = False
        self._data = self._load()

    def _empty(self) -> dict[str, dict[str, Any]]:
        return {name: {} for name in _COLLECTIONS}

    def _load(self) -> dict[str, dict[str, Any]]:
        data = self._empty()
        if not self.path.exists():
            logger.debug(f"No ledger at {self.path}, starting empty")
            return data

        try:
            raw = read_json(self.path)
            for name, model in _COLLECTIONS.items():
                for item in raw.get(name, []):
                    entity = model.from_dict(item)
                    data[name][entity.id] = entity
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise StorageUnavailable(f"Cannot read ledger {self.path}: {e}") from e

        logger.info(
            f"Loaded ledger {self.path}: {len(data['accounts'])} accounts, "
            f"{len(data['transactions'])} transactions"
        )
        return data

    def _flush(self) -> None:
        document: dict[str, Any] = {"version": LEDGER_FORMAT_VERSION}
        for name, items in self._data.items():
            document[name] = [entity.to_dict() for entity in items.values()]
        try:
            write_json(self.path, document)
        except OSError as e:
            raise StorageUnavailable(f"Cannot write ledger {self.path}: {e}") from e

    def _ensure_open(self) -> None:
        if self._closed:
            raise StorageUnavailable("Ledger store is closed")

    @contextmanager
    def transaction(self) -> Iterator["JsonLedgerStore"]:
        with self._lock:
            self._ensure_open()
            outermost = self._depth == 0
            if outermost:
                self._snapshot = copy.deepcopy(self._data)
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._data = self._snapshot  # type: ignore[assignment]
                    self._snapshot = None
                    logger.debug("Ledger transaction rolled back")
                raise
            self._depth -= 1
            if outermost:
                try:
                    self._flush()
                except StorageUnavailable:
                    self._data = self._snapshot  # type: ignore[assignment]
                    raise
                finally:
                    self._snapshot = None

    def close(self) -> None:
        """Close the store; any further access raises StorageUnavailable."""
        with self._lock:
            self._closed = True

    # Generic helpers

    def _get(self, collection: str, entity_id: str) -> Any:
        with self._lock:
            self._ensure_open()
            entity = self._data[collection].get(entity_id)
            return replace(entity) if entity is not None else None

    def _list(self, collection: str, include_deleted: bool = False) -> list[Any]:
        with self._lock:
            self._ensure_open()
            return [
                replace(entity)
                for entity in self._data[collection].values()
                if include_deleted or getattr(entity, "deleted_at", None) is None
            ]

    def _insert(self, collection: str, entity: Any) -> Any:
        with self.transaction():
            if entity.id in self._data[collection]:
                raise ValidationError(f"Duplicate id in {collection}: {entity.id}")
            now = datetime.now()
            if hasattr(entity, "created_at") and entity.created_at is None:
                entity.created_at = now
            if hasattr(entity, "updated_at") and entity.updated_at is None:
                entity.updated_at = now
            self._data[collection][entity.id] = replace(entity)
            return replace(entity)

    def _update(self, collection: str, entity: Any) -> Any:
        with self.transaction():
            if entity.id not in self._data[collection]:
                raise ValidationError(f"Unknown id in {collection}: {entity.id}")
            if hasattr(entity, "updated_at"):
                entity.updated_at = datetime.now()
            self._data[collection][entity.id] = replace(entity)
            return replace(entity)

    # Accounts

    def get_account(self, account_id: str) -> Account | None:
        return self._get("accounts", account_id)

    def list_accounts(self) -> list[Account]:
        return self._list("accounts")

    def insert_account(self, account: Account) -> Account:
        return self._insert("accounts", account)

    def update_account(self, account: Account) -> Account:
        return self._update("accounts", account)

    # Categories

    def get_category(self, category_id: str) -> Category | None:
        return self._get("categories", category_id)

    def list_categories(self) -> list[Category]:
        return self._list("categories")

    def insert_category(self, category: Category) -> Category:
        return self._insert("categories", category)

    def seed_default_categories(self) -> int:
        """
        Insert the default category tree if the ledger has no categories.

        Returns:
            Number of categories inserted
        """
        with self.transaction():
            if self._data["categories"]:
                return 0
            for category_id, name, parent_id, category_type in DEFAULT_CATEGORIES:
                self.insert_category(
                    Category(id=category_id, name=name, parent_id=parent_id, category_type=category_type)
                )
        logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")
        return len(DEFAULT_CATEGORIES)

    # Category rules

    def get_category_rule(self, rule_id: str) -> CategoryRule | None:
        return self._get("category_rules", rule_id)

    def list_category_rules(self) -> list[CategoryRule]:
        return self._list("category_rules")

    def insert_category_rule(self, rule: CategoryRule) -> CategoryRule:
        return self._insert("category_rules", rule)

    def update_category_rule(self, rule: CategoryRule) -> CategoryRule:
        return self._update("category_rules", rule)

    def delete_category_rule(self, rule_id: str) -> bool:
        with self.transaction():
            return self._data["category_rules"].pop(rule_id, None) is not None

    # Transactions

    def get_transaction(self, transaction_id: str) -> LedgerTransaction | None:
        return self._get("transactions", transaction_id)

    def query_transactions(
        self, predicate: TransactionPredicate | None = None, include_deleted: bool = False
    ) -> list[LedgerTransaction]:
        with self._lock:
            self._ensure_open()
            return [
                replace(txn)
                for txn in self._data["transactions"].values()
                if (include_deleted or txn.deleted_at is None) and (predicate is None or predicate(txn))
            ]

    def insert_transaction(self, transaction: LedgerTransaction) -> LedgerTransaction:
        return self._insert("transactions", transaction)

    def update_transaction(self, transaction: LedgerTransaction) -> LedgerTransaction:
        return self._update("transactions", transaction)

    # Recurring rules

    def list_recurring_rules(self) -> list[RecurringRule]:
        return self._list("recurring_rules")

    def insert_recurring_rule(self, rule: RecurringRule) -> RecurringRule:
        return self._insert("recurring_rules", rule)

    def summary_text(self) -> str:
        """Brief description of the ledger contents for CLI display."""
        with self._lock:
            self._ensure_open()
            active = sum(1 for txn in self._data["transactions"].values() if txn.deleted_at is None)
            return (
                f"{len(self._data['accounts'])} accounts, {active} transactions, "
                f"{len(self._data['category_rules'])} rules"
            )
