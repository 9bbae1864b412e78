#!/usr/bin/env python3
"""
Core Data Models for Tally

Common data structures shared by the importers, the reconciler and the
batch analyses. Amounts are Money and dates are FinancialDate everywhere;
plain ints and strings only appear at the JSON boundary (to_dict/from_dict).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .dates import FinancialDate, parse_iso_date
from .money import Money


def _timestamp_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _timestamp_from_str(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class RuleType(Enum):
    """Pattern kinds supported by category rules."""

    PAYEE_CONTAINS = "payee_contains"
    PAYEE_EXACT = "payee_exact"
    PAYEE_STARTS_WITH = "payee_starts_with"
    PAYEE_REGEX = "payee_regex"


class Frequency(Enum):
    """Frequency classes for recurring payment series."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass
class ParsedTransaction:
    """
    Canonical output of every importer.

    Never persisted directly; the import reconciler turns accepted ones into
    LedgerTransaction records.
    """

    date: FinancialDate
    amount: Money
    payee: str | None = None
    memo: str | None = None
    category_hint: str | None = None
    raw_fields: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "date": self.date.to_iso_string(),
            "amount": self.amount.to_cents(),
            "payee": self.payee,
            "memo": self.memo,
            "category_hint": self.category_hint,
            "raw_fields": dict(self.raw_fields),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParsedTransaction":
        """Create ParsedTransaction from dictionary (inverse of to_dict)."""
        return cls(
            date=parse_iso_date(data["date"]),
            amount=Money.from_cents(data["amount"]),
            payee=data.get("payee"),
            memo=data.get("memo"),
            category_hint=data.get("category_hint"),
            raw_fields=dict(data.get("raw_fields") or {}),
        )


@dataclass
class Account:
    """A ledger account. Balance is the sum of its non-deleted transactions."""

    id: str
    name: str
    account_type: str = "checking"
    current_balance: Money = field(default_factory=Money.zero)
    currency: str = "USD"
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "account_type": self.account_type,
            "current_balance": self.current_balance.to_cents(),
            "currency": self.currency,
            "created_at": _timestamp_to_str(self.created_at),
            "updated_at": _timestamp_to_str(self.updated_at),
            "deleted_at": _timestamp_to_str(self.deleted_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        return cls(
            id=data["id"],
            name=data["name"],
            account_type=data.get("account_type", "checking"),
            current_balance=Money.from_cents(data.get("current_balance", 0)),
            currency=data.get("currency", "USD"),
            created_at=_timestamp_from_str(data.get("created_at")),
            updated_at=_timestamp_from_str(data.get("updated_at")),
            deleted_at=_timestamp_from_str(data.get("deleted_at")),
        )


@dataclass
class Category:
    """Transaction category, optionally nested under a parent."""

    id: str
    name: str
    category_type: str = "expense"
    parent_id: str | None = None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category_type": self.category_type,
            "parent_id": self.parent_id,
            "deleted_at": _timestamp_to_str(self.deleted_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        return cls(
            id=data["id"],
            name=data["name"],
            category_type=data.get("category_type", "expense"),
            parent_id=data.get("parent_id"),
            deleted_at=_timestamp_from_str(data.get("deleted_at")),
        )


@dataclass
class CategoryRule:
    """
    Pattern rule that assigns a category to matching transactions.

    Rules are evaluated by priority, highest first; the first match wins.
    amount_min/amount_max are inclusive bounds in cents and either may be absent.
    """

    id: str
    category_id: str
    rule_type: RuleType
    pattern: str
    amount_min: Money | None = None
    amount_max: Money | None = None
    account_id: str | None = None
    priority: int = 0
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "rule_type": self.rule_type.value,
            "pattern": self.pattern,
            "amount_min": self.amount_min.to_cents() if self.amount_min is not None else None,
            "amount_max": self.amount_max.to_cents() if self.amount_max is not None else None,
            "account_id": self.account_id,
            "priority": self.priority,
            "is_active": self.is_active,
            "created_at": _timestamp_to_str(self.created_at),
            "updated_at": _timestamp_to_str(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CategoryRule":
        return cls(
            id=data["id"],
            category_id=data["category_id"],
            rule_type=RuleType(data["rule_type"]),
            pattern=data["pattern"],
            amount_min=Money.from_cents(data["amount_min"]) if data.get("amount_min") is not None else None,
            amount_max=Money.from_cents(data["amount_max"]) if data.get("amount_max") is not None else None,
            account_id=data.get("account_id"),
            priority=data.get("priority", 0),
            is_active=data.get("is_active", True),
            created_at=_timestamp_from_str(data.get("created_at")),
            updated_at=_timestamp_from_str(data.get("updated_at")),
        )


@dataclass
class LedgerTransaction:
    """
    A persisted transaction belonging to exactly one account.

    Transactions are never physically deleted; deleted_at marks them instead.
    """

    id: str
    account_id: str
    date: FinancialDate
    amount: Money
    payee: str | None = None
    original_payee: str | None = None
    memo: str | None = None
    category_id: str | None = None
    transfer_id: str | None = None
    transfer_account_id: str | None = None
    status: str = "cleared"
    import_source: str | None = None
    import_batch_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_transfer(self) -> bool:
        return self.transfer_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "date": self.date.to_iso_string(),
            "amount": self.amount.to_cents(),
            "payee": self.payee,
            "original_payee": self.original_payee,
            "memo": self.memo,
            "category_id": self.category_id,
            "transfer_id": self.transfer_id,
            "transfer_account_id": self.transfer_account_id,
            "status": self.status,
            "import_source": self.import_source,
            "import_batch_id": self.import_batch_id,
            "created_at": _timestamp_to_str(self.created_at),
            "updated_at": _timestamp_to_str(self.updated_at),
            "deleted_at": _timestamp_to_str(self.deleted_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerTransaction":
        return cls(
            id=data["id"],
            account_id=data["account_id"],
            date=parse_iso_date(data["date"]),
            amount=Money.from_cents(data["amount"]),
            payee=data.get("payee"),
            original_payee=data.get("original_payee"),
            memo=data.get("memo"),
            category_id=data.get("category_id"),
            transfer_id=data.get("transfer_id"),
            transfer_account_id=data.get("transfer_account_id"),
            status=data.get("status", "cleared"),
            import_source=data.get("import_source"),
            import_batch_id=data.get("import_batch_id"),
            created_at=_timestamp_from_str(data.get("created_at")),
            updated_at=_timestamp_from_str(data.get("updated_at")),
            deleted_at=_timestamp_from_str(data.get("deleted_at")),
        )


@dataclass
class RecurringRule:
    """A persisted expectation of a periodic payment."""

    id: str
    account_id: str
    payee: str
    amount: Money
    frequency: Frequency
    start_date: FinancialDate
    next_expected_date: FinancialDate | None = None
    end_date: FinancialDate | None = None
    category_id: str | None = None
    tolerance_days: int = 3
    tolerance_amount: Money = field(default_factory=Money.zero)
    is_auto_detected: bool = False
    is_active: bool = True
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "payee": self.payee,
            "amount": self.amount.to_cents(),
            "frequency": self.frequency.value,
            "start_date": self.start_date.to_iso_string(),
            "next_expected_date": self.next_expected_date.to_iso_string() if self.next_expected_date else None,
            "end_date": self.end_date.to_iso_string() if self.end_date else None,
            "category_id": self.category_id,
            "tolerance_days": self.tolerance_days,
            "tolerance_amount": self.tolerance_amount.to_cents(),
            "is_auto_detected": self.is_auto_detected,
            "is_active": self.is_active,
            "created_at": _timestamp_to_str(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecurringRule":
        return cls(
            id=data["id"],
            account_id=data["account_id"],
            payee=data["payee"],
            amount=Money.from_cents(data["amount"]),
            frequency=Frequency(data["frequency"]),
            start_date=parse_iso_date(data["start_date"]),
            next_expected_date=parse_iso_date(data["next_expected_date"]) if data.get("next_expected_date") else None,
            end_date=parse_iso_date(data["end_date"]) if data.get("end_date") else None,
            category_id=data.get("category_id"),
            tolerance_days=data.get("tolerance_days", 3),
            tolerance_amount=Money.from_cents(data.get("tolerance_amount", 0)),
            is_auto_detected=data.get("is_auto_detected", False),
            is_active=data.get("is_active", True),
            created_at=_timestamp_from_str(data.get("created_at")),
        )


@dataclass
class DetectedRecurringSeries:
    """
    A group of historical transactions judged to be a periodic payment.

    Derived on every detection request and never mutated in place.
    """

    payee: str
    normalized_payee: str
    account_id: str
    average_amount: Money
    frequency_class: Frequency
    frequency_days: int
    occurrence_count: int
    first_date: FinancialDate
    last_date: FinancialDate
    next_expected_date: FinancialDate
    member_transaction_ids: list[str] = field(default_factory=list)
    category_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "payee": self.payee,
            "normalized_payee": self.normalized_payee,
            "account_id": self.account_id,
            "average_amount": self.average_amount.to_cents(),
            "frequency": self.frequency_class.value,
            "frequency_days": self.frequency_days,
            "occurrence_count": self.occurrence_count,
            "first_date": self.first_date.to_iso_string(),
            "last_date": self.last_date.to_iso_string(),
            "next_expected_date": self.next_expected_date.to_iso_string(),
            "member_transaction_ids": list(self.member_transaction_ids),
            "category_id": self.category_id,
        }


@dataclass
class TransferCandidate:
    """Two unlinked transactions that probably represent one transfer."""

    transaction_a_id: str
    transaction_b_id: str
    confidence: float
    days_apart: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "transaction_a_id": self.transaction_a_id,
            "transaction_b_id": self.transaction_b_id,
            "confidence": self.confidence,
            "days_apart": self.days_apart,
        }


@dataclass
class ImportResult:
    """Summary of one import batch."""

    imported: int
    skipped: int
    categorized: int
    batch_id: str
    failed: int = 0
    imported_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "imported": self.imported,
            "skipped": self.skipped,
            "categorized": self.categorized,
            "failed": self.failed,
            "batch_id": self.batch_id,
        }


# Typed inputs for mutating operations


@dataclass
class ColumnMapping:
    """
    Column assignment for a tabular import.

    Columns are addressed by header name or by 0-based index. Either
    amount_column or at least one of debit_column/credit_column must be set.
    An empty date_format means "auto-detect from COMMON_DATE_FORMATS".
    """

    date_column: str | int
    amount_column: str | int | None = None
    debit_column: str | int | None = None
    credit_column: str | int | None = None
    payee_column: str | int | None = None
    memo_column: str | int | None = None
    category_column: str | int | None = None
    date_format: str = ""
    invert_amounts: bool = False


@dataclass
class CategoryRuleInput:
    """Fields for creating a category rule."""

    category_id: str
    rule_type: RuleType
    pattern: str
    amount_min: Money | None = None
    amount_max: Money | None = None
    account_id: str | None = None
    priority: int = 0
    is_active: bool = True


@dataclass
class CategoryRuleUpdate:
    """Partial update for a category rule; None leaves a field unchanged."""

    category_id: str | None = None
    rule_type: RuleType | None = None
    pattern: str | None = None
    amount_min: Money | None = None
    amount_max: Money | None = None
    account_id: str | None = None
    priority: int | None = None
    is_active: bool | None = None


@dataclass
class RecurringRuleInput:
    """Fields for creating a recurring rule."""

    account_id: str
    payee: str
    amount: Money
    frequency: Frequency
    start_date: FinancialDate
    next_expected_date: FinancialDate | None = None
    end_date: FinancialDate | None = None
    category_id: str | None = None
    tolerance_days: int = 3
    tolerance_amount: Money = field(default_factory=Money.zero)
    is_auto_detected: bool = False


@dataclass
class TransactionFilters:
    """
    Filters for listing ledger transactions.

    month is "YYYY-MM". Deleted transactions are excluded unless
    include_deleted is set.
    """

    account_id: str | None = None
    category_id: str | None = None
    month: str | None = None
    uncategorized_only: bool = False
    include_deleted: bool = False
    limit: int | None = None
