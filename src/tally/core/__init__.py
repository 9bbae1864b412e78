"""
Core Utilities Package

Shared primitives, data models and utilities used across every Tally domain.

This package provides:
- Currency and date normalization with integer-cent arithmetic
- Common data models for ledger entities and parsed statement rows
- The error hierarchy
- Configuration management for environment-specific settings
"""

from .config import (
    Config,
    Environment,
    get_config,
    get_data_dir,
    is_test,
    reload_config,
)
from .currency import (
    amount_bucket,
    cents_to_dollars_str,
    format_amount,
    format_cents,
    parse_amount,
    parse_amount_or_zero,
    truncating_mean,
)
from .dates import COMMON_DATE_FORMATS, FinancialDate, parse_date, parse_iso_date
from .errors import (
    AmountFormatError,
    DateFormatError,
    FormatError,
    LowSignalDocument,
    NotFound,
    SourceUnreadable,
    StorageUnavailable,
    TallyError,
    ValidationError,
)
from .models import (
    Account,
    Category,
    CategoryRule,
    CategoryRuleInput,
    CategoryRuleUpdate,
    ColumnMapping,
    DetectedRecurringSeries,
    Frequency,
    ImportResult,
    LedgerTransaction,
    ParsedTransaction,
    RecurringRule,
    RecurringRuleInput,
    RuleType,
    TransactionFilters,
    TransferCandidate,
)
from .money import Money

__all__ = [
    "COMMON_DATE_FORMATS",
    "Account",
    "AmountFormatError",
    "Category",
    "CategoryRule",
    "CategoryRuleInput",
    "CategoryRuleUpdate",
    "ColumnMapping",
    # Configuration
    "Config",
    "DateFormatError",
    "DetectedRecurringSeries",
    "Environment",
    "FinancialDate",
    # Errors
    "FormatError",
    "Frequency",
    "ImportResult",
    "LedgerTransaction",
    "LowSignalDocument",
    "Money",
    "NotFound",
    # Data models
    "ParsedTransaction",
    "RecurringRule",
    "RecurringRuleInput",
    "RuleType",
    "SourceUnreadable",
    "StorageUnavailable",
    "TallyError",
    "TransactionFilters",
    "TransferCandidate",
    "ValidationError",
    # Currency utilities
    "amount_bucket",
    "cents_to_dollars_str",
    "format_amount",
    "format_cents",
    "get_config",
    "get_data_dir",
    "is_test",
    "parse_amount",
    "parse_amount_or_zero",
    "parse_date",
    "parse_iso_date",
    "reload_config",
    "truncating_mean",
]
