"""
Ledger Package

Persistent storage for accounts, categories, rules and transactions.

Key Components:
- LedgerStore: storage protocol used by every mutating operation
- JsonLedgerStore: single-file JSON implementation
- operations: balance recomputation, filtered listing, soft delete
"""

from ..core.config import Config, get_config
from .operations import list_transactions, recompute_account_balance, soft_delete_transactions
from .store import DEFAULT_CATEGORIES, JsonLedgerStore, LedgerStore


def open_ledger(config: Config | None = None) -> JsonLedgerStore:
    """
    Open the configured ledger file, seeding default categories when enabled.

    Args:
        config: Configuration to use (default: global configuration)
    """
    config = config or get_config()
    store = JsonLedgerStore(config.ledger.ledger_file)
    if config.ledger.seed_categories:
        store.seed_default_categories()
    return store


__all__ = [
    "DEFAULT_CATEGORIES",
    "JsonLedgerStore",
    "LedgerStore",
    "list_transactions",
    "open_ledger",
    "recompute_account_balance",
    "soft_delete_transactions",
]
