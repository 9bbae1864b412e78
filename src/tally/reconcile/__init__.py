"""
Reconciliation Package

Moves parsed statement rows into the ledger and keeps them categorized.

Key Components:
- import_transactions: duplicate-aware batch import into one account
- apply_category_rules: rule pass plus payee-history learning pass
- Category rule management (create/update/delete/list)
"""

from .importer import find_duplicate, import_transactions
from .rules import (
    apply_category_rules,
    create_category_rule,
    delete_category_rule,
    list_category_rules,
    payee_matches,
    rule_matches,
    update_category_rule,
)

__all__ = [
    "apply_category_rules",
    "create_category_rule",
    "delete_category_rule",
    "find_duplicate",
    "import_transactions",
    "list_category_rules",
    "payee_matches",
    "rule_matches",
    "update_category_rule",
]
