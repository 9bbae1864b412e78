"""
Tally - Statement Import and Reconciliation

Turns bank and card statements into a normalized local ledger and keeps it
tidy: duplicate-aware import, rule-based and learned categorization,
recurring payment detection and transfer matching.

Domain Packages:
- core: money and date primitives, models, errors, configuration
- ledger: storage protocol and the JSON ledger file
- importers: tabular, fixed-layout and PDF statement parsers
- reconcile: import reconciler and category rule engine
- analysis: recurring series detection and transfer matching
- cli: command-line interface

Example Usage:
    from tally.importers import parse_tabular
    from tally.ledger import open_ledger
    from tally.reconcile import import_transactions
"""

__version__ = "0.1.0"
__author__ = "Tally Developers"

from .core.config import Environment, get_config
from .core.models import LedgerTransaction, ParsedTransaction
from .core.money import Money

__all__ = [
    "Environment",
    "LedgerTransaction",
    "Money",
    "ParsedTransaction",
    "get_config",
]
