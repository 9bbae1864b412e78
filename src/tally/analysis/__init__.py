"""
Ledger Analysis Package

Batch analyses that run over the persisted ledger.

Key Components:
- detect_recurring: periodic payment series detection
- detect_transfers: cross-account transfer pair matching
- link_transfer / unlink_transfer: explicit transfer confirmation
- create_recurring_rule: persist a recurring expectation
- save_detected_series: persist detected series without duplicating rules
"""

from .recurring import (
    classify_frequency,
    create_recurring_rule,
    detect_recurring,
    normalize_payee,
    recurring_rule_from_detection,
    save_detected_series,
)
from .transfers import (
    detect_transfers,
    link_transfer,
    payee_similarity,
    transfer_confidence,
    unlink_transfer,
)

__all__ = [
    "classify_frequency",
    "create_recurring_rule",
    "detect_recurring",
    "detect_transfers",
    "link_transfer",
    "normalize_payee",
    "payee_similarity",
    "recurring_rule_from_detection",
    "save_detected_series",
    "transfer_confidence",
    "unlink_transfer",
]
