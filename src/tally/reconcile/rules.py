#!/usr/bin/env python3
"""
Category Rule Engine

Assigns categories to uncategorized ledger transactions in two passes:

1. Rule pass: active CategoryRules, highest priority first. The first rule
   whose account filter, amount range and payee pattern all match assigns
   its category.
2. Learning pass: a transaction still uncategorized takes the category of
   the most recent other transaction with exactly the same payee.

Both passes only look at uncategorized transactions, so re-running them is
a no-op.

Also provides create/update/delete/list for the rules themselves.
"""

import logging
import re
import uuid
from functools import lru_cache

from ..core.errors import NotFound, ValidationError
from ..core.models import (
    CategoryRule,
    CategoryRuleInput,
    CategoryRuleUpdate,
    LedgerTransaction,
    RuleType,
)
from ..core.money import Money
from ..ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> re.Pattern | None:
    try:
        return re.compile(pattern)
    except re.error:
        logger.debug(f"Invalid rule regex {pattern!r}, treating as no match")
        return None


def payee_matches(rule_type: RuleType, pattern: str, payee: str | None) -> bool:
    """
    Evaluate a rule pattern against a payee.

    String rule types compare case-insensitively; payee_regex is matched
    against the payee as written.
    """
    if payee is None:
        return False

    if rule_type == RuleType.PAYEE_CONTAINS:
        return pattern.lower() in payee.lower()
    if rule_type == RuleType.PAYEE_EXACT:
        return payee.lower() == pattern.lower()
    if rule_type == RuleType.PAYEE_STARTS_WITH:
        return payee.lower().startswith(pattern.lower())
    if rule_type == RuleType.PAYEE_REGEX:
        compiled = _compile_pattern(pattern)
        return compiled is not None and compiled.search(payee) is not None
    return False


def rule_matches(rule: CategoryRule, account_id: str, payee: str | None, amount: Money) -> bool:
    """
    Check whether a rule applies to a transaction.

    Pure predicate: account filter, inclusive amount bounds, then pattern.
    """
    if rule.account_id is not None and rule.account_id != account_id:
        return False
    if rule.amount_min is not None and amount < rule.amount_min:
        return False
    if rule.amount_max is not None and amount > rule.amount_max:
        return False
    return payee_matches(rule.rule_type, rule.pattern, payee)


def _active_rules_by_priority(store: LedgerStore) -> list[CategoryRule]:
    rules = [rule for rule in store.list_category_rules() if rule.is_active]
    # sort is stable, so equal priorities keep creation order
    rules.sort(key=lambda r: r.priority, reverse=True)
    return rules


def _learned_category(store: LedgerStore, txn: LedgerTransaction) -> str | None:
    """Category of the most recent other categorized transaction with the same payee."""
    history = store.query_transactions(
        lambda t: t.payee == txn.payee and t.category_id is not None and t.id != txn.id
    )
    if not history:
        return None
    return max(history, key=lambda t: t.date).category_id


def apply_category_rules(store: LedgerStore, ids: list[str] | None = None) -> int:
    """
    Categorize uncategorized transactions.

    Args:
        store: Ledger store
        ids: Restrict to these transaction ids (None means every
            uncategorized transaction)

    Returns:
        Number of transactions categorized by the rule and learning passes
    """
    if ids is not None and not ids:
        return 0

    wanted = set(ids) if ids is not None else None
    categorized = 0

    with store.transaction():
        candidates = store.query_transactions(
            lambda t: t.category_id is None and (wanted is None or t.id in wanted)
        )
        rules = _active_rules_by_priority(store)

        remaining: list[LedgerTransaction] = []
        for txn in candidates:
            rule = next((r for r in rules if rule_matches(r, txn.account_id, txn.payee, txn.amount)), None)
            if rule is None:
                remaining.append(txn)
                continue
            txn.category_id = rule.category_id
            store.update_transaction(txn)
            categorized += 1
            logger.debug(f"Rule {rule.id} categorized {txn.id} as {rule.category_id}")

        learned = 0
        for txn in remaining:
            if txn.payee is None:
                continue
            category_id = _learned_category(store, txn)
            if category_id is None:
                continue
            txn.category_id = category_id
            store.update_transaction(txn)
            learned += 1

    categorized += learned
    logger.info(f"Categorized {categorized} of {len(candidates)} transactions ({learned} from payee history)")
    return categorized


# Rule management


def _validate_rule_fields(
    store: LedgerStore, category_id: str, rule_type: RuleType, pattern: str, amount_min, amount_max
) -> None:
    if store.get_category(category_id) is None:
        raise ValidationError(f"Unknown category: {category_id}")
    if not pattern:
        raise ValidationError("Rule pattern must not be empty")
    if rule_type == RuleType.PAYEE_REGEX:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValidationError(f"Invalid regular expression {pattern!r}: {e}") from e
    if amount_min is not None and amount_max is not None and amount_min > amount_max:
        raise ValidationError("amount_min must not exceed amount_max")


def create_category_rule(store: LedgerStore, data: CategoryRuleInput) -> CategoryRule:
    """
    Create a category rule.

    Raises:
        ValidationError: If the category is unknown, the pattern empty, the
            regex invalid or the amount range inverted
    """
    with store.transaction():
        _validate_rule_fields(
            store, data.category_id, data.rule_type, data.pattern, data.amount_min, data.amount_max
        )
        rule = CategoryRule(
            id=str(uuid.uuid4()),
            category_id=data.category_id,
            rule_type=data.rule_type,
            pattern=data.pattern,
            amount_min=data.amount_min,
            amount_max=data.amount_max,
            account_id=data.account_id,
            priority=data.priority,
            is_active=data.is_active,
        )
        created = store.insert_category_rule(rule)

    logger.info(f"Created {rule.rule_type.value} rule {rule.id} -> {rule.category_id}")
    return created


def update_category_rule(store: LedgerStore, rule_id: str, changes: CategoryRuleUpdate) -> CategoryRule:
    """
    Apply a partial update to a rule. Fields left as None are unchanged.

    Raises:
        NotFound: If the rule does not exist
        ValidationError: If the updated rule would be invalid
    """
    with store.transaction():
        rule = store.get_category_rule(rule_id)
        if rule is None:
            raise NotFound(f"Category rule not found: {rule_id}")

        for field_name in (
            "category_id",
            "rule_type",
            "pattern",
            "amount_min",
            "amount_max",
            "account_id",
            "priority",
            "is_active",
        ):
            value = getattr(changes, field_name)
            if value is not None:
                setattr(rule, field_name, value)

        _validate_rule_fields(store, rule.category_id, rule.rule_type, rule.pattern, rule.amount_min, rule.amount_max)
        return store.update_category_rule(rule)


def delete_category_rule(store: LedgerStore, rule_id: str) -> None:
    """
    Delete a rule.

    Raises:
        NotFound: If the rule does not exist
    """
    if not store.delete_category_rule(rule_id):
        raise NotFound(f"Category rule not found: {rule_id}")
    logger.info(f"Deleted rule {rule_id}")


def list_category_rules(store: LedgerStore) -> list[CategoryRule]:
    """All rules, highest priority first."""
    rules = store.list_category_rules()
    rules.sort(key=lambda r: r.priority, reverse=True)
    return rules
