#!/usr/bin/env python3
"""
Rules CLI - Category Rule Management
"""

import click

from ..core.config import get_config
from ..core.errors import TallyError
from ..core.models import CategoryRuleInput, RuleType
from ..core.money import Money
from ..ledger import open_ledger
from ..reconcile import apply_category_rules, create_category_rule, delete_category_rule, list_category_rules


@click.group()
def rules() -> None:
    """Category rule commands."""
    pass


@rules.command("list")
def list_cmd() -> None:
    """List rules, highest priority first."""
    store = open_ledger(get_config())
    found = list_category_rules(store)
    if not found:
        click.echo("No rules")
        return

    for rule in found:
        state = "" if rule.is_active else "  (inactive)"
        click.echo(f"{rule.priority:>4}  {rule.rule_type.value:<18} {rule.pattern!r} -> {rule.category_id}  {rule.id}{state}")


@rules.command("add")
@click.argument("pattern")
@click.option("--category", "category_id", required=True, help="Category id to assign")
@click.option(
    "--type",
    "rule_type",
    type=click.Choice([t.value for t in RuleType]),
    default=RuleType.PAYEE_CONTAINS.value,
    help="Pattern type (default: payee_contains)",
)
@click.option("--priority", type=int, default=0, help="Higher runs first (default: 0)")
@click.option("--account", "account_id", help="Only apply to this account")
@click.option("--min-amount", help="Inclusive lower amount bound, e.g. -100.00")
@click.option("--max-amount", help="Inclusive upper amount bound, e.g. -5.00")
def add_cmd(
    pattern: str,
    category_id: str,
    rule_type: str,
    priority: int,
    account_id: str | None,
    min_amount: str | None,
    max_amount: str | None,
) -> None:
    """Create a category rule."""
    store = open_ledger(get_config())
    try:
        rule = create_category_rule(
            store,
            CategoryRuleInput(
                category_id=category_id,
                rule_type=RuleType(rule_type),
                pattern=pattern,
                amount_min=Money.from_text(min_amount) if min_amount else None,
                amount_max=Money.from_text(max_amount) if max_amount else None,
                account_id=account_id,
                priority=priority,
            ),
        )
    except TallyError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created rule {rule.id}")


@rules.command("delete")
@click.argument("rule_id")
def delete_cmd(rule_id: str) -> None:
    """Delete a category rule."""
    store = open_ledger(get_config())
    try:
        delete_category_rule(store, rule_id)
    except TallyError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Deleted rule {rule_id}")


@rules.command("apply")
@click.option("--ids", "transaction_ids", multiple=True, help="Only these transaction ids (repeatable)")
def apply_cmd(transaction_ids: tuple[str, ...]) -> None:
    """Categorize uncategorized transactions with rules and payee history."""
    store = open_ledger(get_config())
    count = apply_category_rules(store, ids=list(transaction_ids) if transaction_ids else None)
    click.echo(f"Categorized {count} transactions")
