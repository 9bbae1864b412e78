#!/usr/bin/env python3
"""
Synthetic Test Data Generators

Generates completely synthetic, anonymized statements and ledger rows for
unit and integration tests. No real payees, account numbers or balances.
"""

from tally.core.dates import FinancialDate, parse_iso_date
from tally.core.models import LedgerTransaction
from tally.core.money import Money

SYNTHETIC_CSV = (
    "Date,Description,Amount,Category\n"
    "01/15/2025,Sample Coffee Shop,-5.50,Dining\n"
    '01/16/2025,Example Payroll,"1,200.00",Income\n'
    "bad-date,Broken Row,-1.00,\n"
    "01/17/2025,Generic Grocery Store,-42.10,Groceries\n"
)

SYNTHETIC_DEBIT_CREDIT_CSV = (
    "Posted,Payee,Debit,Credit\n"
    "2025-02-01,Test Gas Station,38.20,\n"
    "2025-02-02,Mock Restaurant Refund,,12.00\n"
    "2025-02-03,Demo Hardware Store,19.99,,extra\n"
)

# Column 0 is a 10-character date; descriptions start at column 12
SYNTHETIC_FIXED_LAYOUT = """\
Example Bank Statement Export
Beginning balance as of 01/01/2025                          7,703.79
Ending balance as of 01/31/2025                             7,633.29

Date        Description                                   Amount  Running Bal.
01/01/2025  Beginning balance as of 01/01/2025                          7,703.79
01/06/2025  Zelle payment from TEST PERSON              1,285.00     8,988.79
01/07/2025  ONLINE BANKING TRANSFER TO SAV             -1,050.00     7,938.79
01/09/2025  DEBIT CARD PURCHASE COFFEE                    -5.50
this line has no date and is ignored
01/20/2025  CHECK CASHED                                -300.00     7,633.29
"""

# Document text as a PDF text extractor would return it
SYNTHETIC_CARD_STATEMENT = """\
Example Card Services
Statement closing date 01/31/2025
Account Activity
Date Description Amount
01/15/25 SAMPLE COFFEE SHOP PALO ALTO, CA 5.50
01/16/25 GENERIC GROCERY OUTLET OAKLAND, CA 82.14
01/18/25 DEMO BOOKSTORE BERKELEY, CA 23.99
01/20/25 ONLINE ORDER REFUND 113.19CR
"""


def make_ledger_transaction(
    transaction_id: str,
    account_id: str,
    date: str,
    cents: int,
    payee: str | None = None,
    category_id: str | None = None,
    **kwargs,
) -> LedgerTransaction:
    """Build a LedgerTransaction from plain values (date as YYYY-MM-DD)."""
    return LedgerTransaction(
        id=transaction_id,
        account_id=account_id,
        date=parse_iso_date(date),
        amount=Money.from_cents(cents),
        payee=payee,
        original_payee=payee,
        category_id=category_id,
        **kwargs,
    )


def periodic_transactions(
    prefix: str,
    account_id: str,
    payee: str,
    cents: int,
    start: FinancialDate,
    spacing_days: list[int],
) -> list[LedgerTransaction]:
    """
    A series of transactions, one at start and one after each spacing.

    Example:
        periodic_transactions("rent", "a1", "Landlord", -150000, start, [30, 31, 29])
        -> four transactions 30, 31 and 29 days apart
    """
    dates = [start]
    for gap in spacing_days:
        dates.append(dates[-1].add_days(gap))

    return [
        make_ledger_transaction(f"{prefix}_{i}", account_id, d.to_iso_string(), cents, payee=payee)
        for i, d in enumerate(dates)
    ]
