"""
Test Suite for Tally

Test Structure:
- fixtures/: Synthetic statements and ledger row builders
- unit/: Unit tests mirroring src/tally package structure
- integration/: CLI and configuration tests

Test Categories:
- Core primitives (currency, money, dates, models)
- Statement importers (delimited, fixed-layout, PDF text)
- Ledger storage and import reconciliation
- Recurring payment and transfer analysis

Test Data:
All test data uses synthetic payees and amounts. Real statements are never
included in tests.
"""
