"""
Test Fixtures

Synthetic statement text and ledger transaction builders shared by the unit
and integration tests. Nothing here resembles a real account.
"""
