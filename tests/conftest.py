"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import pytest

from tally.core.config import reload_config
from tally.core.models import Account
from tally.ledger import JsonLedgerStore


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use production data
    monkeypatch.setenv("TALLY_ENV", "test")
    monkeypatch.setenv("TALLY_DATA_DIR", str(tmp_path / "tally_data"))
    monkeypatch.delenv("TALLY_LEDGER_FILE", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    reload_config()


@pytest.fixture
def store(tmp_path):
    """Ledger store in a temp file with the default categories seeded."""
    ledger = JsonLedgerStore(tmp_path / "ledger.json")
    ledger.seed_default_categories()
    yield ledger
    ledger.close()


@pytest.fixture
def checking(store) -> Account:
    """A checking account in the test ledger."""
    return store.insert_account(Account(id="acct_checking", name="Everyday Checking"))


@pytest.fixture
def savings(store) -> Account:
    """A savings account in the test ledger."""
    return store.insert_account(Account(id="acct_savings", name="Rainy Day Savings", account_type="savings"))


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "currency: Tests for currency handling and precision")
    config.addinivalue_line("markers", "importers: Tests for statement parsers")
    config.addinivalue_line("markers", "ledger: Tests for ledger storage and operations")
    config.addinivalue_line("markers", "reconcile: Tests for import reconciliation and category rules")
    config.addinivalue_line("markers", "analysis: Tests for recurring and transfer detection")
