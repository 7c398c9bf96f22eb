"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import pytest

import reconciler.core.config as config_module
from reconciler.matching.models import Order, Transaction
from tests.fixtures.records import make_order, make_transaction


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for test files."""
    return tmp_path


@pytest.fixture
def sample_order() -> Order:
    return make_order()


@pytest.fixture
def sample_transaction() -> Transaction:
    return make_transaction()


@pytest.fixture
def orders_csv(tmp_path):
    """Orders upload using spreadsheet-style headers (price in dollars)."""
    path = tmp_path / "orders.csv"
    path.write_text(
        "Customer,OrderId,Date,Item,Price\n"
        "Alex Abel,18G,2023-07-11,Tool A,1.23\n"
        "Brian Bell,20S,2023-08-08,Toy B,3.21\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def transactions_csv(tmp_path):
    """Transactions upload using snake_case headers (amounts in cents)."""
    path = tmp_path / "transactions.csv"
    path.write_text(
        "customer,order_id,date,item,price_cents,txn_type,amount_cents\n"
        "Alexis Abe,1B6,2023-07-12,Tool A,123,payment,123\n"
        "Alex Able,I8G,2023-07-13,Tool A,123,refund,-123\n"
        "Brian Ball,ZOS,2023-08-11,Toy B,321,payment-1,121\n"
        "Bryan,705,2023-08-13,Toy B,321,payment-2,200\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't touch real data
    monkeypatch.setenv("RECONCILER_ENV", "test")
    monkeypatch.setenv("RECONCILER_DATA_DIR", str(tmp_path / "data"))
    for name in (
        "MATCH_PROFILE",
        "MATCH_THRESHOLD",
        "MATCH_DATE_WINDOW_DAYS",
        "MATCH_MAX_WORKERS",
        "CANDIDATE_MIN_SIMILARITY",
        "LOG_LEVEL",
        "DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)

    # Drop any configuration cached by an earlier test
    monkeypatch.setattr(config_module, "_config", None)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "matching: Tests for similarity, scoring and assignment")
    config.addinivalue_line("markers", "currency: Tests for currency handling and precision")
    config.addinivalue_line("markers", "slow: Tests that take significant time to run")
