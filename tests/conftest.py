"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import pytest

from fuelrec.core import config as config_module
from fuelrec.store.database import Database, build_engine
from tests.fixtures.records import RecordFactory


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests never touch a real data directory or database
    monkeypatch.setenv("FUELREC_ENV", "test")
    monkeypatch.setenv("FUELREC_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("FUELREC_DATABASE_URL", f"sqlite:///{tmp_path / 'fuelrec.db'}")
    monkeypatch.delenv("FUELREC_DATE_TOLERANCE_DAYS", raising=False)
    monkeypatch.delenv("FUELREC_MATCH_RETRIES", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)

    # Every test starts from a freshly loaded configuration
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def database():
    """In-memory SQLite database with the schema created."""
    db = Database(build_engine("sqlite://"))
    db.create_schema()
    yield db
    db.engine.dispose()


@pytest.fixture
def records(database):
    """Factory for stored drivers, transactions and fuel logs."""
    return RecordFactory(database)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "currency: Tests for currency handling and precision")
    config.addinivalue_line("markers", "matching: Tests for the reconciliation pipeline")
    config.addinivalue_line("markers", "store: Tests for relational persistence")
    config.addinivalue_line("markers", "ingest: Tests for CSV upload handling")
    config.addinivalue_line("markers", "cli: Tests for command-line commands")
