"""Root-level pytest fixtures for all tests.

Provides shared fixtures including:
- In-memory SQLite engine and session seeded with catalog data
- Recording builder for asserting emitted builder calls
- Environment isolation for QUERY_FILTERS_* settings
"""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine, insert
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests.helpers.catalog import CUSTOMERS, PRODUCTS, Base, Customer, Product
from tests.helpers.recording_builder import RecordingBuilder


# ============================================================================
# Pytest Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests executing queries against SQLite"
    )


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _clean_filter_env(monkeypatch) -> None:
    """Run every test with default query-filters settings."""
    for name in (
        "QUERY_FILTERS_KEY",
        "QUERY_FILTERS_ORDER_KEY",
        "QUERY_FILTERS_AUTO_DISCOVERY",
    ):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db_engine():
    """Create an in-memory SQLite engine seeded with products and customers.

    StaticPool keeps the single in-memory connection alive across sessions.
    """
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(insert(Product), PRODUCTS)
        conn.execute(insert(Customer), CUSTOMERS)

    yield engine

    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a session bound to the seeded engine."""
    session_factory = sessionmaker(bind=db_engine)
    session = session_factory()
    yield session
    session.close()


# ============================================================================
# Builder Fixtures
# ============================================================================


@pytest.fixture
def recorder() -> RecordingBuilder:
    """Fresh recording builder."""
    return RecordingBuilder()
