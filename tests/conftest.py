"""
Pytest configuration for recordbook.

Provides fixtures for:
- In-memory stores and a memory-backed session
- Settings overrides
- PostgreSQL connection management for integration tests
"""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Generator

import psycopg
import pytest
from psycopg import sql

from recordbook.config import Settings, get_settings
from recordbook.domain.models import Product, Resident
from recordbook.domain.schema import ANNOUNCEMENTS, INCIDENTS, PRODUCTS, RESIDENTS
from recordbook.session import Session, open_session
from recordbook.stores.memory import MemoryRecordStore


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """
    Drop the cached Settings so env changes made by a test take effect.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def product_store() -> MemoryRecordStore:
    return MemoryRecordStore(PRODUCTS)


@pytest.fixture
def resident_store() -> MemoryRecordStore:
    return MemoryRecordStore(RESIDENTS)


@pytest.fixture
def incident_store() -> MemoryRecordStore:
    return MemoryRecordStore(INCIDENTS)


@pytest.fixture
def announcement_store() -> MemoryRecordStore:
    return MemoryRecordStore(ANNOUNCEMENTS)


@pytest.fixture
def laptop() -> Product:
    return Product(name="Laptop", category="Electronics", quantity=10, price=Decimal("1200.00"))


@pytest.fixture
def seeded_products(product_store: MemoryRecordStore) -> MemoryRecordStore:
    """Products A (10), B (3), C (4), inserted in that order."""
    for name, quantity in (("A", 10), ("B", 3), ("C", 4)):
        product_store.insert(
            Product(name=name, category="Misc", quantity=quantity, price=Decimal("1.00"))
        )
    return product_store


@pytest.fixture
def seeded_residents(resident_store: MemoryRecordStore) -> MemoryRecordStore:
    for name in ("Ana", "Ben", "Anabelle"):
        resident_store.insert(Resident(name=name, address="Mabini St.", contact="0917"))
    return resident_store


@pytest.fixture
def memory_session() -> Generator[Session, None, None]:
    with open_session(backend="memory", settings=Settings(low_stock_threshold=5)) as session:
        yield session


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        backend="postgres",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "recordbook"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def pg_pool(test_dsn: str, db_connection_available: bool):
    """
    Session-scoped connection pool for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    from recordbook.infrastructure.db_factory import open_sync_pool

    pool = open_sync_pool(dsn=test_dsn, min_size=1, max_size=2)
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture
def clean_tables(pg_pool) -> Generator[None, None, None]:
    """
    Drop every record table before and after each test for isolation.
    """

    def _drop() -> None:
        with pg_pool.connection() as conn:
            with conn.cursor() as cur:
                for schema in (PRODUCTS, RESIDENTS, INCIDENTS, ANNOUNCEMENTS):
                    cur.execute(
                        sql.SQL("DROP TABLE IF EXISTS {}").format(
                            sql.Identifier(schema.name)
                        )
                    )

    _drop()
    yield
    _drop()
