"""
PostgresRecordStore against a scripted fake pool.

The fakes only replay canned rows; they check which parameters reach the
driver and how the store turns rows and driver errors into records and
domain errors. Real SQL runs in tests/integration.
"""

from __future__ import annotations

from collections import deque
from contextlib import contextmanager, nullcontext
from decimal import Decimal
from typing import Any, Deque, List, Optional

import psycopg
import pytest
from psycopg import errors

from recordbook.domain.errors import (
    BackingStoreError,
    DuplicateKeyError,
    InsufficientStockError,
    RecordNotFoundError,
)
from recordbook.domain.models import Product
from recordbook.domain.schema import INCIDENTS, PRODUCTS, RESIDENTS
from recordbook.stores import PostgresRecordStore

EXPECTED_REMAINING_STOCK = 2


class FakeCursor:
    def __init__(self, conn: "FakeConnection", name: Optional[str] = None) -> None:
        self.conn = conn
        self.name = name
        self._batches: Deque[list] = deque()

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None

    def execute(self, query: Any, params: Optional[List[Any]] = None) -> None:
        self.conn.executed.append((self.name, list(params or [])))
        if self.conn.fail_with is not None:
            raise self.conn.fail_with
        if self.name is not None:
            rows = self.conn.results.popleft()
            size = self.conn.stream_batch
            self._batches = deque(rows[i : i + size] for i in range(0, len(rows), size))

    def fetchone(self) -> Optional[dict]:
        return self.conn.results.popleft()

    def fetchmany(self, size: int) -> list:
        self.conn.fetch_sizes.append(size)
        return self._batches.popleft() if self._batches else []


class FakeConnection:
    def __init__(self, results: List[Any], fail_with: Optional[Exception] = None) -> None:
        self.results: Deque[Any] = deque(results)
        self.fail_with = fail_with
        self.executed: List[tuple] = []
        self.fetch_sizes: List[int] = []
        self.transactions = 0
        self.stream_batch = 2

    def cursor(self, name: Optional[str] = None) -> FakeCursor:
        return FakeCursor(self, name)

    def transaction(self):
        self.transactions += 1
        return nullcontext()


class FakePool:
    def __init__(self, results: Optional[List[Any]] = None, fail_with: Optional[Exception] = None) -> None:
        self.conn = FakeConnection(results or [], fail_with)
        self.borrowed = 0

    @contextmanager
    def connection(self):
        self.borrowed += 1
        yield self.conn


def _product_row(name: str, quantity: int = 5, row_id: Optional[int] = None) -> dict:
    row = {"name": name, "category": "Parts", "quantity": quantity, "price": Decimal("2.50")}
    if row_id is not None:
        row["row_id"] = row_id
    return row


def test_ensure_schema_runs_one_statement():
    pool = FakePool()
    PostgresRecordStore(PRODUCTS, pool, batch_size=10).ensure_schema()

    assert pool.conn.executed == [(None, [])]


def test_insert_sends_fields_in_column_order():
    pool = FakePool()
    store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

    store.insert(Product(name="Laptop", category="Electronics", quantity=10, price=1200))

    assert pool.conn.executed == [(None, ["Laptop", "Electronics", 10, Decimal("1200.00")])]


def test_unique_violation_becomes_duplicate_key():
    pool = FakePool(fail_with=errors.UniqueViolation("duplicate key"))
    store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

    with pytest.raises(DuplicateKeyError) as excinfo:
        store.insert(Product(name="Laptop", category="Electronics", quantity=10, price=1200))

    assert excinfo.value.key == "Laptop"


def test_driver_errors_become_backing_store_errors():
    pool = FakePool(fail_with=psycopg.OperationalError("server closed the connection"))
    store = PostgresRecordStore(RESIDENTS, pool, batch_size=10)

    with pytest.raises(BackingStoreError, match="server closed"):
        store.size()


def test_find_by_key_binds_every_match_field():
    pool = FakePool(results=[None])
    store = PostgresRecordStore(INCIDENTS, pool, batch_size=10)

    assert store.find_by_key("Market") is None
    assert pool.conn.executed == [(None, ["Market", "Market"])]


def test_views_stream_in_batches_and_restart():
    rows = [_product_row("A"), _product_row("B"), _product_row("C")]
    pool = FakePool(results=[rows, rows])
    store = PostgresRecordStore(PRODUCTS, pool, batch_size=2)

    view = store.all()
    assert pool.borrowed == 0

    assert [product.name for product in view] == ["A", "B", "C"]
    assert [product.name for product in view] == ["A", "B", "C"]
    assert pool.conn.executed[0][0] == "products_view"
    assert set(pool.conn.fetch_sizes) == {2}


def test_substring_search_binds_needle_per_field():
    pool = FakePool(results=[[]])
    store = PostgresRecordStore(INCIDENTS, pool, batch_size=10)

    assert list(store.find_by_substring("Court", case_sensitive=False)) == []
    assert pool.conn.executed == [("incidents_view", ["Court", "Court"])]


def test_update_merges_and_writes_changed_fields_only():
    pool = FakePool(results=[_product_row("Widget", row_id=7)])
    store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

    updated = store.update("Widget", {"category": "", "quantity": 9})

    assert updated.quantity == 9
    assert updated.category == "Parts"
    assert pool.conn.transactions == 1
    assert pool.conn.executed == [(None, ["Widget"]), (None, [9, 7])]


def test_update_without_changes_only_reads():
    pool = FakePool(results=[_product_row("Widget", row_id=7)])
    store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

    assert store.update("Widget", {"name": None}).name == "Widget"
    assert len(pool.conn.executed) == 1


def test_update_unknown_key():
    pool = FakePool(results=[None])
    store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

    with pytest.raises(RecordNotFoundError):
        store.update("Ghost", {"quantity": 1})


def test_delete_returns_removed_record():
    pool = FakePool(results=[_product_row("Widget")])
    store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

    assert store.delete("Widget").name == "Widget"


def test_delete_unknown_key():
    pool = FakePool(results=[None])
    store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

    with pytest.raises(RecordNotFoundError):
        store.delete("Ghost")


class TestAdjustQuantity:
    def test_applied(self):
        pool = FakePool(results=[{"quantity": EXPECTED_REMAINING_STOCK}])
        store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

        assert store.adjust_quantity("Widget", -3) == EXPECTED_REMAINING_STOCK
        assert pool.conn.executed == [(None, [-3, "Widget", -3])]

    def test_insufficient_stock(self):
        pool = FakePool(results=[None, {"quantity": EXPECTED_REMAINING_STOCK}])
        store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

        with pytest.raises(InsufficientStockError) as excinfo:
            store.adjust_quantity("Widget", -3)

        assert excinfo.value.available == EXPECTED_REMAINING_STOCK
        assert excinfo.value.requested == 3

    def test_not_found(self):
        pool = FakePool(results=[None, None])
        store = PostgresRecordStore(PRODUCTS, pool, batch_size=10)

        with pytest.raises(RecordNotFoundError):
            store.adjust_quantity("Ghost", -1)


def test_size_reads_count():
    pool = FakePool(results=[{"n": 3}])

    assert PostgresRecordStore(RESIDENTS, pool, batch_size=10).size() == 3
