"""
PostgreSQL record store built on psycopg 3 and a psycopg_pool ConnectionPool.

Each collection is one table with a hidden BIGSERIAL `row_id` that fixes
insertion order. Every operation borrows a pooled connection for its own
statements only. Reads that can return many rows stream through a server-side
cursor in fetchmany batches, so views stay lazy.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterator, List, Mapping, Optional, Sequence, Tuple

import psycopg
from psycopg import errors, sql
from pydantic import BaseModel

from recordbook.config import get_settings
from recordbook.domain.errors import (
    BackingStoreError,
    DuplicateKeyError,
    InsufficientStockError,
    RecordNotFoundError,
)
from recordbook.domain.schema import Schema
from recordbook.stores.abstract import AbstractRecordStore, Predicate, RecordView
from recordbook.utils.logging import get_logger

log = get_logger(__name__)


def _batched_fetch(cursor: psycopg.Cursor, batch_size: int) -> Iterator[list]:
    """
    Yield batches from a cursor using fetchmany.
    """
    while True:
        batch = cursor.fetchmany(batch_size)
        if not batch:
            break
        yield batch


class PostgresRecordStore(AbstractRecordStore):
    """
    Record store persisted in one PostgreSQL table.

    Parameters
    ----------
    schema : Schema
        Collection description; `schema.name` is the table name.
    pool : psycopg_pool.ConnectionPool
        Pool configured with a dict row factory. The store borrows
        connections but does not own the pool.
    batch_size : int, optional
        Rows per fetchmany call when streaming views.
    """

    def __init__(self, schema: Schema, pool: Any, batch_size: Optional[int] = None) -> None:
        super().__init__(schema)
        self._pool = pool
        self.batch_size = batch_size or get_settings().db_fetch_batch_size
        self._table = sql.Identifier(schema.name)
        self._columns = sql.SQL(", ").join(sql.Identifier(name) for name in schema.fields)

    @contextmanager
    def _connection(self, key: Any = None) -> Generator[psycopg.Connection, None, None]:
        try:
            with self._pool.connection() as conn:
                yield conn
        except errors.UniqueViolation as exc:
            raise DuplicateKeyError(
                self.schema.name, self.schema.key_field or "key", key
            ) from exc
        except psycopg.Error as exc:
            log.error(
                "Backing store failure",
                extra={"collection": self.schema.name, "error": str(exc)},
            )
            raise BackingStoreError(f"{self.schema.name}: {exc}") from exc

    # SQL fragments

    def _match(self, key: Any) -> Tuple[sql.Composable, List[Any]]:
        clause = sql.SQL(" OR ").join(
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in self.schema.match_fields
        )
        return clause, [key] * len(self.schema.match_fields)

    def _first_match_id(self, key: Any) -> Tuple[sql.Composable, List[Any]]:
        clause, params = self._match(key)
        query = sql.SQL("SELECT row_id FROM {table} WHERE {match} ORDER BY row_id LIMIT 1").format(
            table=self._table, match=clause
        )
        return query, params

    def _to_record(self, row: Mapping[str, Any]) -> BaseModel:
        return self.schema.build({name: row[name] for name in self.schema.fields})

    def _stream(self, query: sql.Composable, params: Sequence[Any]) -> Iterator[BaseModel]:
        with self._connection() as conn:
            with conn.cursor(name=f"{self.schema.name}_view") as cur:
                cur.execute(query, params)
                for batch in _batched_fetch(cur, self.batch_size):
                    for row in batch:
                        yield self._to_record(row)

    # Operations

    def ensure_schema(self) -> None:
        definitions: List[sql.Composable] = [sql.SQL("row_id BIGSERIAL PRIMARY KEY")]
        for name in self.schema.fields:
            definitions.append(
                sql.SQL("{} {}").format(
                    sql.Identifier(name), sql.SQL(self.schema.column_types.get(name, "TEXT"))
                )
            )
        if self.schema.key_field:
            definitions.append(
                sql.SQL("UNIQUE ({})").format(sql.Identifier(self.schema.key_field))
            )
        query = sql.SQL("CREATE TABLE IF NOT EXISTS {table} ({definitions})").format(
            table=self._table, definitions=sql.SQL(", ").join(definitions)
        )
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query)
        log.info("Schema ready", extra={"collection": self.schema.name})

    def insert(self, record: BaseModel) -> None:
        row = self.schema.as_row(record)
        query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values})").format(
            table=self._table,
            columns=self._columns,
            values=sql.SQL(", ").join([sql.Placeholder()] * len(row)),
        )
        key = self.schema.key_of(record)
        with self._connection(key=key) as conn:
            with conn.cursor() as cur:
                cur.execute(query, list(row.values()))
        log.debug("inserted", extra={"collection": self.schema.name, "key": key})

    def find_by_key(self, key: Any) -> Optional[BaseModel]:
        clause, params = self._match(key)
        query = sql.SQL(
            "SELECT {columns} FROM {table} WHERE {match} ORDER BY row_id LIMIT 1"
        ).format(columns=self._columns, table=self._table, match=clause)
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        return None if row is None else self._to_record(row)

    def find_by_substring(
        self,
        needle: str,
        fields: Optional[Sequence[str]] = None,
        case_sensitive: bool = True,
    ) -> RecordView:
        chosen = self._search_fields(fields)
        if case_sensitive:
            template = "strpos({}::text, %s) > 0"
        else:
            template = "strpos(lower({}::text), lower(%s)) > 0"
        clause = sql.SQL(" OR ").join(
            sql.SQL(template).format(sql.Identifier(name)) for name in chosen
        )
        query = sql.SQL("SELECT {columns} FROM {table} WHERE {match} ORDER BY row_id").format(
            columns=self._columns, table=self._table, match=clause
        )
        params = [needle] * len(chosen)
        return RecordView(lambda: self._stream(query, params))

    def update(self, key: Any, fields: Mapping[str, Any]) -> BaseModel:
        changes = self._changes(fields)
        clause, params = self._match(key)
        select = sql.SQL(
            "SELECT row_id, {columns} FROM {table} WHERE {match} ORDER BY row_id LIMIT 1 FOR UPDATE"
        ).format(columns=self._columns, table=self._table, match=clause)
        new_key = changes.get(self.schema.key_field, key) if self.schema.key_field else key
        with self._connection(key=new_key) as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    cur.execute(select, params)
                    row = cur.fetchone()
                    if row is None:
                        raise RecordNotFoundError(self.schema.name, key)
                    current = self._to_record(row)
                    if not changes:
                        return current
                    updated = self._merge(current, changes)
                    values: Dict[str, Any] = {name: getattr(updated, name) for name in changes}
                    assignments = sql.SQL(", ").join(
                        sql.SQL("{} = %s").format(sql.Identifier(name)) for name in values
                    )
                    cur.execute(
                        sql.SQL("UPDATE {table} SET {assignments} WHERE row_id = %s").format(
                            table=self._table, assignments=assignments
                        ),
                        [*values.values(), row["row_id"]],
                    )
        log.debug(
            "updated",
            extra={"collection": self.schema.name, "key": key, "fields": sorted(changes)},
        )
        return updated

    def delete(self, key: Any) -> BaseModel:
        first_id, params = self._first_match_id(key)
        query = sql.SQL(
            "DELETE FROM {table} WHERE row_id = ({first_id}) RETURNING {columns}"
        ).format(table=self._table, first_id=first_id, columns=self._columns)
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        if row is None:
            raise RecordNotFoundError(self.schema.name, key)
        log.debug("deleted", extra={"collection": self.schema.name, "key": key})
        return self._to_record(row)

    def adjust_quantity(self, key: Any, delta: int) -> int:
        """
        Conditional `quantity = quantity + delta` in one UPDATE; the row is
        only touched when the result stays non-negative.
        """
        self._require_quantity()
        first_id, match_params = self._first_match_id(key)
        apply = sql.SQL(
            "UPDATE {table} SET quantity = quantity + %s "
            "WHERE row_id = ({first_id}) AND quantity + %s >= 0 RETURNING quantity"
        ).format(table=self._table, first_id=first_id)
        clause, params = self._match(key)
        current = sql.SQL(
            "SELECT quantity FROM {table} WHERE {match} ORDER BY row_id LIMIT 1"
        ).format(table=self._table, match=clause)
        with self._connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    cur.execute(apply, [delta, *match_params, delta])
                    row = cur.fetchone()
                    if row is not None:
                        return row["quantity"]
                    cur.execute(current, params)
                    existing = cur.fetchone()
        if existing is None:
            raise RecordNotFoundError(self.schema.name, key)
        raise InsufficientStockError(key, available=existing["quantity"], requested=-delta)

    def filter(self, predicate: Predicate) -> RecordView:
        def _matches() -> Iterator[BaseModel]:
            for record in self.all():
                if predicate(record):
                    yield record

        return RecordView(_matches)

    def all(self) -> RecordView:
        query = sql.SQL("SELECT {columns} FROM {table} ORDER BY row_id").format(
            columns=self._columns, table=self._table
        )
        return RecordView(lambda: self._stream(query, []))

    def size(self) -> int:
        query = sql.SQL("SELECT COUNT(*) AS n FROM {table}").format(table=self._table)
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query)
                row = cur.fetchone()
        return int(row["n"])


__all__ = ["PostgresRecordStore"]
