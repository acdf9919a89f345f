"""
In-memory record store: an insertion-ordered list owned by one session.
"""

from __future__ import annotations

from typing import Any, Iterator, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from recordbook.domain.errors import (
    DuplicateKeyError,
    InsufficientStockError,
    RecordNotFoundError,
)
from recordbook.domain.schema import Schema
from recordbook.stores.abstract import AbstractRecordStore, Predicate, RecordView
from recordbook.utils.logging import get_logger

log = get_logger(__name__)


class MemoryRecordStore(AbstractRecordStore):
    """
    Keeps records in a plain list. Position in the list is insertion order;
    updates replace a record in place and deletes never reorder the rest.
    """

    def __init__(self, schema: Schema) -> None:
        super().__init__(schema)
        self._records: List[BaseModel] = []

    def _index_of(self, key: Any) -> Optional[int]:
        for index, record in enumerate(self._records):
            if self.schema.matches_key(record, key):
                return index
        return None

    def _key_taken(self, key: Any, ignore: Optional[int] = None) -> bool:
        key_field = self.schema.key_field
        if key_field is None:
            return False
        return any(
            getattr(record, key_field) == key
            for index, record in enumerate(self._records)
            if index != ignore
        )

    def insert(self, record: BaseModel) -> None:
        key = self.schema.key_of(record)
        if self._key_taken(key):
            raise DuplicateKeyError(self.schema.name, self.schema.key_field, key)
        self._records.append(record)
        log.debug("inserted", extra={"collection": self.schema.name, "key": key})

    def find_by_key(self, key: Any) -> Optional[BaseModel]:
        index = self._index_of(key)
        return None if index is None else self._records[index]

    def find_by_substring(
        self,
        needle: str,
        fields: Optional[Sequence[str]] = None,
        case_sensitive: bool = True,
    ) -> RecordView:
        chosen = self._search_fields(fields)
        return self.filter(lambda record: self._contains(record, needle, chosen, case_sensitive))

    def update(self, key: Any, fields: Mapping[str, Any]) -> BaseModel:
        changes = self._changes(fields)
        index = self._index_of(key)
        if index is None:
            raise RecordNotFoundError(self.schema.name, key)
        current = self._records[index]
        if not changes:
            return current
        updated = self._merge(current, changes)
        new_key = self.schema.key_of(updated)
        if self._key_taken(new_key, ignore=index):
            raise DuplicateKeyError(self.schema.name, self.schema.key_field, new_key)
        self._records[index] = updated
        log.debug(
            "updated",
            extra={"collection": self.schema.name, "key": key, "fields": sorted(changes)},
        )
        return updated

    def delete(self, key: Any) -> BaseModel:
        index = self._index_of(key)
        if index is None:
            raise RecordNotFoundError(self.schema.name, key)
        removed = self._records.pop(index)
        log.debug("deleted", extra={"collection": self.schema.name, "key": key})
        return removed

    def adjust_quantity(self, key: Any, delta: int) -> int:
        self._require_quantity()
        index = self._index_of(key)
        if index is None:
            raise RecordNotFoundError(self.schema.name, key)
        current = self._records[index]
        new_quantity = current.quantity + delta
        if new_quantity < 0:
            raise InsufficientStockError(key, available=current.quantity, requested=-delta)
        self._records[index] = current.model_copy(update={"quantity": new_quantity})
        return new_quantity

    def filter(self, predicate: Predicate) -> RecordView:
        def _matches() -> Iterator[BaseModel]:
            # Snapshot so that mutating the store mid-iteration cannot skip records.
            for record in list(self._records):
                if predicate(record):
                    yield record

        return RecordView(_matches)

    def all(self) -> RecordView:
        return RecordView(lambda: iter(list(self._records)))

    def size(self) -> int:
        return len(self._records)


__all__ = ["MemoryRecordStore"]
