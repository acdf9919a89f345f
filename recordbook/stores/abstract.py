"""
Abstract record store interfaces for recordbook.

Concrete stores (in-memory, PostgreSQL) implement the RecordStore protocol,
usually by subclassing AbstractRecordStore, which holds the partial-update and
matching rules so that every backend applies them identically.
"""

from __future__ import annotations

import abc
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

from pydantic import BaseModel

from recordbook.domain.errors import RecordValidationError
from recordbook.domain.schema import Schema

Predicate = Callable[[BaseModel], bool]


class RecordView(Iterable[BaseModel]):
    """
    Lazy, restartable view over store records.

    Every call to `__iter__` re-runs `source`, so a view can be iterated any
    number of times and always reflects the store at iteration time.
    """

    def __init__(self, source: Callable[[], Iterator[BaseModel]]) -> None:
        self._source = source

    def __iter__(self) -> Iterator[BaseModel]:
        return self._source()


@runtime_checkable
class RecordStore(Protocol):
    """
    Common interface all record stores implement.

    Attributes
    ----------
    schema : Schema
        The collection this store holds.
    """

    schema: Schema

    def ensure_schema(self) -> None:
        """Create the backing collection if it does not exist (idempotent)."""
        ...

    def insert(self, record: BaseModel) -> None:
        """Append a record. Raises DuplicateKeyError on a live key clash."""
        ...

    def find_by_key(self, key: Any) -> Optional[BaseModel]:
        """First record whose match fields equal `key`, or None."""
        ...

    def find_by_substring(
        self,
        needle: str,
        fields: Optional[Sequence[str]] = None,
        case_sensitive: bool = True,
    ) -> RecordView:
        """Records where any of `fields` contains `needle`."""
        ...

    def update(self, key: Any, fields: Mapping[str, Any]) -> BaseModel:
        """Apply the non-empty `fields` to the first match and return it."""
        ...

    def delete(self, key: Any) -> BaseModel:
        """Remove and return the first match."""
        ...

    def adjust_quantity(self, key: Any, delta: int) -> int:
        """Add `delta` to the matched record's quantity and return the result."""
        ...

    def filter(self, predicate: Predicate) -> RecordView:
        """Records satisfying `predicate`, in store order."""
        ...

    def all(self) -> RecordView:
        ...

    def size(self) -> int:
        ...

    def close(self) -> None:
        ...


class AbstractRecordStore(abc.ABC):
    """
    ABC helper for class-based store implementations.

    Subclasses implement the storage primitives; matching, partial updates
    and field checks live here.
    """

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[BaseModel]:
        return iter(self.all())

    def ensure_schema(self) -> None:
        return None

    def close(self) -> None:
        return None

    @abc.abstractmethod
    def insert(self, record: BaseModel) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def find_by_key(self, key: Any) -> Optional[BaseModel]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def find_by_substring(
        self,
        needle: str,
        fields: Optional[Sequence[str]] = None,
        case_sensitive: bool = True,
    ) -> RecordView:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def update(self, key: Any, fields: Mapping[str, Any]) -> BaseModel:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, key: Any) -> BaseModel:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def adjust_quantity(self, key: Any, delta: int) -> int:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def filter(self, predicate: Predicate) -> RecordView:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def all(self) -> RecordView:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def size(self) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    # Shared rules

    def _search_fields(self, fields: Optional[Sequence[str]]) -> Tuple[str, ...]:
        chosen = tuple(fields) if fields else self.schema.search_fields
        unknown = [name for name in chosen if name not in self.schema.fields]
        if unknown:
            raise RecordValidationError(
                f"{self.schema.name}: unknown search field(s) {', '.join(unknown)}",
                field=unknown[0],
            )
        return chosen

    def _contains(
        self, record: BaseModel, needle: str, fields: Sequence[str], case_sensitive: bool
    ) -> bool:
        if not case_sensitive:
            needle = needle.lower()
        for name in fields:
            value = str(getattr(record, name))
            if not case_sensitive:
                value = value.lower()
            if needle in value:
                return True
        return False

    def _changes(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Keep only the supplied, non-empty fields. None and "" mean "keep".
        """
        unknown = [name for name in fields if name not in self.schema.fields]
        if unknown:
            raise RecordValidationError(
                f"{self.schema.name}: unknown field(s) {', '.join(unknown)}",
                field=unknown[0],
            )
        return {
            name: value
            for name, value in fields.items()
            if value is not None and not (isinstance(value, str) and value.strip() == "")
        }

    def _merge(self, current: BaseModel, changes: Mapping[str, Any]) -> BaseModel:
        merged = self.schema.as_row(current)
        merged.update(changes)
        return self.schema.build(merged)

    def _require_quantity(self) -> None:
        if not self.schema.has_quantity:
            raise RecordValidationError(
                f"{self.schema.name}: records have no quantity field", field="quantity"
            )


__all__ = [
    "Predicate",
    "RecordView",
    "RecordStore",
    "AbstractRecordStore",
]
