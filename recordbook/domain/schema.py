"""
Collection schemas: which model a store holds and how its records are keyed.

A `Schema` is the single description both store backends work from. The
memory store uses it to compare keys and build records; the PostgreSQL store
also uses `column_types` to emit its `CREATE TABLE` statement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Type

import pydantic
from pydantic import BaseModel

from recordbook.domain.errors import RecordValidationError
from recordbook.domain.models import Announcement, Incident, Product, Resident


@dataclass(frozen=True)
class Schema:
    """
    Description of one record collection.

    Attributes
    ----------
    name : str
        Collection name, also the SQL table name.
    model : type[BaseModel]
        Record model; its field order is the column order.
    key_field : str | None
        Field that must be unique among live records. None means no
        uniqueness is enforced (incidents).
    match_fields : tuple[str, ...]
        Fields compared for equality by key lookups. A record matches when
        any of them equals the key.
    search_fields : tuple[str, ...]
        Default fields for substring search.
    column_types : mapping
        SQL column type per field.
    """

    name: str
    model: Type[BaseModel]
    key_field: Optional[str]
    match_fields: Tuple[str, ...]
    search_fields: Tuple[str, ...]
    column_types: Mapping[str, str] = field(default_factory=dict)

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(self.model.model_fields)

    @property
    def has_quantity(self) -> bool:
        return "quantity" in self.model.model_fields

    def build(self, data: Mapping[str, Any]) -> BaseModel:
        """
        Validate `data` into a record, translating pydantic failures.
        """
        try:
            return self.model.model_validate(dict(data))
        except pydantic.ValidationError as exc:
            first = exc.errors()[0]
            loc = ".".join(str(part) for part in first.get("loc", ())) or None
            message = first.get("msg", str(exc))
            prefix = f"{self.name}.{loc}: " if loc else f"{self.name}: "
            raise RecordValidationError(prefix + message, field=loc) from exc

    def key_of(self, record: BaseModel) -> Optional[Any]:
        if self.key_field is None:
            return None
        return getattr(record, self.key_field)

    def matches_key(self, record: BaseModel, key: Any) -> bool:
        return any(getattr(record, name) == key for name in self.match_fields)

    def as_row(self, record: BaseModel) -> Dict[str, Any]:
        return {name: getattr(record, name) for name in self.fields}


PRODUCTS = Schema(
    name="products",
    model=Product,
    key_field="name",
    match_fields=("name",),
    search_fields=("name",),
    column_types={
        "name": "TEXT NOT NULL",
        "category": "TEXT NOT NULL",
        "quantity": "INTEGER NOT NULL CHECK (quantity >= 0)",
        "price": "NUMERIC(12, 2) NOT NULL CHECK (price >= 0)",
    },
)

RESIDENTS = Schema(
    name="residents",
    model=Resident,
    key_field="name",
    match_fields=("name",),
    search_fields=("name",),
    column_types={
        "name": "TEXT NOT NULL",
        "address": "TEXT NOT NULL",
        "contact": "TEXT NOT NULL",
    },
)

INCIDENTS = Schema(
    name="incidents",
    model=Incident,
    key_field=None,
    match_fields=("type", "location"),
    search_fields=("type", "location"),
    column_types={
        "type": "TEXT NOT NULL",
        "location": "TEXT NOT NULL",
        "date": "TEXT NOT NULL",
        "time": "TEXT NOT NULL",
        "description": "TEXT NOT NULL DEFAULT ''",
    },
)

ANNOUNCEMENTS = Schema(
    name="announcements",
    model=Announcement,
    key_field="title",
    match_fields=("title",),
    search_fields=("title",),
    column_types={
        "title": "TEXT NOT NULL",
        "date": "TEXT NOT NULL",
        "content": "TEXT NOT NULL",
    },
)

SCHEMAS: Dict[str, Schema] = {
    schema.name: schema for schema in (PRODUCTS, RESIDENTS, INCIDENTS, ANNOUNCEMENTS)
}


__all__ = [
    "Schema",
    "PRODUCTS",
    "RESIDENTS",
    "INCIDENTS",
    "ANNOUNCEMENTS",
    "SCHEMAS",
]
