"""
Error hierarchy shared by record stores and facades.

Stores raise these; facades catch them and report them as outcome values.
Each class carries a ``kind`` label used in `OperationResult["error"]`.
"""

from __future__ import annotations

from typing import Optional


class RecordStoreError(Exception):
    """Base class for every recoverable record store failure."""

    kind: str = "Error"


class DuplicateKeyError(RecordStoreError):
    """A live record already holds the key value."""

    kind = "DuplicateKey"

    def __init__(self, collection: str, key_field: str, key: object) -> None:
        self.collection = collection
        self.key_field = key_field
        self.key = key
        super().__init__(f"{collection}: a record with {key_field}={key!r} already exists")


class RecordNotFoundError(RecordStoreError):
    """No live record matches the key."""

    kind = "NotFound"

    def __init__(self, collection: str, key: object) -> None:
        self.collection = collection
        self.key = key
        super().__init__(f"{collection}: no record matches {key!r}")


class InsufficientStockError(RecordStoreError):
    """A quantity adjustment would drive stock below zero."""

    kind = "InsufficientStock"

    def __init__(self, key: object, available: int, requested: int) -> None:
        self.key = key
        self.available = available
        self.requested = requested
        super().__init__(
            f"not enough stock for {key!r}: requested {requested}, available {available}"
        )


class RecordValidationError(RecordStoreError):
    """A required field is empty or a value is out of range."""

    kind = "ValidationError"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class BackingStoreError(RecordStoreError):
    """The persistence collaborator failed (connection, statement, cursor)."""

    kind = "BackingStoreError"


__all__ = [
    "RecordStoreError",
    "DuplicateKeyError",
    "RecordNotFoundError",
    "InsufficientStockError",
    "RecordValidationError",
    "BackingStoreError",
]
