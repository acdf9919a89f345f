"""
Stores package for recordbook.

Re-exports the store interfaces and the concrete backends so downstream code
can import from `recordbook.stores` directly.
"""

from recordbook.stores.abstract import (
    AbstractRecordStore,
    Predicate,
    RecordStore,
    RecordView,
)
from recordbook.stores.memory import MemoryRecordStore
from recordbook.stores.postgres import PostgresRecordStore

__all__ = [
    # Abstracts
    "AbstractRecordStore",
    "Predicate",
    "RecordStore",
    "RecordView",
    # Concrete stores
    "MemoryRecordStore",
    "PostgresRecordStore",
]
