"""
Domain package for recordbook.

Exports the record models, collection schemas and the error hierarchy used
across stores, facades and the CLI. Keep this package focused on data
definitions and validation concerns.
"""

from recordbook.domain.errors import (
    BackingStoreError,
    DuplicateKeyError,
    InsufficientStockError,
    RecordNotFoundError,
    RecordStoreError,
    RecordValidationError,
)
from recordbook.domain.models import Announcement, Incident, Product, Resident
from recordbook.domain.schema import (
    ANNOUNCEMENTS,
    INCIDENTS,
    PRODUCTS,
    RESIDENTS,
    SCHEMAS,
    Schema,
)

__all__ = [
    # Models
    "Announcement",
    "Incident",
    "Product",
    "Resident",
    # Schemas
    "Schema",
    "ANNOUNCEMENTS",
    "INCIDENTS",
    "PRODUCTS",
    "RESIDENTS",
    "SCHEMAS",
    # Errors
    "BackingStoreError",
    "DuplicateKeyError",
    "InsufficientStockError",
    "RecordNotFoundError",
    "RecordStoreError",
    "RecordValidationError",
]
