"""
recordbook - fixed-schema record stores behind console CRUD applications.

This package provides a small, generic CRUD layer and the applications built
on it:

- Record stores (in-memory or PostgreSQL) with key uniqueness, partial
  updates, substring search and atomic stock adjustment
- A fixed-width table renderer that wraps long cell values
- Per-record-kind facades: products, residents, incidents, announcements
- Interactive inventory and barangay menus (typer + rich)
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from recordbook.config import Settings, get_settings
from recordbook.domain import (
    Announcement,
    BackingStoreError,
    DuplicateKeyError,
    Incident,
    InsufficientStockError,
    Product,
    RecordNotFoundError,
    RecordStoreError,
    RecordValidationError,
    Resident,
    Schema,
)
from recordbook.facades import (
    AnnouncementFacade,
    IncidentFacade,
    OperationResult,
    ProductFacade,
    RecordFacade,
    ResidentFacade,
)
from recordbook.reporter import Column, TableRenderer
from recordbook.session import Session, available_backends, open_session
from recordbook.stores import MemoryRecordStore, PostgresRecordStore, RecordStore, RecordView
from recordbook.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "Announcement",
    "Incident",
    "Product",
    "Resident",
    "Schema",
    # Errors
    "BackingStoreError",
    "DuplicateKeyError",
    "InsufficientStockError",
    "RecordNotFoundError",
    "RecordStoreError",
    "RecordValidationError",
    # Stores
    "RecordStore",
    "RecordView",
    "MemoryRecordStore",
    "PostgresRecordStore",
    # Facades
    "OperationResult",
    "RecordFacade",
    "ProductFacade",
    "ResidentFacade",
    "IncidentFacade",
    "AnnouncementFacade",
    # Rendering
    "Column",
    "TableRenderer",
    # Sessions
    "Session",
    "available_backends",
    "open_session",
    # Logging
    "configure_logging",
    "get_logger",
]
