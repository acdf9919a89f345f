"""
Infrastructure package for recordbook.

Centralizes database connectivity concerns (DSN, connections, pooling).
Keep this layer focused on I/O and resource management, decoupled from
store and facade logic.
"""

from recordbook.infrastructure.db_factory import (
    build_dsn,
    open_sync_pool,
)

__all__ = [
    "build_dsn",
    "open_sync_pool",
]
