"""
Session wiring: builds the record stores and facades for one CLI session.

Usage:
    from recordbook.session import open_session

    with open_session(backend="memory") as session:
        session.products.add("Laptop", "Electronics", 10, 1200)
        print(session.products.render())

Each session owns its stores (and, for PostgreSQL, its connection pool);
nothing is shared at module level. Schema creation happens when the session
opens; a BackingStoreError at that point is fatal for the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import psycopg

from recordbook.config import Settings, get_settings
from recordbook.domain.errors import BackingStoreError
from recordbook.domain.schema import ANNOUNCEMENTS, INCIDENTS, PRODUCTS, RESIDENTS, Schema
from recordbook.facades import AnnouncementFacade, IncidentFacade, ProductFacade, ResidentFacade
from recordbook.infrastructure.db_factory import build_dsn, open_sync_pool
from recordbook.stores.abstract import RecordStore
from recordbook.stores.memory import MemoryRecordStore
from recordbook.stores.postgres import PostgresRecordStore
from recordbook.utils.logging import get_logger

log = get_logger(__name__)

StoreFactory = Callable[[Schema], RecordStore]


@dataclass
class Session:
    """The four facades of one session plus the resources backing them."""

    backend: str
    products: ProductFacade
    residents: ResidentFacade
    incidents: IncidentFacade
    announcements: AnnouncementFacade
    resources: List[Any] = field(default_factory=list)

    @property
    def stores(self) -> Dict[str, RecordStore]:
        facades = (self.products, self.residents, self.incidents, self.announcements)
        return {facade.schema.name: facade.store for facade in facades}

    def close(self) -> None:
        for store in self.stores.values():
            store.close()
        while self.resources:
            resource = self.resources.pop()
            resource.close()
        log.info("Session closed", extra={"backend": self.backend})

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _memory_factory(settings: Settings, resources: List[Any]) -> StoreFactory:
    return MemoryRecordStore


def _postgres_factory(settings: Settings, resources: List[Any]) -> StoreFactory:
    try:
        pool = open_sync_pool(
            dsn=build_dsn(settings),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
    except psycopg.Error as exc:
        raise BackingStoreError(f"cannot connect to PostgreSQL: {exc}") from exc
    resources.append(pool)
    return lambda schema: PostgresRecordStore(
        schema, pool, batch_size=settings.db_fetch_batch_size
    )


def _backend_factories() -> Dict[str, Callable[[Settings, List[Any]], StoreFactory]]:
    """Registry of available storage backends."""
    return {
        "memory": _memory_factory,
        "postgres": _postgres_factory,
    }


def available_backends() -> List[str]:
    """List available backend names."""
    return sorted(_backend_factories().keys())


def open_session(
    backend: Optional[str] = None,
    settings: Optional[Settings] = None,
    store_factory: Optional[StoreFactory] = None,
) -> Session:
    """
    Build stores and facades for every record kind and make sure their
    schemas exist.

    Parameters
    ----------
    backend : str | None
        Backend name; defaults to `settings.backend`.
    settings : Settings | None
        Settings to use; defaults to the cached `get_settings()`.
    store_factory : callable | None
        Builds a store for a schema, bypassing the backend registry (tests).

    Raises
    ------
    ValueError
        If the backend is unknown.
    BackingStoreError
        If the backing store cannot be reached or a schema cannot be created.
    """
    settings = settings or get_settings()
    name = backend or settings.backend
    resources: List[Any] = []

    if store_factory is None:
        factories = _backend_factories()
        if name not in factories:
            raise ValueError(f"Unknown backend '{name}'. Available: {', '.join(factories)}")
        store_factory = factories[name](settings, resources)

    stores = {
        schema.name: store_factory(schema)
        for schema in (PRODUCTS, RESIDENTS, INCIDENTS, ANNOUNCEMENTS)
    }
    try:
        for store in stores.values():
            store.ensure_schema()
    except BackingStoreError:
        log.exception("Schema initialisation failed", extra={"backend": name})
        for resource in resources:
            resource.close()
        raise

    log.info("Session opened", extra={"backend": name, "collections": sorted(stores)})
    return Session(
        backend=name,
        products=ProductFacade(
            stores[PRODUCTS.name], low_stock_threshold=settings.low_stock_threshold
        ),
        residents=ResidentFacade(stores[RESIDENTS.name]),
        incidents=IncidentFacade(stores[INCIDENTS.name]),
        announcements=AnnouncementFacade(stores[ANNOUNCEMENTS.name]),
        resources=resources,
    )


__all__ = [
    "Session",
    "available_backends",
    "open_session",
]
