"""
Facade base class and the outcome contract returned by every facade verb.

A facade composes RecordStore primitives into the verbs the CLI menus call.
Domain errors never escape a verb: they come back as an OperationResult with
`ok=False` and `error` set to the error kind, so callers can report them and
carry on.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypedDict

from pydantic import BaseModel

from recordbook.domain.errors import (
    BackingStoreError,
    RecordNotFoundError,
    RecordStoreError,
    RecordValidationError,
)
from recordbook.domain.models import round_cents
from recordbook.domain.schema import Schema
from recordbook.reporter import Column, TableRenderer
from recordbook.stores.abstract import RecordStore
from recordbook.utils.logging import get_logger

log = get_logger(__name__)


class OperationResult(TypedDict, total=False):
    """
    Outcome of one facade verb.

    Only `ok` and `action` are always present. `records` holds the records the
    caller should display; `error` is the error kind name on failure.
    """

    ok: bool
    action: str
    message: str
    records: List[BaseModel]
    error: Optional[str]
    quantity: Optional[int]


def _failure(action: str, exc: RecordStoreError) -> OperationResult:
    return OperationResult(ok=False, action=action, error=exc.kind, message=str(exc), records=[])


class RecordFacade:
    """
    Domain verbs for one record kind, built on a single RecordStore.

    Subclasses set `label`, `plural`, `columns` and, where numeric input must
    be strictly positive, `positive_fields`; they also expose a typed `add`.
    """

    label: str = "record"
    plural: str = "records"
    columns: Tuple[Column, ...] = ()
    positive_fields: Tuple[str, ...] = ()

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self.renderer = TableRenderer(
            self.columns or tuple(Column(name.title(), name, 20) for name in store.schema.fields),
            empty_message=f"No {self.plural} found.",
        )

    @property
    def schema(self) -> Schema:
        return self.store.schema

    def _run(self, action: str, operation: Callable[[], OperationResult]) -> OperationResult:
        collection = self.schema.name
        try:
            result = operation()
        except BackingStoreError as exc:
            log.exception(
                f"[{collection.upper()}] {action} failed",
                extra={"collection": collection, "action": action},
            )
            return _failure(action, exc)
        except RecordStoreError as exc:
            log.warning(
                f"[{collection.upper()}] {action} rejected",
                extra={"collection": collection, "action": action, "error": exc.kind},
            )
            return _failure(action, exc)
        log.info(
            f"[{collection.upper()}] {action}",
            extra={
                "collection": collection,
                "action": action,
                "records": len(result.get("records", [])),
            },
        )
        return result

    def _check_positive(self, fields: Mapping[str, Any]) -> None:
        """
        Supplied numbers must stay above zero at the cent precision records
        are stored with, so 0.004 counts as zero.
        """
        for name in self.positive_fields:
            value = fields.get(name)
            if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
                continue
            if not isinstance(value, int):
                try:
                    value = round_cents(Decimal(str(value)))
                except ValueError:
                    # out of range; record validation reports it
                    continue
            if value <= 0:
                raise RecordValidationError(f"{name} must be greater than zero", field=name)

    def _add(self, fields: Dict[str, Any]) -> OperationResult:
        def operation() -> OperationResult:
            self._check_positive(fields)
            record = self.schema.build(fields)
            self.store.insert(record)
            return OperationResult(
                ok=True,
                action="add",
                message=f"{self.label.capitalize()} added successfully!",
                records=[record],
            )

        return self._run("add", operation)

    def view_all(self) -> OperationResult:
        def operation() -> OperationResult:
            records = list(self.store.all())
            message = f"{len(records)} {self.plural}" if records else f"No {self.plural} found."
            return OperationResult(ok=True, action="view", message=message, records=records)

        return self._run("view", operation)

    def search(self, needle: str, case_sensitive: bool = False) -> OperationResult:
        def operation() -> OperationResult:
            records = list(self.store.find_by_substring(needle, case_sensitive=case_sensitive))
            message = (
                f"{len(records)} matching {self.plural}"
                if records
                else f"No matching {self.plural} found."
            )
            return OperationResult(ok=True, action="search", message=message, records=records)

        return self._run("search", operation)

    def find(self, key: Any) -> OperationResult:
        def operation() -> OperationResult:
            record = self.store.find_by_key(key)
            if record is None:
                raise RecordNotFoundError(self.schema.name, key)
            return OperationResult(ok=True, action="find", message="Found.", records=[record])

        return self._run("find", operation)

    def update(self, key: Any, **fields: Any) -> OperationResult:
        def operation() -> OperationResult:
            self._check_positive(fields)
            record = self.store.update(key, fields)
            return OperationResult(
                ok=True,
                action="update",
                message=f"{self.label.capitalize()} updated successfully!",
                records=[record],
            )

        return self._run("update", operation)

    def delete(self, key: Any) -> OperationResult:
        def operation() -> OperationResult:
            record = self.store.delete(key)
            return OperationResult(
                ok=True,
                action="delete",
                message=f"{self.label.capitalize()} deleted successfully!",
                records=[record],
            )

        return self._run("delete", operation)

    def render(self, records: Optional[Iterable[BaseModel]] = None) -> str:
        """
        Table text for `records`, or for the whole store when omitted. A
        store failure while reading renders as the failure message.
        """
        if records is None:
            result = self.view_all()
            if not result["ok"]:
                return result["message"]
            records = result["records"]
        return self.renderer.render(records)


__all__ = ["OperationResult", "RecordFacade"]
