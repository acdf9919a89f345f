"""
Resident verbs over the `residents` store, keyed on name.
"""

from __future__ import annotations

from recordbook.facades.abstract import OperationResult, RecordFacade
from recordbook.reporter import RESIDENT_COLUMNS


class ResidentFacade(RecordFacade):
    label = "resident"
    plural = "residents"
    columns = RESIDENT_COLUMNS

    def add(self, name: str, address: str, contact: str) -> OperationResult:
        return self._add({"name": name, "address": address, "contact": contact})


__all__ = ["ResidentFacade"]
