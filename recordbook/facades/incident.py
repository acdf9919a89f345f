"""
Incident verbs over the `incidents` store.

Incidents have no unique key: `find`, `update` and `delete` act on the first
incident whose type or location equals the key.
"""

from __future__ import annotations

from recordbook.facades.abstract import OperationResult, RecordFacade
from recordbook.reporter import INCIDENT_COLUMNS


class IncidentFacade(RecordFacade):
    label = "incident"
    plural = "incidents"
    columns = INCIDENT_COLUMNS

    def add(
        self,
        incident_type: str,
        location: str,
        date: str,
        time: str,
        description: str = "",
    ) -> OperationResult:
        return self._add(
            {
                "type": incident_type,
                "location": location,
                "date": date,
                "time": time,
                "description": description,
            }
        )

    report = add


__all__ = ["IncidentFacade"]
