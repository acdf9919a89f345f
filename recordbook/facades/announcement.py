"""
Announcement verbs over the `announcements` store, keyed on title.
"""

from __future__ import annotations

from recordbook.facades.abstract import OperationResult, RecordFacade
from recordbook.reporter import ANNOUNCEMENT_COLUMNS


class AnnouncementFacade(RecordFacade):
    label = "announcement"
    plural = "announcements"
    columns = ANNOUNCEMENT_COLUMNS

    def add(self, title: str, date: str, content: str) -> OperationResult:
        return self._add({"title": title, "date": date, "content": content})


__all__ = ["AnnouncementFacade"]
