"""
Facades package for recordbook.

One facade per record kind, each composing RecordStore primitives into the
verbs the CLI menus call.
"""

from recordbook.facades.abstract import OperationResult, RecordFacade
from recordbook.facades.announcement import AnnouncementFacade
from recordbook.facades.incident import IncidentFacade
from recordbook.facades.product import ProductFacade
from recordbook.facades.resident import ResidentFacade

__all__ = [
    # Abstracts
    "OperationResult",
    "RecordFacade",
    # Concrete facades
    "AnnouncementFacade",
    "IncidentFacade",
    "ProductFacade",
    "ResidentFacade",
]
