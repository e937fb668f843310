"""Domain layer definitions."""

from .items import ItemKind, ItemStatus, ProjectAggregate, ReportEntry, WorkItem

__all__ = [
    "ItemKind",
    "ItemStatus",
    "ProjectAggregate",
    "ReportEntry",
    "WorkItem",
]
