"""Domain entities for the batch item queue."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ItemKind(str, Enum):
    """Kinds of source material accepted by the queue."""

    AUDIO = "audio"
    IMAGE_TEXT = "ocr"


class ItemStatus(str, Enum):
    """Lifecycle of a work item within one processing attempt."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.COMPLETED, ItemStatus.ERROR)


@dataclass(slots=True)
class WorkItem:
    """One unit of submitted source material and its processing state.

    ``content`` is only populated once the item reached ``completed``.
    ``source_payload`` is released (set to ``None``) when it is handed to an
    adapter call.
    """

    id: str
    kind: ItemKind
    name: str
    status: ItemStatus = ItemStatus.PENDING
    content: str | None = None
    source_payload: bytes | None = None
    preview_handle: str | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True, frozen=True)
class ReportEntry:
    """Name/content pair drawn from a completed item."""

    name: str
    content: str


@dataclass(slots=True)
class ProjectAggregate:
    """Ordered work items plus the project-level report state."""

    items: list[WorkItem] = field(default_factory=list)
    report_summary: str | None = None
    is_generating_report: bool = False
