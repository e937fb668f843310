"""In-memory item store backing one project session."""
from __future__ import annotations

import uuid
from collections import Counter
from typing import Iterator

from trustai.core.errors import NotFoundError, ValidationError
from trustai.domain import ItemKind, ItemStatus, ProjectAggregate, ReportEntry, WorkItem


class ItemStore:
    """Ordered collection of work items and the project-level report state.

    Pure state container: no I/O, no awaiting. Iteration order is insertion
    order. Transition legality is left to the queue processor.
    """

    def __init__(self) -> None:
        self._project = ProjectAggregate()

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    def _find(self, item_id: str) -> WorkItem | None:
        for item in self._project.items:
            if item.id == item_id:
                return item
        return None

    def _require(self, item_id: str) -> WorkItem:
        item = self._find(item_id)
        if item is None:
            raise NotFoundError(f"item {item_id} not found")
        return item

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------
    def add_item(
        self,
        kind: ItemKind,
        name: str,
        source_payload: bytes,
        preview_handle: str | None = None,
    ) -> str:
        item_id = self._new_id()
        self._project.items.append(
            WorkItem(
                id=item_id,
                kind=ItemKind(kind),
                name=name,
                source_payload=source_payload,
                preview_handle=preview_handle if ItemKind(kind) is ItemKind.IMAGE_TEXT else None,
            )
        )
        return item_id

    def update_status(
        self,
        item_id: str,
        status: ItemStatus,
        content: str | None = None,
        *,
        error: str | None = None,
    ) -> WorkItem:
        item = self._require(item_id)
        status = ItemStatus(status)
        if status is ItemStatus.COMPLETED and not (content and content.strip()):
            raise ValidationError(f"item {item_id} cannot complete without content")
        item.status = status
        if item.status is ItemStatus.COMPLETED:
            item.content = content
            item.error = None
        else:
            item.content = None
            item.error = error if item.status is ItemStatus.ERROR else None
        return item

    def take_payload(self, item_id: str) -> bytes:
        """Hand the item's source payload to the caller and drop it from the store."""

        item = self._require(item_id)
        if item.source_payload is None:
            raise ValidationError(f"item {item_id} has no payload left to process")
        payload, item.source_payload = item.source_payload, None
        return payload

    def remove_item(self, item_id: str) -> None:
        self._project.items = [item for item in self._project.items if item.id != item_id]

    def clear(self) -> None:
        self._project.items = []
        self._project.report_summary = None

    # ------------------------------------------------------------------
    # report state
    # ------------------------------------------------------------------
    @property
    def report_summary(self) -> str | None:
        return self._project.report_summary

    def set_report_summary(self, text: str) -> None:
        self._project.report_summary = text

    @property
    def is_generating_report(self) -> bool:
        return self._project.is_generating_report

    def begin_report(self) -> bool:
        """Raise the busy flag; return ``False`` if it was already raised."""

        if self._project.is_generating_report:
            return False
        self._project.is_generating_report = True
        return True

    def end_report(self) -> None:
        self._project.is_generating_report = False

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[WorkItem]:
        return iter(list(self._project.items))

    def __len__(self) -> int:
        return len(self._project.items)

    def items(self) -> list[WorkItem]:
        return list(self._project.items)

    def get_item(self, item_id: str) -> WorkItem:
        return self._require(item_id)

    def contains(self, item_id: str) -> bool:
        return self._find(item_id) is not None

    def items_by_kind(self, kind: ItemKind) -> list[WorkItem]:
        return [item for item in self._project.items if item.kind is ItemKind(kind)]

    def items_by_status(self, status: ItemStatus) -> list[WorkItem]:
        return [item for item in self._project.items if item.status is ItemStatus(status)]

    def pending(self, kind: ItemKind) -> list[WorkItem]:
        return [
            item
            for item in self._project.items
            if item.kind is ItemKind(kind) and item.status is ItemStatus.PENDING
        ]

    def completed_entries(self, kind: ItemKind) -> list[ReportEntry]:
        return [
            ReportEntry(name=item.name, content=item.content)
            for item in self._project.items
            if item.kind is ItemKind(kind) and item.status is ItemStatus.COMPLETED and item.content
        ]

    def status_counts(self) -> dict[str, int]:
        counter = Counter(item.status.value for item in self._project.items)
        return {status.value: counter.get(status.value, 0) for status in ItemStatus}
