"""Application service owning one item queue per user session."""
from __future__ import annotations

import base64
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from trustai.core.errors import (
    BatchInProgressError,
    NotFoundError,
    ReportInProgressError,
    ValidationError,
)
from trustai.core.media import image_mime_hint, resolve_kind
from trustai.domain import ItemKind, ItemStatus, WorkItem
from trustai.infrastructure import ItemStore, get_adapters
from trustai.workers.queue import BatchResult, QueueProcessor
from trustai.workers.report import ReportAggregator

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Explicitly owned store plus the workers bound to it."""

    session_id: str
    store: ItemStore
    processor: QueueProcessor
    aggregator: ReportAggregator
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def serialise_item(item: WorkItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "type": item.kind.value,
        "name": item.name,
        "status": item.status.value,
        "content": item.content,
        "error": item.error,
        "preview": item.preview_handle,
        "createdAt": item.created_at.isoformat(),
    }


class SessionService:
    """Coordinates queue and report use cases for live sessions."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    # ------------------------------------------------------------------
    # session lifecycle
    # ------------------------------------------------------------------
    def create_session(self) -> str:
        adapters = get_adapters()
        store = ItemStore()
        session = Session(
            session_id=uuid.uuid4().hex,
            store=store,
            processor=QueueProcessor(
                store,
                transcription=adapters.transcription,
                extraction=adapters.extraction,
            ),
            aggregator=ReportAggregator(store, adapters.report),
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s", session.session_id)
        return session.session_id

    def get_session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError(f"session {session_id} not found")
        return session

    def close_session(self, session_id: str) -> None:
        """Drop a session, releasing its payloads, previews and report."""

        session = self.get_session(session_id)
        if session.processor.is_running:
            raise BatchInProgressError(f"session {session_id} is still processing items")
        if session.store.is_generating_report:
            raise ReportInProgressError(f"session {session_id} is still generating a report")
        session.store.clear()
        del self._sessions[session_id]
        logger.info("Closed session %s", session_id)

    def get_overview(self, session_id: str) -> dict[str, object]:
        session = self.get_session(session_id)
        store = session.store
        return {
            "sessionId": session.session_id,
            "createdAt": session.created_at.isoformat(),
            "items": [serialise_item(item) for item in store],
            "counts": store.status_counts(),
            "reportSummary": store.report_summary,
            "isGeneratingReport": store.is_generating_report,
            "isProcessing": session.processor.is_running,
        }

    # ------------------------------------------------------------------
    # items
    # ------------------------------------------------------------------
    def add_upload(
        self,
        session_id: str,
        *,
        filename: str,
        content_type: str | None,
        payload: bytes,
        kind: str | None = None,
    ) -> WorkItem:
        session = self.get_session(session_id)
        if not filename:
            raise ValidationError("uploaded file must have a filename")
        if not payload:
            raise ValidationError(f"{filename} is empty")

        item_kind = resolve_kind(filename, content_type, kind)
        preview: str | None = None
        if item_kind is ItemKind.IMAGE_TEXT:
            encoded = base64.b64encode(payload).decode("ascii")
            preview = f"data:{image_mime_hint(filename)};base64,{encoded}"

        item_id = session.store.add_item(item_kind, filename, payload, preview)
        return session.store.get_item(item_id)

    def list_items(
        self,
        session_id: str,
        *,
        kind: ItemKind | None = None,
        status: ItemStatus | None = None,
    ) -> list[WorkItem]:
        store = self.get_session(session_id).store
        items = store.items_by_kind(kind) if kind is not None else store.items()
        if status is not None:
            items = [item for item in items if item.status is status]
        return items

    def remove_item(self, session_id: str, item_id: str) -> None:
        self.get_session(session_id).store.remove_item(item_id)

    def clear(self, session_id: str) -> None:
        self.get_session(session_id).store.clear()

    # ------------------------------------------------------------------
    # processing & reporting
    # ------------------------------------------------------------------
    async def process(self, session_id: str, kind: ItemKind) -> BatchResult:
        return await self.get_session(session_id).processor.run(kind)

    async def generate_report(self, session_id: str) -> str:
        return await self.get_session(session_id).aggregator.generate_from_store()

    def get_report(self, session_id: str) -> str:
        report = self.get_session(session_id).store.report_summary
        if report is None:
            raise NotFoundError("no report has been generated for this session")
        return report

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._sessions.clear()


_service = SessionService()


def get_session_service() -> SessionService:
    """Return the singleton session service for the process."""

    return _service


def reset_session_state() -> None:
    """Drop every live session (used in tests)."""

    _service.reset()
