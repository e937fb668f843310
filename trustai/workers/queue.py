from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from trustai.core.errors import BatchInProgressError, NotFoundError, ValidationError
from trustai.core.media import image_mime_hint
from trustai.domain import ItemKind, ItemStatus, ReportEntry, WorkItem
from trustai.infrastructure.adapters import (
    AdapterOutcome,
    TextExtractionAdapter,
    TranscriptionAdapter,
    call_adapter,
)
from trustai.infrastructure.items import ItemStore

logger = logging.getLogger(__name__)


def format_entry(entry: ReportEntry) -> str:
    return f"### {entry.name}\n{entry.content}"


@dataclass
class BatchResult:
    """Outcome of one queue run over a snapshot of pending items."""

    kind: ItemKind
    attempted: list[str] = field(default_factory=list)
    completed: list[ReportEntry] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    combined: list[str] = field(default_factory=list)

    @property
    def combined_text(self) -> str:
        return "\n\n".join(self.combined)

    def as_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "attempted": list(self.attempted),
            "completed": [entry.name for entry in self.completed],
            "failed": list(self.failed),
            "skipped": list(self.skipped),
            "combinedText": self.combined_text,
        }


class QueueProcessor:
    """Drains pending items of one kind through the matching adapter, one at a time."""

    def __init__(
        self,
        store: ItemStore,
        *,
        transcription: TranscriptionAdapter,
        extraction: TextExtractionAdapter,
    ) -> None:
        self._store = store
        self._transcription = transcription
        self._extraction = extraction
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run(self, kind: ItemKind) -> BatchResult:
        if self._lock.locked():
            raise BatchInProgressError("a processing run is already in progress")
        async with self._lock:
            kind = ItemKind(kind)
            snapshot = [item.id for item in self._store.pending(kind)]
            result = BatchResult(kind=kind)
            logger.info("Starting %s run over %d pending item(s)", kind.value, len(snapshot))

            for item_id in snapshot:
                if not self._store.contains(item_id):
                    logger.info("Item %s removed before processing, skipping", item_id)
                    result.skipped.append(item_id)
                    continue

                result.attempted.append(item_id)
                item = self._store.update_status(item_id, ItemStatus.PROCESSING)
                outcome = await self._dispatch(item)

                try:
                    self._record(item_id, item.name, outcome, result)
                except NotFoundError:
                    logger.info("Item %s removed while processing, result dropped", item_id)
                    result.skipped.append(item_id)

            logger.info(
                "Finished %s run: %d completed, %d failed",
                kind.value,
                len(result.completed),
                len(result.failed),
            )
            return result

    async def _dispatch(self, item: WorkItem) -> AdapterOutcome:
        try:
            payload = self._store.take_payload(item.id)
        except ValidationError as exc:
            return AdapterOutcome.failure("missing_payload", str(exc))
        if item.kind is ItemKind.AUDIO:
            return await call_adapter(self._transcription.transcribe, payload, item.name)
        return await call_adapter(self._extraction.extract_text, payload, image_mime_hint(item.name))

    def _record(self, item_id: str, name: str, outcome: AdapterOutcome, result: BatchResult) -> None:
        text = (outcome.text or "").strip() if outcome.ok else ""
        if outcome.ok and not text:
            outcome = AdapterOutcome.failure("empty_result", "adapter returned no text")

        if not outcome.ok:
            self._store.update_status(item_id, ItemStatus.ERROR, error=outcome.reason)
            result.failed.append(item_id)
            logger.warning("Item %s (%s) failed: %s", item_id, name, outcome.reason)
            return

        self._store.update_status(item_id, ItemStatus.COMPLETED, text)
        entry = ReportEntry(name=name, content=text)
        result.completed.append(entry)
        result.combined.append(format_entry(entry))
