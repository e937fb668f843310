from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Sequence

from trustai.core.errors import NoContentError, ReportInProgressError
from trustai.domain import ItemKind, ReportEntry
from trustai.infrastructure.adapters import ReportAdapter, ReportSections, call_adapter
from trustai.infrastructure.items import ItemStore

logger = logging.getLogger(__name__)

FALLBACK_TEMPLATE = (
    "CONSOLIDATED REPORT - Trust AI\n"
    "Date: {date}\n"
    "\n"
    "ERROR: {reason}\n"
    "\n"
    "Please check that GROQ_API_KEY is configured correctly."
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_fallback_report(reason: str, moment: datetime) -> str:
    return FALLBACK_TEMPLATE.format(date=moment.strftime("%d/%m/%Y"), reason=reason)


class ReportAggregator:
    """Synthesizes the executive report for a store's completed items.

    Adapter failures never escape: they are turned into a deterministic
    fallback report, which is stored like any other report.
    """

    def __init__(
        self,
        store: ItemStore,
        adapter: ReportAdapter,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._adapter = adapter
        self._clock = clock

    async def generate_report(
        self,
        audio_entries: Sequence[ReportEntry],
        ocr_entries: Sequence[ReportEntry],
    ) -> str:
        sections = ReportSections(audio=tuple(audio_entries), documents=tuple(ocr_entries))
        if sections.is_empty:
            raise NoContentError("no completed content to build a report from")
        if not self._store.begin_report():
            raise ReportInProgressError("a report is already being generated")

        try:
            outcome = await call_adapter(self._adapter.generate_report, sections)
            text = (outcome.text or "").strip() if outcome.ok else ""
            if text:
                report = text
            else:
                reason = outcome.reason if not outcome.ok else "the report service returned an empty report"
                logger.warning("Report generation failed, using fallback: %s", reason)
                report = build_fallback_report(reason or "unknown error", self._clock())
            self._store.set_report_summary(report)
            return report
        finally:
            self._store.end_report()

    async def generate_from_store(self) -> str:
        """Build the report from the store's completed items in insertion order."""

        return await self.generate_report(
            self._store.completed_entries(ItemKind.AUDIO),
            self._store.completed_entries(ItemKind.IMAGE_TEXT),
        )
