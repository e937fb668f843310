from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from trustai.core.errors import NoContentError, ReportInProgressError, UpstreamError
from trustai.domain import ItemKind, ItemStatus, ReportEntry
from trustai.infrastructure import ItemStore, PlaceholderAdapter, ReportSections
from trustai.workers.report import ReportAggregator, build_fallback_report

FIXED_NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


class StubReportAdapter:
    def __init__(self, answer: object = "Executive report") -> None:
        self.answer = answer
        self.sections: list[ReportSections] = []

    def generate_report(self, sections: ReportSections) -> str:
        self.sections.append(sections)
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer  # type: ignore[return-value]


def _aggregator(store: ItemStore, adapter) -> ReportAggregator:
    return ReportAggregator(store, adapter, clock=lambda: FIXED_NOW)


def test_empty_input_raises_no_content():
    store = ItemStore()
    adapter = StubReportAdapter()

    with pytest.raises(NoContentError):
        asyncio.run(_aggregator(store, adapter).generate_report([], []))

    assert adapter.sections == []
    assert store.report_summary is None
    assert store.is_generating_report is False


def test_successful_report_is_stored_on_the_project():
    store = ItemStore()
    adapter = StubReportAdapter("Executive report")

    report = asyncio.run(
        _aggregator(store, adapter).generate_report([ReportEntry(name="a", content="x")], [])
    )

    assert report == "Executive report"
    assert store.report_summary == "Executive report"
    assert adapter.sections[0].audio == (ReportEntry(name="a", content="x"),)
    assert adapter.sections[0].documents == ()


def test_adapter_failure_produces_deterministic_fallback():
    store = ItemStore()
    adapter = StubReportAdapter(UpstreamError("Failed to generate report: rate limited"))
    aggregator = _aggregator(store, adapter)
    entries = [ReportEntry(name="scan.png", content="hello")]

    first = asyncio.run(aggregator.generate_report([], entries))
    second = asyncio.run(aggregator.generate_report([], entries))

    assert first == second
    assert first == build_fallback_report("Failed to generate report: rate limited", FIXED_NOW)
    assert "Date: 14/03/2025" in first
    assert "ERROR: Failed to generate report: rate limited" in first
    assert store.report_summary == first
    assert store.is_generating_report is False


def test_missing_configuration_falls_back_instead_of_raising():
    store = ItemStore()

    report = asyncio.run(
        _aggregator(store, PlaceholderAdapter()).generate_report([ReportEntry(name="a", content="x")], [])
    )

    assert report.startswith("CONSOLIDATED REPORT - Trust AI")
    assert "GROQ_API_KEY is not configured" in report


def test_blank_report_falls_back():
    store = ItemStore()

    report = asyncio.run(
        _aggregator(store, StubReportAdapter("  ")).generate_report([ReportEntry(name="a", content="x")], [])
    )

    assert "ERROR: the report service returned an empty report" in report


def test_busy_flag_is_raised_only_while_generating():
    store = ItemStore()
    observed: list[bool] = []

    class ObservingAdapter(StubReportAdapter):
        def generate_report(self, sections: ReportSections) -> str:
            observed.append(store.is_generating_report)
            return "done"

    asyncio.run(_aggregator(store, ObservingAdapter()).generate_report([ReportEntry(name="a", content="x")], []))

    assert observed == [True]
    assert store.is_generating_report is False


def test_concurrent_generation_is_rejected():
    store = ItemStore()
    store.begin_report()

    with pytest.raises(ReportInProgressError):
        asyncio.run(
            _aggregator(store, StubReportAdapter()).generate_report([ReportEntry(name="a", content="x")], [])
        )

    assert store.is_generating_report is True


def test_generate_from_store_uses_completed_items_in_order():
    store = ItemStore()
    adapter = StubReportAdapter()
    second_audio = store.add_item(ItemKind.AUDIO, "b.mp3", b"b")
    first_audio = store.add_item(ItemKind.AUDIO, "a.mp3", b"a")
    failed = store.add_item(ItemKind.AUDIO, "c.mp3", b"c")
    document = store.add_item(ItemKind.IMAGE_TEXT, "doc.png", b"d")
    store.add_item(ItemKind.IMAGE_TEXT, "pending.png", b"p")
    store.update_status(first_audio, ItemStatus.COMPLETED, "first")
    store.update_status(second_audio, ItemStatus.COMPLETED, "second")
    store.update_status(failed, ItemStatus.ERROR, error="boom")
    store.update_status(document, ItemStatus.COMPLETED, "document")

    asyncio.run(_aggregator(store, adapter).generate_from_store())

    sections = adapter.sections[0]
    assert [entry.name for entry in sections.audio] == ["b.mp3", "a.mp3"]
    assert [entry.content for entry in sections.documents] == ["document"]
