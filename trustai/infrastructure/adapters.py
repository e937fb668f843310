"""Boundary contracts for the external AI capabilities.

The queue processor and report aggregator only talk to the protocols defined
here. The concrete Groq integration lives in :mod:`trustai.infrastructure.groq`;
when no credential is configured the application installs
:class:`PlaceholderAdapter` so uploads still flow through the queue.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from trustai.core.errors import AdapterError, ConfigurationMissing
from trustai.domain import ReportEntry

logger = logging.getLogger(__name__)


class TranscriptionAdapter(Protocol):
    """Speech-to-text capability."""

    def transcribe(self, payload: bytes, filename: str) -> str:
        """Return the transcription of an audio payload."""


class TextExtractionAdapter(Protocol):
    """Image text extraction capability."""

    def extract_text(self, payload: bytes, mime_type: str) -> str:
        """Return all text found in an image payload."""


class ReportAdapter(Protocol):
    """Executive report synthesis capability."""

    def generate_report(self, sections: "ReportSections") -> str:
        """Return the report synthesized from the given sections."""


@dataclass(slots=True, frozen=True)
class ReportSections:
    """Structured input handed to a :class:`ReportAdapter`."""

    audio: tuple[ReportEntry, ...] = ()
    documents: tuple[ReportEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.audio and not self.documents


@dataclass(slots=True, frozen=True)
class AdapterOutcome:
    """Result of one adapter call: either text or a failure reason."""

    ok: bool
    text: str | None = None
    error_kind: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls, text: str) -> "AdapterOutcome":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, error_kind: str, reason: str) -> "AdapterOutcome":
        return cls(ok=False, error_kind=error_kind, reason=reason)


async def call_adapter(func: Callable[..., str], *args: Any) -> AdapterOutcome:
    """Run a blocking adapter call off the event loop and capture its outcome."""

    try:
        text = await asyncio.to_thread(func, *args)
    except AdapterError as exc:
        return AdapterOutcome.failure(exc.kind, str(exc))
    except Exception as exc:
        logger.exception("Adapter %s raised unexpectedly", getattr(func, "__qualname__", func))
        return AdapterOutcome.failure("unexpected_error", str(exc) or exc.__class__.__name__)
    return AdapterOutcome.success(text)


PLACEHOLDER_REASON = "GROQ_API_KEY is not configured"


class PlaceholderAdapter:
    """Adapter used when no upstream credential is configured.

    Transcription and extraction degrade to clearly labeled placeholder text.
    Report generation refuses so the aggregator produces its fallback report.
    """

    def transcribe(self, payload: bytes, filename: str) -> str:
        return f"[placeholder] Transcription unavailable for {filename}: {PLACEHOLDER_REASON}."

    def extract_text(self, payload: bytes, mime_type: str) -> str:
        return f"[placeholder] Text extraction unavailable ({mime_type}): {PLACEHOLDER_REASON}."

    def generate_report(self, sections: ReportSections) -> str:
        raise ConfigurationMissing(f"{PLACEHOLDER_REASON}. Add the key to the environment.")


@dataclass(slots=True)
class AdapterSet:
    """The three capabilities wired into the application."""

    transcription: TranscriptionAdapter = field(default_factory=PlaceholderAdapter)
    extraction: TextExtractionAdapter = field(default_factory=PlaceholderAdapter)
    report: ReportAdapter = field(default_factory=PlaceholderAdapter)


_adapters = AdapterSet()


def configure_adapters(
    *,
    transcription: TranscriptionAdapter | None = None,
    extraction: TextExtractionAdapter | None = None,
    report: ReportAdapter | None = None,
) -> None:
    """Install the adapters used by new sessions and the stateless endpoints."""

    global _adapters
    _adapters = AdapterSet(
        transcription=transcription or PlaceholderAdapter(),
        extraction=extraction or PlaceholderAdapter(),
        report=report or PlaceholderAdapter(),
    )


def get_adapters() -> AdapterSet:
    """Return the currently configured adapters."""

    return _adapters
