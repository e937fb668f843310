from __future__ import annotations

import logging

from fastapi import APIRouter, File, Request, UploadFile

from trustai.core.errors import ConfigurationMissing, UpstreamError
from trustai.core.media import ensure_kind, image_mime_hint
from trustai.core.schema import (
    ExtractedTextResponse,
    GenerateReportRequest,
    ReportResponse,
    TranscriptionResponse,
)
from trustai.domain import ItemKind, ReportEntry
from trustai.infrastructure import ItemStore, PlaceholderAdapter, call_adapter, get_adapters
from trustai.routes.uploads import read_upload
from trustai.workers.report import ReportAggregator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["media"])


@router.post("/transcribe")
async def transcribe(
    request: Request,
    file: UploadFile | None = File(default=None),
    audio: UploadFile | None = File(default=None),
) -> dict:
    """Transcribe a single audio upload, sent as `file` or `audio`."""
    upload = file if file is not None else audio
    filename, payload = await read_upload(request, upload)
    ensure_kind(filename, upload.content_type, ItemKind.AUDIO)

    outcome = await call_adapter(get_adapters().transcription.transcribe, payload, filename)
    if outcome.ok:
        text = outcome.text or ""
    elif outcome.error_kind == ConfigurationMissing.kind:
        text = PlaceholderAdapter().transcribe(payload, filename)
    else:
        logger.warning("Transcription of %s failed: %s", filename, outcome.reason)
        raise UpstreamError(outcome.reason or "transcription failed")

    return TranscriptionResponse(file_name=filename, transcription=text).model_dump(by_alias=True)


@router.post("/extract-text")
async def extract_text(
    request: Request,
    file: UploadFile | None = File(default=None),
    image: UploadFile | None = File(default=None),
) -> dict:
    """Extract the text found in a single image upload, sent as `file` or `image`."""
    upload = file if file is not None else image
    filename, payload = await read_upload(request, upload)
    ensure_kind(filename, upload.content_type, ItemKind.IMAGE_TEXT)
    mime_type = image_mime_hint(filename)

    outcome = await call_adapter(get_adapters().extraction.extract_text, payload, mime_type)
    if outcome.ok:
        text = outcome.text or ""
    elif outcome.error_kind == ConfigurationMissing.kind:
        text = PlaceholderAdapter().extract_text(payload, mime_type)
    else:
        logger.warning("Text extraction of %s failed: %s", filename, outcome.reason)
        raise UpstreamError(outcome.reason or "text extraction failed")

    return ExtractedTextResponse(file_name=filename, extracted_text=text).model_dump(by_alias=True)


@router.post("/generate-report")
async def generate_report(payload: GenerateReportRequest) -> dict:
    """Synthesize a report from already processed items supplied by the caller."""
    aggregator = ReportAggregator(ItemStore(), get_adapters().report)
    report = await aggregator.generate_report(
        [ReportEntry(name=item.name, content=item.content) for item in payload.audio_items],
        [ReportEntry(name=item.name, content=item.content) for item in payload.ocr_items],
    )
    return ReportResponse(report=report).model_dump(by_alias=True)
