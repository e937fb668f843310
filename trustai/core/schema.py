from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, constr
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportItem(CamelModel):
    name: str
    content: constr(min_length=1)


class GenerateReportRequest(CamelModel):
    audio_items: list[ReportItem] = Field(default_factory=list)
    ocr_items: list[ReportItem] = Field(default_factory=list)


class TranscriptionResponse(CamelModel):
    file_name: str
    transcription: str


class ExtractedTextResponse(CamelModel):
    file_name: str
    extracted_text: str


class ReportResponse(CamelModel):
    report: str


class ErrorResponse(CamelModel):
    error: str
    details: str


class ProcessRequest(CamelModel):
    kind: Literal["audio", "ocr"]


class ProjectItemRecord(CamelModel):
    type: Literal["audio", "ocr"]
    name: str
    content: str | None = None
    status: Literal["pending", "processing", "completed", "error"] = "pending"


class ProjectCreate(CamelModel):
    name: constr(strip_whitespace=True, min_length=1)
    items: list[ProjectItemRecord] = Field(default_factory=list)
    report_summary: str | None = None


class ProjectUpdate(CamelModel):
    name: constr(strip_whitespace=True, min_length=1) | None = None
    items: list[ProjectItemRecord] | None = None
    report_summary: str | None = None


class ProjectRecord(CamelModel):
    id: int
    name: str
    created_at: datetime
    items: list[ProjectItemRecord] = Field(default_factory=list)
    report_summary: str | None = None


class SaveSessionRequest(CamelModel):
    name: constr(strip_whitespace=True, min_length=1)
