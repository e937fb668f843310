"""Integration with the Groq OpenAI-compatible inference API."""
from __future__ import annotations

import base64
import logging
from typing import Any
from urllib.parse import urlparse

import httpx

from trustai.core.errors import ConfigurationMissing, UpstreamError
from trustai.infrastructure.adapters import ReportSections

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = (
    "Extract ALL the text from this image. Transcribe it EXACTLY as written, including "
    "handwritten notes, printed text, numbers and symbols. Keep the original formatting "
    "and any lists. If there is no text, answer 'No text found'."
)

REPORT_SYSTEM_PROMPT = (
    "You are an executive assistant specialised in content analysis and professional reports."
)

REPORT_PROMPT = """Analyse the following content extracted from audio recordings and handwritten or printed documents.

## TRANSCRIBED AUDIO:
{audio}

## DIGITISED DOCUMENTS:
{documents}

---

Write a COMPLETE EXECUTIVE REPORT in {language} including:

1. **EXECUTIVE SUMMARY**: overall summary of the analysed content
2. **KEY POINTS**: the most important topics mentioned
3. **TASKS AND ACTIONS**: actions, pending items, decisions or tasks mentioned
4. **CROSS ANALYSIS**: connections between the recordings and the documents, if any
5. **RECOMMENDATIONS**: suggested next steps based on the content
6. **ATTENTION ITEMS**: alerts, deadlines or urgent questions mentioned

Be specific, objective and professional. Use clear headings and lists."""

NO_TEXT_FOUND = "No text found"


class GroqClient:
    """Client implementing transcription, text extraction and report synthesis."""

    def __init__(
        self,
        api_key: str | None,
        *,
        api_base: str = "https://api.groq.com/openai/v1",
        transcription_model: str = "whisper-large-v3",
        vision_model: str = "llama-3.2-90b-vision-preview",
        report_model: str = "llama-3.3-70b-versatile",
        language: str = "pt",
        timeout: float = 60.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        parsed = urlparse(api_base)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("api_base must include scheme and host")

        self._api_key = api_key or ""
        self._api_base = api_base.rstrip("/")
        self._transcription_model = transcription_model
        self._vision_model = vision_model
        self._report_model = report_model
        self._language = language
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        if not self._api_key or self._api_key == "placeholder":
            raise ConfigurationMissing("GROQ_API_KEY is not configured")
        return {"Authorization": f"Bearer {self._api_key}"}

    def _post(self, path: str, action: str, **kwargs: Any) -> dict[str, Any]:
        headers = self._headers()
        url = f"{self._api_base}{path}"
        try:
            response = self._client.post(url, headers=headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            detail = self._error_detail(exc.response)
            logger.warning("Groq %s failed with %s: %s", action, exc.response.status_code, detail)
            raise UpstreamError(f"Failed to {action}: {detail}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Groq %s failed: %s", action, exc)
            raise UpstreamError(f"Failed to {action}: {exc}") from exc
        except ValueError as exc:
            raise UpstreamError(f"Failed to {action}: invalid JSON response") from exc

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return f"HTTP {response.status_code}"

    @staticmethod
    def _message_content(payload: dict[str, Any]) -> str:
        choices = payload.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return str(message.get("content") or "").strip()

    @staticmethod
    def _format_entries(entries: tuple, label: str) -> str:
        return "\n\n".join(
            f"### {label} {index}: {entry.name}\n{entry.content}"
            for index, entry in enumerate(entries, start=1)
        )

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def transcribe(self, payload: bytes, filename: str) -> str:
        data = {
            "model": self._transcription_model,
            "language": self._language,
            "response_format": "json",
        }
        files = {"file": (filename or "audio", payload)}
        result = self._post("/audio/transcriptions", "transcribe audio", data=data, files=files)
        return str(result.get("text") or "").strip()

    def extract_text(self, payload: bytes, mime_type: str) -> str:
        image = base64.b64encode(payload).decode("ascii")
        body = {
            "model": self._vision_model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": EXTRACTION_PROMPT},
                        {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{image}"}},
                    ],
                }
            ],
            "temperature": 0.1,
            "max_tokens": 2048,
        }
        result = self._post("/chat/completions", "extract text", json=body)
        return self._message_content(result) or NO_TEXT_FOUND

    def generate_report(self, sections: ReportSections) -> str:
        prompt = REPORT_PROMPT.format(
            audio=self._format_entries(sections.audio, "Audio") or "No audio provided.",
            documents=self._format_entries(sections.documents, "Document") or "No documents provided.",
            language=self._language,
        )
        body = {
            "model": self._report_model,
            "messages": [
                {"role": "system", "content": REPORT_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.3,
            "max_tokens": 4096,
        }
        result = self._post("/chat/completions", "generate report", json=body)
        return self._message_content(result)

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


__all__ = ["GroqClient", "NO_TEXT_FOUND"]
