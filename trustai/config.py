"""Environment-driven configuration for the Trust AI backend."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_CORS_ORIGINS = ["http://localhost:5000", "http://127.0.0.1:5000"]


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    groq_api_key: str = ""
    groq_api_base: str = "https://api.groq.com/openai/v1"
    transcription_model: str = "whisper-large-v3"
    vision_model: str = "llama-3.2-90b-vision-preview"
    report_model: str = "llama-3.3-70b-versatile"
    language: str = "pt"
    request_timeout: float = 60.0
    max_upload_mb: float = 25.0
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @property
    def is_configured(self) -> bool:
        return bool(self.groq_api_key) and self.groq_api_key != "placeholder"

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)

    @classmethod
    def from_env(cls) -> "Settings":
        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY", "").strip(),
            groq_api_base=os.getenv("GROQ_API_BASE") or cls.groq_api_base,
            transcription_model=os.getenv("GROQ_TRANSCRIPTION_MODEL") or cls.transcription_model,
            vision_model=os.getenv("GROQ_VISION_MODEL") or cls.vision_model,
            report_model=os.getenv("GROQ_REPORT_MODEL") or cls.report_model,
            language=os.getenv("GROQ_LANGUAGE") or cls.language,
            request_timeout=_float_env("GROQ_TIMEOUT", cls.request_timeout),
            max_upload_mb=_float_env("MAX_UPLOAD_MB", cls.max_upload_mb),
            cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
            log_level=(os.getenv("LOG_LEVEL") or cls.log_level).upper(),
        )
