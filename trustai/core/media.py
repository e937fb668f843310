"""MIME dispatch helpers for uploaded source material."""
from __future__ import annotations

from pathlib import Path

from trustai.core.errors import ValidationError
from trustai.domain import ItemKind

AUDIO_SUFFIXES = frozenset({".mp3", ".wav", ".m4a", ".ogg", ".webm", ".flac"})

IMAGE_MIME_BY_SUFFIX: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "bmp": "image/bmp",
}

DEFAULT_IMAGE_MIME = "image/jpeg"


def image_mime_hint(filename: str) -> str:
    """Derive the MIME type sent with an image from its original file name."""

    suffix = Path(filename).suffix.lower().lstrip(".")
    return IMAGE_MIME_BY_SUFFIX.get(suffix, DEFAULT_IMAGE_MIME)


def resolve_kind(filename: str, content_type: str | None, requested: str | None = None) -> ItemKind:
    """Pick the item kind for an upload.

    An explicit ``requested`` kind wins when it agrees with the payload type;
    otherwise the content type is used, then the file suffix.
    """

    suffix = Path(filename).suffix.lower()
    media_type = (content_type or "").split(";")[0].strip().lower()

    detected: ItemKind | None = None
    if media_type.startswith("audio/") or (not media_type.startswith("image/") and suffix in AUDIO_SUFFIXES):
        detected = ItemKind.AUDIO
    elif media_type.startswith("image/") or suffix.lstrip(".") in IMAGE_MIME_BY_SUFFIX:
        detected = ItemKind.IMAGE_TEXT

    if requested:
        try:
            kind = ItemKind(requested)
        except ValueError as exc:
            raise ValidationError(f"unsupported item kind: {requested}") from exc
        if detected is not None and detected is not kind:
            raise ValidationError(f"{filename} is not a valid {kind.value} upload")
        return kind

    if detected is None:
        raise ValidationError(f"unsupported file type: {filename}")
    return detected


def ensure_kind(filename: str, content_type: str | None, expected: ItemKind) -> None:
    """Reject uploads whose type does not match the endpoint they were sent to."""

    resolve_kind(filename, content_type, expected.value)
