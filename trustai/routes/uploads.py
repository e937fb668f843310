from __future__ import annotations

from pathlib import Path

from fastapi import Request, UploadFile

from trustai.core.errors import PayloadTooLargeError, ValidationError


async def read_upload(request: Request, upload: UploadFile | None) -> tuple[str, bytes]:
    """Read an uploaded file fully, enforcing presence and the size limit."""

    if upload is None:
        raise ValidationError("no file uploaded")
    try:
        if not upload.filename:
            raise ValidationError("uploaded file must have a filename")
        safe_name = Path(upload.filename).name
        limit = request.app.state.settings.max_upload_bytes
        payload = await upload.read(limit + 1)
        if len(payload) > limit:
            raise PayloadTooLargeError(f"{safe_name} exceeds the upload limit of {limit} bytes")
        if not payload:
            raise ValidationError(f"{safe_name} is empty")
        return safe_name, payload
    finally:
        await upload.close()
