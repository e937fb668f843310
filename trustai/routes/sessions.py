from __future__ import annotations

from fastapi import APIRouter, File, Form, Query, Request, Response, UploadFile
from fastapi.responses import PlainTextResponse

from trustai.application import get_project_service, get_session_service
from trustai.application.sessions import serialise_item
from trustai.core.schema import ProcessRequest, SaveSessionRequest
from trustai.domain import ItemKind, ItemStatus
from trustai.routes.uploads import read_upload

router = APIRouter(prefix="/sessions", tags=["sessions"])

REPORT_FILENAME = "Relatorio_TrustAI.txt"


@router.post("")
async def create_session() -> dict:
    service = get_session_service()
    return {"sessionId": service.create_session()}


@router.get("/{session_id}")
async def get_session(session_id: str) -> dict:
    return get_session_service().get_overview(session_id)


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str) -> Response:
    """Release a session together with its items and report."""
    get_session_service().close_session(session_id)
    return Response(status_code=204)


@router.post("/{session_id}/items")
async def add_item(
    request: Request,
    session_id: str,
    file: UploadFile | None = File(default=None),
    kind: str | None = Form(default=None),
) -> dict:
    """Queue one uploaded source file as a pending work item."""
    service = get_session_service()
    service.get_session(session_id)
    filename, payload = await read_upload(request, file)
    item = service.add_upload(
        session_id,
        filename=filename,
        content_type=file.content_type,
        payload=payload,
        kind=kind,
    )
    return serialise_item(item)


@router.get("/{session_id}/items")
async def list_items(
    session_id: str,
    kind: ItemKind | None = Query(default=None),
    status: ItemStatus | None = Query(default=None),
) -> dict:
    items = get_session_service().list_items(session_id, kind=kind, status=status)
    return {"items": [serialise_item(item) for item in items]}


@router.delete("/{session_id}/items/{item_id}", status_code=204)
async def remove_item(session_id: str, item_id: str) -> Response:
    get_session_service().remove_item(session_id, item_id)
    return Response(status_code=204)


@router.post("/{session_id}/process")
async def process_items(session_id: str, payload: ProcessRequest) -> dict:
    """Run the queue for every pending item of the requested kind."""
    result = await get_session_service().process(session_id, ItemKind(payload.kind))
    return result.as_dict()


@router.post("/{session_id}/report")
async def generate_report(session_id: str) -> dict:
    report = await get_session_service().generate_report(session_id)
    return {"report": report}


@router.get("/{session_id}/report/download")
async def download_report(session_id: str) -> PlainTextResponse:
    report = get_session_service().get_report(session_id)
    return PlainTextResponse(
        report,
        headers={"Content-Disposition": f'attachment; filename="{REPORT_FILENAME}"'},
    )


@router.post("/{session_id}/clear")
async def clear_session(session_id: str) -> dict:
    service = get_session_service()
    service.clear(session_id)
    return service.get_overview(session_id)


@router.post("/{session_id}/save")
async def save_session(session_id: str, payload: SaveSessionRequest) -> dict:
    record = get_project_service().save_session(get_session_service(), session_id, payload.name)
    return record.model_dump(by_alias=True, mode="json")
