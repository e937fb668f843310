from __future__ import annotations

from fastapi import APIRouter

from trustai.application import get_project_service
from trustai.core.schema import ProjectCreate, ProjectUpdate

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("")
async def list_projects() -> dict:
    records = get_project_service().list_projects()
    return {"items": [record.model_dump(by_alias=True, mode="json") for record in records]}


@router.post("")
async def create_project(payload: ProjectCreate) -> dict:
    record = get_project_service().create_project(payload)
    return record.model_dump(by_alias=True, mode="json")


@router.get("/{project_id}")
async def get_project(project_id: int) -> dict:
    record = get_project_service().get_project(project_id)
    return record.model_dump(by_alias=True, mode="json")


@router.patch("/{project_id}")
async def update_project(project_id: int, payload: ProjectUpdate) -> dict:
    record = get_project_service().update_project(project_id, payload)
    return record.model_dump(by_alias=True, mode="json")
