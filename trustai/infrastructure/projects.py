"""Infrastructure layer for project record persistence."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from trustai.core.schema import ProjectCreate, ProjectRecord, ProjectUpdate


class ProjectRepository(Protocol):
    """Persistence contract for saved projects."""

    def create_project(self, project: ProjectCreate) -> ProjectRecord: ...

    def get_project(self, project_id: int) -> ProjectRecord | None: ...

    def update_project(self, project_id: int, data: ProjectUpdate) -> ProjectRecord | None: ...

    def list_projects(self) -> list[ProjectRecord]: ...

    def reset(self) -> None: ...


class InMemoryProjectRepository:
    """Simple in-memory repository for fast iteration and tests."""

    def __init__(self) -> None:
        self._projects: dict[int, ProjectRecord] = {}
        self._id_counter = 0

    def create_project(self, project: ProjectCreate) -> ProjectRecord:
        self._id_counter += 1
        record = ProjectRecord(
            id=self._id_counter,
            name=project.name,
            created_at=datetime.now(timezone.utc),
            items=list(project.items),
            report_summary=project.report_summary,
        )
        self._projects[record.id] = record
        return record.model_copy(deep=True)

    def get_project(self, project_id: int) -> ProjectRecord | None:
        record = self._projects.get(project_id)
        return record.model_copy(deep=True) if record else None

    def update_project(self, project_id: int, data: ProjectUpdate) -> ProjectRecord | None:
        record = self._projects.get(project_id)
        if record is None:
            return None
        changes = data.model_dump(exclude_unset=True)
        # name and items are required on a stored record; null leaves them unchanged
        for key in ("name", "items"):
            if key in changes and changes[key] is None:
                del changes[key]
        updated = ProjectRecord.model_validate({**record.model_dump(), **changes})
        self._projects[project_id] = updated
        return updated.model_copy(deep=True)

    def list_projects(self) -> list[ProjectRecord]:
        return [record.model_copy(deep=True) for record in self._projects.values()]

    def reset(self) -> None:
        self._projects.clear()
        self._id_counter = 0
