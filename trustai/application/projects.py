"""Application service layer for saved projects."""
from __future__ import annotations

from trustai.application.sessions import SessionService
from trustai.core.errors import NotFoundError
from trustai.core.schema import ProjectCreate, ProjectItemRecord, ProjectRecord, ProjectUpdate
from trustai.infrastructure import InMemoryProjectRepository, ProjectRepository


class ProjectService:
    """Coordinates project record use cases."""

    def __init__(self, repository: ProjectRepository) -> None:
        self._repository = repository

    def create_project(self, project: ProjectCreate) -> ProjectRecord:
        return self._repository.create_project(project)

    def get_project(self, project_id: int) -> ProjectRecord:
        record = self._repository.get_project(project_id)
        if record is None:
            raise NotFoundError(f"project {project_id} not found")
        return record

    def update_project(self, project_id: int, data: ProjectUpdate) -> ProjectRecord:
        record = self._repository.update_project(project_id, data)
        if record is None:
            raise NotFoundError(f"project {project_id} not found")
        return record

    def list_projects(self) -> list[ProjectRecord]:
        return self._repository.list_projects()

    def save_session(self, sessions: SessionService, session_id: str, name: str) -> ProjectRecord:
        """Persist a snapshot of a live session as a project record."""

        store = sessions.get_session(session_id).store
        items = [
            ProjectItemRecord(
                type=item.kind.value,
                name=item.name,
                content=item.content,
                status=item.status.value,
            )
            for item in store
        ]
        return self.create_project(
            ProjectCreate(name=name, items=items, report_summary=store.report_summary)
        )

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._repository.reset()


_repository = InMemoryProjectRepository()
_service = ProjectService(_repository)


def get_project_service() -> ProjectService:
    """Return the singleton project service for the process."""

    return _service


def reset_project_state() -> None:
    """Reset the in-memory store (used in tests)."""

    _service.reset()
