"""Project persistence interface and read-side service."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from studio_portal.domain.models import Principal
from studio_portal.domain.projects import ProjectPatch, ProjectRecord
from studio_portal.domain.results import ActionResult, WorkflowError

_logger = logging.getLogger(__name__)


class ProjectRepository(Protocol):
    """Persistence interface for projects, always scoped by owner."""

    def get_project(self, project_id: UUID, owner_id: UUID) -> ProjectRecord | None:
        """Return a project if it exists and belongs to the owner."""

    def list_projects(self, owner_id: UUID) -> list[ProjectRecord]:
        """Return the owner's projects, newest session first."""

    def list_all_projects(self) -> list[ProjectRecord]:
        """Return every project, most recently updated first."""

    def update_project(
        self,
        project_id: UUID,
        owner_id: UUID,
        patch: ProjectPatch,
        expected_updated_at: datetime | None,
    ) -> bool:
        """Apply a patch if the row still has the expected timestamp.

        Returns False when no row matched.
        """


@dataclass
class ProjectService:
    """Read access to a principal's projects."""

    repository: ProjectRepository

    def get_project(
        self, principal: Principal, project_id: UUID
    ) -> ProjectRecord | None:
        """Return a project owned by the principal, if present."""
        return self.repository.get_project(project_id, principal.user_id)

    def list_projects(self, principal: Principal) -> list[ProjectRecord]:
        """Return the principal's projects for the dashboard."""
        return self.repository.list_projects(principal.user_id)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def write_patch(
    repository: ProjectRepository,
    project: ProjectRecord,
    patch: ProjectPatch,
) -> ActionResult:
    """Write a patch conditioned on the project's last seen update time."""
    applied = repository.update_project(
        project.id,
        project.user_id,
        patch,
        expected_updated_at=project.updated_at,
    )
    if not applied:
        _logger.warning("Project write conflict: project_id=%s", project.id)
        return ActionResult.failure(
            WorkflowError.WRITE_CONFLICT,
            "This project was changed elsewhere. Please reload and try again.",
        )
    return ActionResult.ok()


def project_not_found() -> ActionResult:
    return ActionResult.failure(WorkflowError.NOT_FOUND, "Project not found")
