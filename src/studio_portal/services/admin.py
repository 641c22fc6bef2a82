"""Admin service for the studio-wide overview."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

from studio_portal.domain.admin import AdminOverview, AdminProject
from studio_portal.domain.projects import (
    DELIVERY_STAGE,
    REVIEW_STAGE,
    SELECTING_STAGE,
    ProjectRecord,
    ProjectStatus,
)
from studio_portal.services.projects import ProjectRepository

SortField = Literal["client_name", "stage", "status", "last_updated"]
SortDirection = Literal["asc", "desc"]

_EPOCH = datetime.min.replace(tzinfo=UTC)

_SORT_KEYS: dict[str, Callable[[AdminProject], object]] = {
    "client_name": lambda project: project.client_name.casefold(),
    "stage": lambda project: project.stage,
    "status": lambda project: project.status,
    "last_updated": lambda project: project.last_updated or _EPOCH,
}


@dataclass
class AdminService:
    """Service for admin dashboards."""

    repository: ProjectRepository

    def overview(self, now: datetime | None = None) -> AdminOverview:
        """Return project counts per stage and completions this month."""
        projects = self.repository.list_all_projects()
        current = now or datetime.now(tz=UTC)
        return AdminOverview(
            total=len(projects),
            in_selection=_count_stage(projects, SELECTING_STAGE),
            in_editing=_count_stage(projects, REVIEW_STAGE),
            ready_to_deliver=_count_stage(projects, DELIVERY_STAGE),
            completed_this_month=sum(
                1 for project in projects if _completed_in_month(project, current)
            ),
        )

    def list_projects(
        self,
        sort: SortField = "last_updated",
        direction: SortDirection = "desc",
    ) -> list[AdminProject]:
        """Return every project as a table row, sorted."""
        rows = [
            _to_admin_project(project)
            for project in self.repository.list_all_projects()
        ]
        return sorted(rows, key=_SORT_KEYS[sort], reverse=direction == "desc")


def _count_stage(projects: list[ProjectRecord], stage: int) -> int:
    return sum(1 for project in projects if project.current_stage == stage)


def _completed_in_month(project: ProjectRecord, now: datetime) -> bool:
    if project.status != ProjectStatus.COMPLETED or project.updated_at is None:
        return False
    updated = project.updated_at.astimezone(now.tzinfo or UTC)
    return updated.year == now.year and updated.month == now.month


def _to_admin_project(project: ProjectRecord) -> AdminProject:
    return AdminProject(
        id=project.id,
        client_name=project.title,
        child_name=project.child_name,
        occasion=project.occasion,
        stage=project.current_stage,
        stage_label=project.stage_label,
        selection_current=len(project.client_data.selection_manifest),
        selection_total=project.package_limit,
        status=project.status,
        last_updated=project.updated_at,
    )
