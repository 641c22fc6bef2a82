"""Supabase-backed project repository."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from studio_portal.domain.projects import (
    SELECTING_STAGE,
    ClientData,
    ProjectAssets,
    ProjectPatch,
    ProjectRecord,
    ProjectStatus,
)
from studio_portal.services.projects import ProjectRepository

_logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, user_id, title, child_name, occasion, session_date, current_stage, "
    "status, package_limit, client_data, assets, created_at, updated_at"
)


@dataclass
class SupabaseProjectRepository(ProjectRepository):
    """Supabase implementation for project persistence."""

    client: Client

    def get_project(self, project_id: UUID, owner_id: UUID) -> ProjectRecord | None:
        """Return a project by id if it belongs to the owner."""
        response = (
            self.client.table("projects")
            .select(_COLUMNS)
            .eq("id", str(project_id))
            .eq("user_id", str(owner_id))
            .limit(1)
            .execute()
        )
        projects = _map_rows(response.data or [])
        return projects[0] if projects else None

    def list_projects(self, owner_id: UUID) -> list[ProjectRecord]:
        """Return the owner's projects, newest session first."""
        response = (
            self.client.table("projects")
            .select(_COLUMNS)
            .eq("user_id", str(owner_id))
            .order("session_date", desc=True)
            .execute()
        )
        return _map_rows(response.data or [])

    def list_all_projects(self) -> list[ProjectRecord]:
        """Return all projects for the admin overview."""
        response = (
            self.client.table("projects")
            .select(_COLUMNS)
            .order("updated_at", desc=True)
            .execute()
        )
        return _map_rows(response.data or [])

    def update_project(
        self,
        project_id: UUID,
        owner_id: UUID,
        patch: ProjectPatch,
        expected_updated_at: datetime | None,
    ) -> bool:
        """Apply a patch only if the row is unchanged since it was read."""
        query = (
            self.client.table("projects")
            .update(patch.to_payload())
            .eq("id", str(project_id))
            .eq("user_id", str(owner_id))
        )
        if expected_updated_at is None:
            query = query.is_("updated_at", "null")
        else:
            query = query.eq("updated_at", expected_updated_at.isoformat())
        response = query.execute()
        return bool(response.data)


def _row_to_project(row: dict[str, object]) -> ProjectRecord:
    return ProjectRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        title=str(row.get("title") or ""),
        child_name=row.get("child_name") or None,
        occasion=row.get("occasion") or None,
        session_date=_parse_date(row.get("session_date")),
        current_stage=int(row.get("current_stage") or SELECTING_STAGE),
        status=str(row.get("status") or ProjectStatus.ACTIVE),
        package_limit=int(row["package_limit"]),
        client_data=ClientData.from_raw(row.get("client_data")),
        assets=ProjectAssets.from_raw(row.get("assets")),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def _parse_date(value: object) -> date | None:
    if isinstance(value, str) and value:
        return date.fromisoformat(value[:10])
    return None


def _map_rows(rows: list[dict[str, object]]) -> list[ProjectRecord]:
    """Map rows to projects, skipping rows with unusable required columns."""
    projects = []
    for row in rows:
        try:
            projects.append(_row_to_project(row))
        except (KeyError, TypeError, ValueError):
            _logger.warning(
                "Skipping unreadable project row: id=%s", row.get("id"), exc_info=True
            )
    return projects
