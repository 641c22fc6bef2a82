"""Shared test fixtures."""

from collections.abc import Iterable
from dataclasses import dataclass, field, fields, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from studio_portal.api.app import create_app
from studio_portal.config import Settings
from studio_portal.containers import AppContainer
from studio_portal.domain.models import Principal
from studio_portal.domain.projects import (
    ClientData,
    ProjectAssets,
    ProjectPatch,
    ProjectRecord,
    RevisionItem,
    SelectionItem,
)
from studio_portal.services.admin import AdminService
from studio_portal.services.auth import AuthGateway
from studio_portal.services.delivery import ArchiveBuilder, DeliveryGate
from studio_portal.services.projects import ProjectRepository, ProjectService
from studio_portal.services.reviews import ReviewService
from studio_portal.services.selection import SelectionService

SEEDED_AT = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


def build_project(  # noqa: PLR0913
    owner_id: UUID,
    *,
    status: str = "active",
    current_stage: int = 1,
    package_limit: int = 3,
    selections: Iterable[str] = (),
    revisions: Iterable[tuple[str, int, str]] = (),
    final_images: Iterable[str] = (),
    title: str = "Emma Newborn Session",
    child_name: str | None = "Emma",
    session_date: date | None = date(2026, 2, 14),
    updated_at: datetime | None = SEEDED_AT,
) -> ProjectRecord:
    """Build a project with compact selection and revision fixtures."""
    return ProjectRecord(
        id=uuid4(),
        user_id=owner_id,
        title=title,
        child_name=child_name,
        occasion="newborn",
        session_date=session_date,
        current_stage=current_stage,
        status=status,
        package_limit=package_limit,
        client_data=ClientData(
            selection_manifest=[SelectionItem(filename=name) for name in selections],
            revision_history=[
                RevisionItem(filename=name, version=version, status=state)
                for name, version, state in revisions
            ],
        ),
        assets=ProjectAssets(final_images=list(final_images)),
        created_at=SEEDED_AT,
        updated_at=updated_at,
    )


@dataclass
class InMemoryProjectRepository(ProjectRepository):
    """In-memory project repository for tests."""

    projects: dict[UUID, ProjectRecord] = field(default_factory=dict)
    writes: list[tuple[UUID, ProjectPatch]] = field(default_factory=list)
    fail_writes: bool = False

    def add(self, project: ProjectRecord) -> ProjectRecord:
        self.projects[project.id] = project
        return project

    def get_project(self, project_id: UUID, owner_id: UUID) -> ProjectRecord | None:
        project = self.projects.get(project_id)
        if project is None or project.user_id != owner_id:
            return None
        return project

    def list_projects(self, owner_id: UUID) -> list[ProjectRecord]:
        owned = [p for p in self.projects.values() if p.user_id == owner_id]
        return sorted(owned, key=lambda p: p.session_date or date.min, reverse=True)

    def list_all_projects(self) -> list[ProjectRecord]:
        return sorted(
            self.projects.values(),
            key=lambda p: p.updated_at or datetime.min.replace(tzinfo=UTC),
            reverse=True,
        )

    def update_project(
        self,
        project_id: UUID,
        owner_id: UUID,
        patch: ProjectPatch,
        expected_updated_at: datetime | None,
    ) -> bool:
        if self.fail_writes:
            raise RuntimeError("store unavailable")
        project = self.projects.get(project_id)
        if project is None or project.user_id != owner_id:
            return False
        if project.updated_at != expected_updated_at:
            return False
        self.writes.append((project_id, patch))
        changes = {
            item.name: getattr(patch, item.name)
            for item in fields(patch)
            if getattr(patch, item.name) is not None
        }
        self.projects[project_id] = replace(project, **changes)
        return True


@dataclass
class FakeAuthGateway(AuthGateway):
    """Auth gateway backed by a token table."""

    tokens: dict[str, Principal] = field(default_factory=dict)

    def resolve_principal(self, access_token: str) -> Principal | None:
        return self.tokens.get(access_token)


@dataclass
class FakeArchiveBuilder(ArchiveBuilder):
    """Archive builder that records requested URLs."""

    content: bytes = b"fake-zip-bytes"
    error: Exception | None = None
    requested: list[list[str]] = field(default_factory=list)

    async def build(self, urls: list[str]) -> bytes:
        self.requested.append(urls)
        if self.error is not None:
            raise self.error
        return self.content


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
    )


@pytest.fixture
def principal() -> Principal:
    return Principal(user_id=uuid4(), email="jane@example.com", full_name="Jane Doe")


@pytest.fixture
def other_principal() -> Principal:
    return Principal(user_id=uuid4(), email="mallory@example.com")


@pytest.fixture
def project_repository() -> InMemoryProjectRepository:
    return InMemoryProjectRepository()


@pytest.fixture
def archive_builder() -> FakeArchiveBuilder:
    return FakeArchiveBuilder()


@pytest.fixture
def auth_gateway(
    principal: Principal, other_principal: Principal
) -> FakeAuthGateway:
    return FakeAuthGateway(
        tokens={"client-token": principal, "other-token": other_principal}
    )


@pytest.fixture
def container(
    settings: Settings,
    project_repository: InMemoryProjectRepository,
    auth_gateway: FakeAuthGateway,
    archive_builder: FakeArchiveBuilder,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_gateway=auth_gateway,
        project_service=ProjectService(project_repository),
        selection_service=SelectionService(project_repository),
        review_service=ReviewService(project_repository),
        delivery_gate=DeliveryGate(
            repository=project_repository,
            archive_builder=archive_builder,
            fallback_archive_name=settings.archive_fallback_name,
        ),
        admin_service=AdminService(project_repository),
        close_resources=close_resources,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer client-token"}
