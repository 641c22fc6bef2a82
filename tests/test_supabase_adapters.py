"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

from studio_portal.adapters.supabase_auth_gateway import SupabaseAuthGateway
from studio_portal.adapters.supabase_project_repository import (
    SupabaseProjectRepository,
)
from studio_portal.domain.projects import ProjectPatch, ProjectStatus


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "update": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, str, object]] = field(default_factory=list)
    last_order: tuple[str, bool] | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        self.last_filters = []
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        self.last_filters = []
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("eq", column, value))
        return self

    def is_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("is", column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.last_order = (column, desc)
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    auth: object | None = None

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _row(project_id: str, owner_id: str, **overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": project_id,
        "user_id": owner_id,
        "title": "Emma Newborn Session",
        "child_name": "Emma",
        "occasion": "newborn",
        "session_date": "2026-02-14",
        "current_stage": 1,
        "status": "active",
        "package_limit": 10,
        "client_data": {
            "selection_manifest": [
                {"filename": "IMG_0001.jpg", "face_swap": True, "note": "Smile"}
            ],
            "revision_history": [],
        },
        "assets": {"final_images": []},
        "created_at": "2026-02-15T10:00:00+00:00",
        "updated_at": "2026-03-01T09:30:00+00:00",
    }
    row.update(overrides)
    return row


def test_get_project_filters_by_owner_and_parses_row() -> None:
    client = FakeSupabaseClient()
    table = client.table("projects")
    project_id, owner_id = str(uuid4()), str(uuid4())
    table.queue("select", [_row(project_id, owner_id)])

    project = SupabaseProjectRepository(client).get_project(
        UUID(project_id), UUID(owner_id)
    )

    assert project is not None
    assert str(project.id) == project_id
    assert project.package_limit == 10
    assert project.session_date is not None
    assert project.session_date.isoformat() == "2026-02-14"
    assert project.client_data.selection_manifest[0].face_swap is True
    assert project.updated_at == datetime(2026, 3, 1, 9, 30, tzinfo=UTC)
    assert ("eq", "id", project_id) in table.last_filters
    assert ("eq", "user_id", owner_id) in table.last_filters


def test_get_project_returns_none_without_rows() -> None:
    client = FakeSupabaseClient()

    project = SupabaseProjectRepository(client).get_project(uuid4(), uuid4())

    assert project is None


def test_missing_json_documents_read_as_empty() -> None:
    client = FakeSupabaseClient()
    table = client.table("projects")
    owner_id = uuid4()
    table.queue(
        "select",
        [_row(str(uuid4()), str(owner_id), client_data=None, assets=None)],
    )

    projects = SupabaseProjectRepository(client).list_projects(owner_id)

    assert len(projects) == 1
    assert projects[0].client_data.selection_manifest == []
    assert projects[0].assets.final_images == []
    assert table.last_order == ("session_date", True)


def test_list_all_projects_orders_by_last_update() -> None:
    client = FakeSupabaseClient()
    table = client.table("projects")
    table.queue("select", [_row(str(uuid4()), str(uuid4()))])

    projects = SupabaseProjectRepository(client).list_all_projects()

    assert len(projects) == 1
    assert table.last_order == ("updated_at", True)
    assert table.last_filters == []


def test_update_project_is_conditional_on_updated_at() -> None:
    client = FakeSupabaseClient()
    table = client.table("projects")
    project_id, owner_id = uuid4(), uuid4()
    seen_at = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)
    table.queue("update", [{"id": str(project_id)}])

    updated = SupabaseProjectRepository(client).update_project(
        project_id,
        owner_id,
        ProjectPatch(status=ProjectStatus.SUBMITTED, current_stage=2),
        seen_at,
    )

    assert updated is True
    assert table.last_payload == {"status": "submitted", "current_stage": 2}
    assert table.last_filters == [
        ("eq", "id", str(project_id)),
        ("eq", "user_id", str(owner_id)),
        ("eq", "updated_at", seen_at.isoformat()),
    ]


def test_update_project_reports_no_matching_row() -> None:
    client = FakeSupabaseClient()
    table = client.table("projects")

    updated = SupabaseProjectRepository(client).update_project(
        uuid4(), uuid4(), ProjectPatch(current_stage=2), None
    )

    assert updated is False
    assert table.last_filters[-1] == ("is", "updated_at", "null")


class _FakeAuth:
    def __init__(self, user: object | None = None, error: Exception | None = None):
        self.user = user
        self.error = error
        self.tokens: list[str] = []

    def get_user(self, token: str):  # type: ignore[no-untyped-def]
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(user=self.user)


def test_auth_gateway_maps_user_metadata() -> None:
    user_id = uuid4()
    auth = _FakeAuth(
        user=SimpleNamespace(
            id=str(user_id),
            email="jane@example.com",
            user_metadata={"full_name": "Jane Doe"},
        )
    )
    gateway = SupabaseAuthGateway(FakeSupabaseClient(auth=auth))

    principal = gateway.resolve_principal("token-1")

    assert principal is not None
    assert principal.user_id == user_id
    assert principal.email == "jane@example.com"
    assert principal.first_name == "Jane"
    assert auth.tokens == ["token-1"]


def test_auth_gateway_rejects_invalid_token() -> None:
    gateway = SupabaseAuthGateway(
        FakeSupabaseClient(auth=_FakeAuth(error=RuntimeError("invalid JWT")))
    )

    assert gateway.resolve_principal("expired") is None


def test_auth_gateway_handles_missing_user() -> None:
    gateway = SupabaseAuthGateway(FakeSupabaseClient(auth=_FakeAuth(user=None)))

    assert gateway.resolve_principal("token-1") is None


def test_null_and_malformed_document_fields_read_as_empty() -> None:
    client = FakeSupabaseClient()
    table = client.table("projects")
    owner_id = uuid4()
    table.queue(
        "select",
        [
            _row(
                str(uuid4()),
                str(owner_id),
                client_data={"selection_manifest": [], "revision_history": None},
                assets={"final_url": None, "final_images": None},
            ),
            _row(
                str(uuid4()),
                str(owner_id),
                client_data={
                    "selection_manifest": "oops",
                    "revision_history": [
                        {"filename": "IMG_0001.jpg", "version": 1, "status": "pending"}
                    ],
                },
            ),
        ],
    )

    projects = SupabaseProjectRepository(client).list_projects(owner_id)

    assert len(projects) == 2
    assert projects[0].client_data.revision_history == []
    assert projects[0].assets.final_images == []
    assert projects[1].client_data.selection_manifest == []
    assert [r.filename for r in projects[1].client_data.revision_history] == [
        "IMG_0001.jpg"
    ]


def test_rows_without_package_limit_are_skipped() -> None:
    client = FakeSupabaseClient()
    table = client.table("projects")
    readable_id, broken_id = str(uuid4()), str(uuid4())
    table.queue(
        "select",
        [
            _row(broken_id, str(uuid4()), package_limit=None),
            _row(readable_id, str(uuid4())),
        ],
    )
    table.queue("select", [_row(broken_id, str(uuid4()), package_limit=None)])
    repository = SupabaseProjectRepository(client)

    projects = repository.list_all_projects()
    single = repository.get_project(UUID(broken_id), uuid4())

    assert [str(project.id) for project in projects] == [readable_id]
    assert single is None
