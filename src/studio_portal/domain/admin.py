"""Admin domain models."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class AdminProject:
    """Row of the studio-wide project table."""

    id: UUID
    client_name: str
    child_name: str | None
    occasion: str | None
    stage: int
    stage_label: str
    selection_current: int
    selection_total: int
    status: str
    last_updated: datetime | None


@dataclass(frozen=True)
class AdminOverview:
    """Headline counts for the admin dashboard."""

    total: int
    in_selection: int
    in_editing: int
    ready_to_deliver: int
    completed_this_month: int
