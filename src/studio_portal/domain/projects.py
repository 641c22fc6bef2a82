"""Domain models for client projects and their JSON documents."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Literal, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_logger = logging.getLogger(__name__)

DocumentT = TypeVar("DocumentT", bound=BaseModel)


class ProjectStatus(StrEnum):
    """Lifecycle status of a project."""

    ACTIVE = "active"
    SUBMITTED = "submitted"
    EDITING = "editing"
    READY_FOR_REVIEW = "ready_for_review"
    COMPLETED = "completed"


SELECTING_STAGE = 1
REVIEW_STAGE = 2
DELIVERY_STAGE = 3

STAGE_LABELS = {
    SELECTING_STAGE: "Choosing your favorites",
    REVIEW_STAGE: "In the darkroom",
    DELIVERY_STAGE: "Ready to cherish",
}

RevisionStatus = Literal["pending", "approved", "rejected"]


class SelectionItem(BaseModel):
    """A chosen image plus the client's per-image requests."""

    model_config = ConfigDict(extra="ignore")

    filename: str = Field(min_length=1)
    face_swap: bool = False
    note: str = ""
    selected_at: datetime | None = None

    @field_validator("note", mode="before")
    @classmethod
    def _none_note(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("face_swap", mode="before")
    @classmethod
    def _none_face_swap(cls, value: object) -> object:
        return False if value is None else value


class RevisionItem(BaseModel):
    """A versioned edit of a selected image awaiting client review."""

    model_config = ConfigDict(extra="ignore")

    filename: str = Field(min_length=1)
    version: int = Field(ge=1)
    status: RevisionStatus = "pending"
    client_comment: str | None = None
    created_at: datetime | None = None


class ClientData(BaseModel):
    """The `client_data` JSON document stored on a project."""

    model_config = ConfigDict(extra="ignore")

    selection_manifest: list[SelectionItem] = Field(default_factory=list)
    revision_history: list[RevisionItem] = Field(default_factory=list)

    @field_validator("selection_manifest", "revision_history", mode="before")
    @classmethod
    def _none_list(cls, value: object) -> object:
        return [] if value is None else value

    @classmethod
    def from_raw(cls, raw: object) -> "ClientData":
        """Parse the stored document; missing or malformed parts read as empty."""
        return _parse_document(cls, raw, "client_data")


class ProjectAssets(BaseModel):
    """The `assets` JSON document stored on a project."""

    model_config = ConfigDict(extra="ignore")

    preview_url: str | None = None
    review_url: str | None = None
    final_url: str | None = None
    final_images: list[str] = Field(default_factory=list)

    @field_validator("final_images", mode="before")
    @classmethod
    def _none_list(cls, value: object) -> object:
        return [] if value is None else value

    @classmethod
    def from_raw(cls, raw: object) -> "ProjectAssets":
        """Parse the stored document; missing or malformed parts read as empty."""
        return _parse_document(cls, raw, "assets")


def _parse_document(model: type[DocumentT], raw: object, name: str) -> DocumentT:
    """Validate a JSON column, resetting top-level fields that fail validation."""
    if not isinstance(raw, dict):
        return model()
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        invalid = {error["loc"][0] for error in exc.errors() if error["loc"]}
    _logger.warning(
        "Malformed %s document, resetting fields: %s",
        name,
        ", ".join(sorted(map(str, invalid))),
    )
    cleaned = {key: value for key, value in raw.items() if key not in invalid}
    try:
        return model.model_validate(cleaned)
    except ValidationError:
        return model()
