"""Pydantic models for portal request bodies."""

from pydantic import BaseModel, Field

from studio_portal.domain.projects import SelectionItem


class SelectionPayload(BaseModel):
    """Full selection manifest sent by the gallery."""

    selections: list[SelectionItem]


class SubmitRequest(BaseModel):
    """Submit body; when omitted the stored draft is submitted."""

    selections: list[SelectionItem] | None = None


class ToggleRequest(BaseModel):
    """Select or deselect a single image."""

    filename: str = Field(min_length=1)


class NoteRequest(BaseModel):
    """Per-image note and face-swap flag."""

    filename: str = Field(min_length=1)
    note: str = ""
    face_swap: bool = False


class CommentRequest(BaseModel):
    """Client feedback on an edited image."""

    comment: str = Field(min_length=1)
