"""Domain models for review and delivery views."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ReviewImage:
    """Latest revision of a single image."""

    filename: str
    version: int
    status: str
    client_comment: str | None


@dataclass(frozen=True)
class DeliveryImage:
    """A final image ready for download."""

    filename: str
    url: str


@dataclass(frozen=True)
class DeliveryView:
    """What the client sees on the delivery page."""

    unlocked: bool
    current_stage: int
    message: str | None = None
    final_url: str | None = None
    archive_name: str | None = None
    images: list[DeliveryImage] = field(default_factory=list)


@dataclass(frozen=True)
class DeliveryArchive:
    """A zip archive of final images."""

    filename: str
    content: bytes
