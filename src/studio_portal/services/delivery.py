"""Stage 3: delivering final photos."""

import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol
from urllib.parse import unquote, urlparse
from uuid import UUID

from studio_portal.domain.delivery import DeliveryArchive, DeliveryImage, DeliveryView
from studio_portal.domain.models import Principal
from studio_portal.domain.projects import DELIVERY_STAGE, ProjectRecord
from studio_portal.domain.results import ActionResult, WorkflowError
from studio_portal.services.projects import ProjectRepository, project_not_found

_logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME = "little-image-photos.zip"


class ArchiveBuilder(Protocol):
    """Packages remote files into a single zip archive."""

    async def build(self, urls: list[str]) -> bytes:
        """Download every URL and return the zip archive bytes."""


@dataclass
class DeliveryGate:
    """Exposes final assets once a project reaches stage 3."""

    repository: ProjectRepository
    archive_builder: ArchiveBuilder
    fallback_archive_name: str = DEFAULT_ARCHIVE_NAME

    @staticmethod
    def is_unlocked(stage: int) -> bool:
        return stage >= DELIVERY_STAGE

    def view(self, project: ProjectRecord) -> DeliveryView:
        """Build the delivery view for a project."""
        if not self.is_unlocked(project.current_stage):
            return DeliveryView(
                unlocked=False,
                current_stage=project.current_stage,
                message="Your Photos Are Almost Ready",
            )
        urls = project.assets.final_images
        if not urls:
            return DeliveryView(
                unlocked=True,
                current_stage=project.current_stage,
                message="Photos Are Being Prepared",
                final_url=project.assets.final_url,
            )
        return DeliveryView(
            unlocked=True,
            current_stage=project.current_stage,
            final_url=project.assets.final_url,
            archive_name=self.archive_name_for(project),
            images=[
                DeliveryImage(filename=filename_from_url(url, index), url=url)
                for index, url in enumerate(urls)
            ],
        )

    def archive_name_for(self, project: ProjectRecord) -> str:
        return archive_name(
            project.title, project.child_name, self.fallback_archive_name
        )

    async def build_archive(
        self, principal: Principal, project_id: UUID
    ) -> DeliveryArchive | ActionResult:
        """Bundle a project's final images into a zip archive."""
        project = self.repository.get_project(project_id, principal.user_id)
        if project is None:
            return project_not_found()
        if not self.is_unlocked(project.current_stage):
            return ActionResult.failure(
                WorkflowError.LOCKED_STATE, "Your final photos are not ready yet"
            )
        urls = project.assets.final_images
        if not urls:
            return ActionResult.failure(
                WorkflowError.NOT_FOUND, "No final photos are available yet"
            )
        try:
            content = await self.archive_builder.build(list(urls))
        except Exception:
            _logger.exception(
                "Failed to build delivery archive",
                extra={"project_id": str(project_id)},
            )
            return ActionResult.failure(
                WorkflowError.STORE_WRITE_FAILED, "Failed to prepare the download"
            )
        _logger.info(
            "Delivery archive built: project_id=%s files=%s", project_id, len(urls)
        )
        return DeliveryArchive(filename=self.archive_name_for(project), content=content)


def slugify(value: str) -> str:
    """Lowercase a name and turn whitespace into dashes."""
    slug = re.sub(r"\s+", "-", value.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return re.sub(r"-{2,}", "-", slug).strip("-")


def archive_name(
    title: str | None,
    child_name: str | None,
    fallback: str = DEFAULT_ARCHIVE_NAME,
) -> str:
    """Return `<slug>-photos.zip` from the title or child name."""
    for candidate in (title, child_name):
        if candidate and (slug := slugify(candidate)):
            return f"{slug}-photos.zip"
    return fallback


def filename_from_url(url: str, index: int) -> str:
    """Return the last path segment of a URL, or a numbered fallback."""
    name = PurePosixPath(unquote(urlparse(url).path)).name
    return name or f"photo-{index + 1}.jpg"
