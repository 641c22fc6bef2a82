"""Stage 2: reviewing edited images."""

import logging
from dataclasses import dataclass, replace
from uuid import UUID

from studio_portal.domain.delivery import ReviewImage
from studio_portal.domain.models import Principal
from studio_portal.domain.projects import (
    DELIVERY_STAGE,
    REVIEW_STAGE,
    ProjectPatch,
    ProjectRecord,
    ProjectStatus,
    RevisionItem,
)
from studio_portal.domain.results import ActionResult, WorkflowError
from studio_portal.services.projects import (
    ProjectRepository,
    project_not_found,
    utc_now,
    write_patch,
)
from studio_portal.services.workflow import (
    is_stage_ready_to_advance,
    latest_revisions,
    with_latest_updated,
)

_logger = logging.getLogger(__name__)


@dataclass
class ReviewService:
    """Server-side review actions on a project's revision history."""

    repository: ProjectRepository

    def approve_image(
        self, principal: Principal, project_id: UUID, filename: str
    ) -> ActionResult:
        """Mark the latest revision of an image as approved."""
        try:
            loaded = self._load_latest(principal, project_id, filename)
            if isinstance(loaded, ActionResult):
                return loaded
            project, latest = loaded
            if latest.status == "approved":
                return ActionResult.ok()
            return self._save_latest(project, filename, status="approved")
        except Exception:
            _logger.exception(
                "Failed to approve image",
                extra={"project_id": str(project_id), "filename": filename},
            )
            return ActionResult.unexpected()

    def request_revision(
        self, principal: Principal, project_id: UUID, filename: str, comment: str
    ) -> ActionResult:
        """Reject the latest revision of an image with feedback."""
        try:
            loaded = self._load_latest(principal, project_id, filename)
            if isinstance(loaded, ActionResult):
                return loaded
            project, latest = loaded
            if latest.status == "approved":
                return ActionResult.failure(
                    WorkflowError.LOCKED_STATE, "This image has already been approved"
                )
            return self._save_latest(
                project, filename, status="rejected", client_comment=comment
            )
        except Exception:
            _logger.exception(
                "Failed to request revision",
                extra={"project_id": str(project_id), "filename": filename},
            )
            return ActionResult.unexpected()

    def add_revision_comment(
        self, principal: Principal, project_id: UUID, filename: str, comment: str
    ) -> ActionResult:
        """Attach a comment to the latest revision without changing its status."""
        try:
            loaded = self._load_latest(principal, project_id, filename)
            if isinstance(loaded, ActionResult):
                return loaded
            project, _ = loaded
            return self._save_latest(project, filename, client_comment=comment)
        except Exception:
            _logger.exception(
                "Failed to add revision comment",
                extra={"project_id": str(project_id), "filename": filename},
            )
            return ActionResult.unexpected()

    def approve_all(self, principal: Principal, project_id: UUID) -> ActionResult:
        """Finish review and move the project to delivery."""
        try:
            project = self.repository.get_project(project_id, principal.user_id)
            if project is None:
                return project_not_found()
            if project.current_stage != REVIEW_STAGE:
                return _not_in_review()
            if not is_stage_ready_to_advance(project):
                return ActionResult.failure(
                    WorkflowError.NOT_ALL_APPROVED, "Not all images have been approved"
                )
            patch = ProjectPatch(
                status=ProjectStatus.COMPLETED,
                current_stage=DELIVERY_STAGE,
                updated_at=utc_now(),
            )
            result = write_patch(self.repository, project, patch)
            if result.success:
                _logger.info("Review completed: project_id=%s", project_id)
            return result
        except Exception:
            _logger.exception(
                "Failed to approve all images", extra={"project_id": str(project_id)}
            )
            return ActionResult.unexpected()

    def _load_latest(
        self, principal: Principal, project_id: UUID, filename: str
    ) -> tuple[ProjectRecord, RevisionItem] | ActionResult:
        project = self.repository.get_project(project_id, principal.user_id)
        if project is None:
            return project_not_found()
        if project.current_stage != REVIEW_STAGE:
            return _not_in_review()
        latest = latest_revisions(project.client_data.revision_history).get(filename)
        if latest is None:
            return ActionResult.failure(
                WorkflowError.NOT_FOUND, "No revision found for this image"
            )
        return project, latest

    def _save_latest(
        self, project: ProjectRecord, filename: str, **changes: object
    ) -> ActionResult:
        history = with_latest_updated(
            project.client_data.revision_history, filename, **changes
        )
        client_data = project.client_data.model_copy(
            update={"revision_history": history}
        )
        patch = ProjectPatch(client_data=client_data, updated_at=utc_now())
        return write_patch(self.repository, project, patch)


@dataclass
class ReviewManager:
    """Client-side view of the latest revision of every image."""

    principal: Principal
    project: ProjectRecord
    service: ReviewService

    def latest(self) -> list[ReviewImage]:
        """Return the actionable revision for each image."""
        return [
            ReviewImage(
                filename=revision.filename,
                version=revision.version,
                status=revision.status,
                client_comment=revision.client_comment,
            )
            for revision in latest_revisions(
                self.project.client_data.revision_history
            ).values()
        ]

    @property
    def total_count(self) -> int:
        return len(latest_revisions(self.project.client_data.revision_history))

    @property
    def approved_count(self) -> int:
        return sum(1 for image in self.latest() if image.status == "approved")

    @property
    def all_approved(self) -> bool:
        return is_stage_ready_to_advance(self.project)

    def approve(self, filename: str) -> ActionResult:
        result = self.service.approve_image(self.principal, self.project.id, filename)
        if result.success:
            self._apply(filename, status="approved")
        return result

    def reject(self, filename: str, comment: str) -> ActionResult:
        result = self.service.request_revision(
            self.principal, self.project.id, filename, comment
        )
        if result.success:
            self._apply(filename, status="rejected", client_comment=comment)
        return result

    def comment(self, filename: str, comment: str) -> ActionResult:
        result = self.service.add_revision_comment(
            self.principal, self.project.id, filename, comment
        )
        if result.success:
            self._apply(filename, client_comment=comment)
        return result

    def approve_all(self) -> ActionResult:
        """Advance to delivery once every image is approved."""
        if not self.all_approved:
            return ActionResult.failure(
                WorkflowError.NOT_ALL_APPROVED, "Not all images have been approved"
            )
        result = self.service.approve_all(self.principal, self.project.id)
        if result.success:
            self.project = replace(
                self.project,
                status=ProjectStatus.COMPLETED,
                current_stage=DELIVERY_STAGE,
            )
        return result

    def _apply(self, filename: str, **changes: object) -> None:
        history = with_latest_updated(
            self.project.client_data.revision_history, filename, **changes
        )
        self.project = replace(
            self.project,
            client_data=self.project.client_data.model_copy(
                update={"revision_history": history}
            ),
        )


def _not_in_review() -> ActionResult:
    return ActionResult.failure(
        WorkflowError.LOCKED_STATE, "Project is not in review stage"
    )
