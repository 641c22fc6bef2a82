"""Stage 1: choosing favorites and submitting them for editing."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from uuid import UUID

from studio_portal.domain.models import Principal
from studio_portal.domain.projects import (
    REVIEW_STAGE,
    ClientData,
    ProjectPatch,
    ProjectRecord,
    ProjectStatus,
    SelectionItem,
)
from studio_portal.domain.results import ActionResult
from studio_portal.services.projects import (
    ProjectRepository,
    project_not_found,
    utc_now,
    write_patch,
)
from studio_portal.services.workflow import (
    can_modify_selection,
    can_save_selection,
    can_submit_selection,
)

_logger = logging.getLogger(__name__)


@dataclass
class SelectionService:
    """Server-side selection actions with ownership and state re-checks."""

    repository: ProjectRepository

    def update_selection_manifest(
        self,
        principal: Principal,
        project_id: UUID,
        selections: Sequence[SelectionItem],
    ) -> ActionResult:
        """Save an in-progress selection without submitting it."""
        try:
            project = self.repository.get_project(project_id, principal.user_id)
            if project is None:
                return project_not_found()
            guard = can_save_selection(project, selections)
            if not guard.ok:
                return ActionResult.from_guard(guard)
            patch = ProjectPatch(
                client_data=ClientData(
                    selection_manifest=list(selections), revision_history=[]
                ),
                updated_at=utc_now(),
            )
            return write_patch(self.repository, project, patch)
        except Exception:
            _logger.exception(
                "Failed to update selection manifest",
                extra={"project_id": str(project_id)},
            )
            return ActionResult.unexpected()

    def submit_selection(
        self,
        principal: Principal,
        project_id: UUID,
        selections: Sequence[SelectionItem],
    ) -> ActionResult:
        """Store the final selection and move the project to stage 2."""
        try:
            project = self.repository.get_project(project_id, principal.user_id)
            if project is None:
                return project_not_found()
            guard = can_submit_selection(project, selections)
            if not guard.ok:
                return ActionResult.from_guard(guard)
            patch = ProjectPatch(
                client_data=ClientData(
                    selection_manifest=list(selections), revision_history=[]
                ),
                status=ProjectStatus.SUBMITTED,
                current_stage=REVIEW_STAGE,
                updated_at=utc_now(),
            )
            result = write_patch(self.repository, project, patch)
            if result.success:
                _logger.info(
                    "Selection submitted: project_id=%s images=%s",
                    project_id,
                    len(selections),
                )
            return result
        except Exception:
            _logger.exception(
                "Failed to submit selection", extra={"project_id": str(project_id)}
            )
            return ActionResult.unexpected()


@dataclass
class SelectionManager:
    """In-progress selection for one project, seeded from its manifest."""

    principal: Principal
    project: ProjectRecord
    service: SelectionService
    _selections: dict[str, SelectionItem] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self._selections = {
            item.filename: item
            for item in self.project.client_data.selection_manifest
        }

    @property
    def is_locked(self) -> bool:
        return not can_modify_selection(self.project)

    @property
    def count(self) -> int:
        return len(self._selections)

    @property
    def can_select_more(self) -> bool:
        return self.count < self.project.package_limit

    def is_selected(self, filename: str) -> bool:
        return filename in self._selections

    def items(self) -> list[SelectionItem]:
        """Return the selection in the order images were picked."""
        return list(self._selections.values())

    def toggle(self, filename: str) -> bool:
        """Select or deselect an image and return whether it is now selected."""
        if self.is_locked:
            return self.is_selected(filename)
        if filename in self._selections:
            del self._selections[filename]
            return False
        if self.can_select_more:
            self._selections[filename] = SelectionItem(
                filename=filename, selected_at=utc_now()
            )
            return True
        return False

    def update_note(self, filename: str, note: str, face_swap: bool) -> None:
        """Attach a note and face-swap request to a selected image."""
        if self.is_locked:
            return
        existing = self._selections.get(filename)
        if existing is None:
            return
        self._selections[filename] = existing.model_copy(
            update={"note": note, "face_swap": face_swap}
        )

    def save_draft(self) -> ActionResult:
        """Persist the current selection without submitting."""
        result = self.service.update_selection_manifest(
            self.principal, self.project.id, self.items()
        )
        if result.success:
            self.project = replace(
                self.project,
                client_data=ClientData(selection_manifest=self.items()),
            )
        return result

    def submit(self) -> ActionResult:
        """Submit the selection once the local guard passes."""
        selections = self.items()
        guard = can_submit_selection(self.project, selections)
        if not guard.ok:
            return ActionResult.from_guard(guard)
        result = self.service.submit_selection(
            self.principal, self.project.id, selections
        )
        if result.success:
            self.project = replace(
                self.project,
                status=ProjectStatus.SUBMITTED,
                current_stage=REVIEW_STAGE,
                client_data=ClientData(selection_manifest=selections),
            )
        return result
