"""Workflow guard for the selecting -> reviewing -> delivered lifecycle.

Every function here is pure: it inspects a project (or part of one) and
reports whether a transition is allowed. Nothing is written. Failures come
back as `GuardResult` values so callers can render them.
"""

from collections.abc import Iterable, Sequence

from studio_portal.domain.projects import (
    ProjectRecord,
    ProjectStatus,
    RevisionItem,
    SelectionItem,
)
from studio_portal.domain.results import GuardResult, WorkflowError


def can_modify_selection(project: ProjectRecord) -> bool:
    """Return True while the selection manifest may still change."""
    return project.status == ProjectStatus.ACTIVE


def can_submit_selection(
    project: ProjectRecord, selection: Sequence[SelectionItem]
) -> GuardResult:
    """Check whether a selection may be submitted for editing."""
    if not selection:
        return GuardResult(WorkflowError.EMPTY_SELECTION, "No images selected")
    if len(selection) > project.package_limit:
        return _limit_exceeded(project)
    if project.status != ProjectStatus.ACTIVE:
        return GuardResult(
            WorkflowError.ALREADY_SUBMITTED, "Selection has already been submitted"
        )
    if _has_duplicates(selection):
        return _duplicate_selection()
    return GuardResult()


def can_save_selection(
    project: ProjectRecord, selection: Sequence[SelectionItem]
) -> GuardResult:
    """Check whether an in-progress selection may be saved as a draft."""
    if not can_modify_selection(project):
        return GuardResult(
            WorkflowError.LOCKED_STATE, "Project is locked and cannot be modified"
        )
    if len(selection) > project.package_limit:
        return _limit_exceeded(project)
    if _has_duplicates(selection):
        return _duplicate_selection()
    return GuardResult()


def latest_revisions(history: Iterable[RevisionItem]) -> dict[str, RevisionItem]:
    """Return the highest-version revision for each filename.

    Filenames keep the order of their first appearance. When two entries share
    the highest version, the first one seen is kept.
    """
    latest: dict[str, RevisionItem] = {}
    for revision in history:
        current = latest.get(revision.filename)
        if current is None or revision.version > current.version:
            latest[revision.filename] = revision
    return latest


def all_latest_approved(history: Iterable[RevisionItem]) -> bool:
    """Return True if there is at least one image and all are approved."""
    latest = latest_revisions(history)
    return bool(latest) and all(
        revision.status == "approved" for revision in latest.values()
    )


def is_stage_ready_to_advance(project: ProjectRecord) -> bool:
    """Return True when review is done and delivery may be unlocked."""
    return all_latest_approved(project.client_data.revision_history)


def with_latest_updated(
    history: Sequence[RevisionItem], filename: str, **changes: object
) -> list[RevisionItem]:
    """Return a copy of the history with the latest revision for a file changed."""
    target = latest_revisions(history).get(filename)
    return [
        revision.model_copy(update=changes) if revision is target else revision
        for revision in history
    ]


def _has_duplicates(selection: Sequence[SelectionItem]) -> bool:
    filenames = [item.filename for item in selection]
    return len(set(filenames)) != len(filenames)


def _limit_exceeded(project: ProjectRecord) -> GuardResult:
    return GuardResult(
        WorkflowError.LIMIT_EXCEEDED,
        f"Cannot select more than {project.package_limit} images",
    )


def _duplicate_selection() -> GuardResult:
    return GuardResult(
        WorkflowError.DUPLICATE_SELECTION, "Each image can only be selected once"
    )
