"""Client portal endpoints for the three-stage gallery workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from studio_portal.api.portal_models import (
    CommentRequest,
    NoteRequest,
    SelectionPayload,
    SubmitRequest,
    ToggleRequest,
)
from studio_portal.config import parse_bearer_token
from studio_portal.domain.delivery import DeliveryView
from studio_portal.domain.models import Principal
from studio_portal.domain.projects import ProjectRecord
from studio_portal.domain.results import ActionResult, WorkflowError
from studio_portal.services.projects import project_not_found
from studio_portal.services.reviews import ReviewManager
from studio_portal.services.selection import SelectionManager
from studio_portal.services.workflow import can_modify_selection, can_save_selection

if TYPE_CHECKING:
    from studio_portal.containers import AppContainer

router = APIRouter(prefix="/projects", tags=["portal"])

_STATUS_CODES = {
    WorkflowError.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    WorkflowError.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    WorkflowError.LOCKED_STATE: status.HTTP_409_CONFLICT,
    WorkflowError.ALREADY_SUBMITTED: status.HTTP_409_CONFLICT,
    WorkflowError.NOT_ALL_APPROVED: status.HTTP_409_CONFLICT,
    WorkflowError.WRITE_CONFLICT: status.HTTP_409_CONFLICT,
    WorkflowError.EMPTY_SELECTION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    WorkflowError.LIMIT_EXCEEDED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    WorkflowError.DUPLICATE_SELECTION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    WorkflowError.STORE_WRITE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_principal(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Principal:
    """Resolve the signed-in user from the bearer token."""
    token = parse_bearer_token(authorization)
    principal = (
        _container(request).auth_gateway.resolve_principal(token) if token else None
    )
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )
    return principal


@router.get("")
async def list_projects(
    request: Request, principal: Principal = Depends(require_principal)
) -> dict[str, object]:
    """Return the signed-in client's photo sessions."""
    projects = _container(request).project_service.list_projects(principal)
    return {
        "greeting_name": principal.first_name,
        "projects": [_serialize_project(project) for project in projects],
    }


@router.get("/{project_id}")
async def get_project(
    project_id: UUID,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Return a single project owned by the client."""
    project = _container(request).project_service.get_project(principal, project_id)
    if project is None:
        return _respond(project_not_found())
    return JSONResponse({"project": _serialize_project(project)})


@router.put("/{project_id}/selection")
async def save_selection(
    project_id: UUID,
    body: SelectionPayload,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Save the in-progress selection manifest."""
    result = _container(request).selection_service.update_selection_manifest(
        principal, project_id, body.selections
    )
    return _respond(result)


@router.post("/{project_id}/selection/toggle")
async def toggle_selection(
    project_id: UUID,
    body: ToggleRequest,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Select or deselect one image and save the draft."""
    manager = _selection_manager(request, principal, project_id)
    if manager is None:
        return _respond(project_not_found())
    if manager.is_locked:
        return _respond(
            ActionResult.from_guard(
                can_save_selection(manager.project, manager.items())
            )
        )
    was_selected = manager.is_selected(body.filename)
    selected = manager.toggle(body.filename)
    if not was_selected and not selected:
        result = ActionResult.failure(
            WorkflowError.LIMIT_EXCEEDED,
            f"Cannot select more than {manager.project.package_limit} images",
        )
        return _respond(result, selection=_serialize_selection(manager))
    result = manager.save_draft()
    return _respond(result, selected=selected, selection=_serialize_selection(manager))


@router.post("/{project_id}/selection/note")
async def update_selection_note(
    project_id: UUID,
    body: NoteRequest,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Update the note and face-swap flag of a selected image."""
    manager = _selection_manager(request, principal, project_id)
    if manager is None:
        return _respond(project_not_found())
    if manager.is_locked:
        return _respond(
            ActionResult.from_guard(
                can_save_selection(manager.project, manager.items())
            )
        )
    if not manager.is_selected(body.filename):
        return _respond(
            ActionResult.failure(
                WorkflowError.NOT_FOUND, "Image is not part of the selection"
            )
        )
    manager.update_note(body.filename, body.note, body.face_swap)
    result = manager.save_draft()
    return _respond(result, selection=_serialize_selection(manager))


@router.post("/{project_id}/selection/submit")
async def submit_selection(
    project_id: UUID,
    request: Request,
    body: SubmitRequest | None = None,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Submit the selection and move the project into editing."""
    container = _container(request)
    if body is not None and body.selections is not None:
        result = container.selection_service.submit_selection(
            principal, project_id, body.selections
        )
        return _respond(result)
    manager = _selection_manager(request, principal, project_id)
    if manager is None:
        return _respond(project_not_found())
    return _respond(manager.submit())


@router.get("/{project_id}/review")
async def get_review(
    project_id: UUID,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Return the latest revision of every image under review."""
    manager = _review_manager(request, principal, project_id)
    if manager is None:
        return _respond(project_not_found())
    return JSONResponse(_serialize_review(manager))


@router.post("/{project_id}/review/approve-all")
async def approve_all(
    project_id: UUID,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Approve the review and unlock delivery."""
    manager = _review_manager(request, principal, project_id)
    if manager is None:
        return _respond(project_not_found())
    result = manager.approve_all()
    return _respond(result, current_stage=manager.project.current_stage)


@router.post("/{project_id}/review/{filename:path}/approve")
async def approve_image(
    project_id: UUID,
    filename: str,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Approve the latest revision of an image."""
    manager = _review_manager(request, principal, project_id)
    if manager is None:
        return _respond(project_not_found())
    result = manager.approve(filename)
    return _respond(result, review=_serialize_review(manager))


@router.post("/{project_id}/review/{filename:path}/reject")
async def reject_image(
    project_id: UUID,
    filename: str,
    body: CommentRequest,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Request another revision of an image."""
    manager = _review_manager(request, principal, project_id)
    if manager is None:
        return _respond(project_not_found())
    result = manager.reject(filename, body.comment)
    return _respond(result, review=_serialize_review(manager))


@router.post("/{project_id}/review/{filename:path}/comment")
async def comment_image(
    project_id: UUID,
    filename: str,
    body: CommentRequest,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Leave a comment on the latest revision of an image."""
    manager = _review_manager(request, principal, project_id)
    if manager is None:
        return _respond(project_not_found())
    result = manager.comment(filename, body.comment)
    return _respond(result, review=_serialize_review(manager))


@router.get("/{project_id}/delivery")
async def get_delivery(
    project_id: UUID,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> JSONResponse:
    """Return the delivery view, locked until stage 3."""
    container = _container(request)
    project = container.project_service.get_project(principal, project_id)
    if project is None:
        return _respond(project_not_found())
    return JSONResponse(_serialize_delivery(container.delivery_gate.view(project)))


@router.get("/{project_id}/delivery/archive", response_model=None)
async def download_archive(
    project_id: UUID,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> Response:
    """Download every final photo as one zip archive."""
    archive = await _container(request).delivery_gate.build_archive(
        principal, project_id
    )
    if isinstance(archive, ActionResult):
        return _respond(archive)
    return Response(
        content=archive.content,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{archive.filename}"'},
    )


def _selection_manager(
    request: Request, principal: Principal, project_id: UUID
) -> SelectionManager | None:
    container = _container(request)
    project = container.project_service.get_project(principal, project_id)
    if project is None:
        return None
    return SelectionManager(principal, project, container.selection_service)


def _review_manager(
    request: Request, principal: Principal, project_id: UUID
) -> ReviewManager | None:
    container = _container(request)
    project = container.project_service.get_project(principal, project_id)
    if project is None:
        return None
    return ReviewManager(principal, project, container.review_service)


def _respond(result: ActionResult, **extra: object) -> JSONResponse:
    status_code = (
        status.HTTP_200_OK
        if result.success
        else _STATUS_CODES.get(result.error, status.HTTP_400_BAD_REQUEST)
    )
    return JSONResponse({**result.to_dict(), **extra}, status_code=status_code)


def _serialize_project(project: ProjectRecord) -> dict[str, object]:
    return {
        "id": str(project.id),
        "title": project.title,
        "child_name": project.child_name,
        "display_name": project.display_name,
        "occasion": project.occasion,
        "session_date": project.session_date.isoformat()
        if project.session_date
        else None,
        "current_stage": project.current_stage,
        "stage_label": project.stage_label,
        "status": project.status,
        "package_limit": project.package_limit,
        "selection_count": len(project.client_data.selection_manifest),
        "is_locked": not can_modify_selection(project),
        "client_data": project.client_data.model_dump(mode="json"),
        "assets": project.assets.model_dump(mode="json"),
        "updated_at": project.updated_at.isoformat() if project.updated_at else None,
    }


def _serialize_selection(manager: SelectionManager) -> dict[str, object]:
    return {
        "count": manager.count,
        "package_limit": manager.project.package_limit,
        "items": [item.model_dump(mode="json") for item in manager.items()],
    }


def _serialize_review(manager: ReviewManager) -> dict[str, object]:
    return {
        "current_stage": manager.project.current_stage,
        "approved_count": manager.approved_count,
        "total_count": manager.total_count,
        "all_approved": manager.all_approved,
        "images": [
            {
                "filename": image.filename,
                "version": image.version,
                "status": image.status,
                "client_comment": image.client_comment,
            }
            for image in manager.latest()
        ],
    }


def _serialize_delivery(view: DeliveryView) -> dict[str, object]:
    return {
        "unlocked": view.unlocked,
        "current_stage": view.current_stage,
        "message": view.message,
        "final_url": view.final_url,
        "archive_name": view.archive_name,
        "images": [
            {"filename": image.filename, "url": image.url} for image in view.images
        ],
    }
