"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from studio_portal.domain.admin import AdminProject

if TYPE_CHECKING:
    from studio_portal.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/overview", dependencies=[Depends(require_admin)])
async def overview(request: Request) -> dict[str, object]:
    """Return project counts per stage."""
    container: AppContainer = request.app.state.container
    stats = container.admin_service.overview()
    return {
        "stats": {
            "total": stats.total,
            "in_selection": stats.in_selection,
            "in_editing": stats.in_editing,
            "ready_to_deliver": stats.ready_to_deliver,
            "completed_this_month": stats.completed_this_month,
        }
    }


@router.get("/projects", dependencies=[Depends(require_admin)])
async def list_projects(
    request: Request,
    sort: Literal["client_name", "stage", "status", "last_updated"] = "last_updated",
    direction: Literal["asc", "desc"] = "desc",
) -> dict[str, object]:
    """Return every project as a sortable table."""
    container: AppContainer = request.app.state.container
    projects = container.admin_service.list_projects(sort=sort, direction=direction)
    return {"projects": [_serialize_admin_project(project) for project in projects]}


@router.get("/ui", response_class=HTMLResponse)
async def admin_ui() -> HTMLResponse:
    """Minimal admin UI that consumes the admin API."""
    return HTMLResponse(_ADMIN_UI_HTML)


def _serialize_admin_project(project: AdminProject) -> dict[str, object]:
    return {
        "id": str(project.id),
        "client_name": project.client_name,
        "child_name": project.child_name,
        "occasion": project.occasion,
        "stage": project.stage,
        "stage_label": project.stage_label,
        "selection_current": project.selection_current,
        "selection_total": project.selection_total,
        "status": project.status,
        "last_updated": project.last_updated.isoformat()
        if project.last_updated
        else None,
    }


_ADMIN_UI_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Studio Portal Admin</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      h1 { margin-bottom: 0.5rem; }
      .row { margin-bottom: 1rem; }
      input, select { padding: 0.4rem 0.6rem; }
      input { width: 320px; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      pre { background: #f6f6f6; padding: 1rem; overflow: auto; }
    </style>
  </head>
  <body>
    <h1>Birds-Eye View</h1>
    <div class="row">
      <label>Admin token</label><br />
      <input id="token" type="password" placeholder="X-Admin-Token" />
    </div>
    <div class="row">
      <select id="sort">
        <option value="last_updated">Last updated</option>
        <option value="client_name">Client name</option>
        <option value="stage">Stage</option>
        <option value="status">Status</option>
      </select>
      <select id="direction">
        <option value="desc">Descending</option>
        <option value="asc">Ascending</option>
      </select>
    </div>
    <div class="row">
      <button onclick="loadEndpoint('/admin/overview')">Overview</button>
      <button onclick="loadProjects()">Projects</button>
    </div>
    <pre id="output">Ready.</pre>
    <script>
      function loadProjects() {
        const sort = document.getElementById('sort').value;
        const direction = document.getElementById('direction').value;
        loadEndpoint('/admin/projects?sort=' + sort + '&direction=' + direction);
      }
      async function loadEndpoint(path) {
        const token = document.getElementById('token').value;
        const output = document.getElementById('output');
        output.textContent = 'Loading...';
        const res = await fetch(path, {
          headers: { 'X-Admin-Token': token }
        });
        if (!res.ok) {
          output.textContent = 'Error: ' + res.status;
          return;
        }
        const data = await res.json();
        output.textContent = JSON.stringify(data, null, 2);
      }
    </script>
  </body>
</html>
"""
