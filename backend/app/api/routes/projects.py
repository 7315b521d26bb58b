"""Project endpoints - list, create, update and delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from backend.app.api.auth import get_current_caller
from backend.app.api.deps import get_collaborators
from backend.app.api.params import read_params
from backend.app.api.responses import to_response
from backend.app.db.context import Caller
from backend.app.db.repositories import Collaborators
from backend.app.handlers import projects
from backend.app.handlers.result import bad_request
from backend.app.handlers.validation import InvalidParameter

router = APIRouter(prefix="/api", tags=["projects"])

CallerDep = Annotated[Caller, Depends(get_current_caller)]
CollaboratorsDep = Annotated[Collaborators, Depends(get_collaborators)]


@router.get("/projects.{fmt}")
async def list_projects(
    fmt: str,
    caller: CallerDep,
    deps: CollaboratorsDep,
    callback: Annotated[str | None, Query()] = None,
) -> Response:
    """Projects owned by the caller, with their document ids."""
    result = await projects.list_projects(caller, deps, fmt=fmt)
    return to_response(result, operation="projects", caller=caller, fmt=fmt, callback=callback)


@router.post("/projects.{fmt}")
async def create_project(
    fmt: str,
    request: Request,
    caller: CallerDep,
    deps: CollaboratorsDep,
) -> Response:
    """Create a project from title, description and document_ids."""
    try:
        params = await read_params(request)
    except InvalidParameter as e:
        return to_response(bad_request(str(e)), operation="create_project", caller=caller, fmt=fmt)

    result = await projects.create_project(caller, deps, fmt=fmt, params=params)
    return to_response(
        result, operation="create_project", caller=caller, fmt=fmt, callback=params.get("callback")
    )


@router.put("/projects/{project_id}.{fmt}")
async def update_project(
    project_id: str,
    fmt: str,
    request: Request,
    caller: CallerDep,
    deps: CollaboratorsDep,
) -> Response:
    """Replace membership and update title/description."""
    try:
        params = await read_params(request)
    except InvalidParameter as e:
        return to_response(bad_request(str(e)), operation="update_project", caller=caller, fmt=fmt)

    result = await projects.update_project(
        caller, deps, project_id=project_id, fmt=fmt, params=params
    )
    return to_response(
        result, operation="update_project", caller=caller, fmt=fmt, callback=params.get("callback")
    )


@router.delete("/projects/{project_id}.{fmt}")
async def delete_project(
    project_id: str,
    fmt: str,
    caller: CallerDep,
    deps: CollaboratorsDep,
    callback: Annotated[str | None, Query()] = None,
) -> Response:
    """Delete a project owned by the caller."""
    result = await projects.destroy_project(caller, deps, project_id=project_id, fmt=fmt)
    return to_response(
        result, operation="destroy_project", caller=caller, fmt=fmt, callback=callback
    )
