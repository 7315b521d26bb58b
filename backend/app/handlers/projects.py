"""Project handlers - list, create, update and destroy."""

from collections.abc import Mapping
from typing import Any

from backend.app.access.policy import can_destroy, can_write
from backend.app.access.scope import documents_visible_to, projects_visible_to
from backend.app.canonical.render import render_project
from backend.app.db.context import Authenticated, Caller
from backend.app.db.repositories import Collaborators
from backend.app.handlers.result import (
    HandlerResult,
    Ok,
    bad_request,
    forbidden,
    not_found,
)
from backend.app.handlers.validation import (
    InvalidParameter,
    optional_text,
    parse_id,
    parse_ids,
    pick,
    require_format,
    require_text,
)
from backend.app.utils.logging import get_logger

logger = get_logger(__name__)


async def _visible_document_ids(deps: Collaborators, caller: Caller, ids: set[int]) -> set[int]:
    """Keep only ids of documents the caller can see."""
    scope = documents_visible_to(caller)
    visible: set[int] = set()
    for document_id in sorted(ids):
        if await deps.documents.find(document_id, scope) is not None:
            visible.add(document_id)
    return visible


async def list_projects(caller: Caller, deps: Collaborators, *, fmt: str) -> HandlerResult:
    """Projects owned by the caller; anonymous callers get an empty list."""
    try:
        require_format(fmt)
    except InvalidParameter as e:
        return bad_request(str(e))

    projects = await deps.projects.query(projects_visible_to(caller))
    return Ok({"projects": [render_project(project) for project in projects]})


async def create_project(
    caller: Caller, deps: Collaborators, *, fmt: str, params: Mapping[str, Any]
) -> HandlerResult:
    """Create a project with an initial membership."""
    try:
        require_format(fmt)
    except InvalidParameter as e:
        return bad_request(str(e))

    if not isinstance(caller, Authenticated):
        return bad_request("An authenticated account is required.")

    if not params.get("title"):
        return bad_request("A project title is required.")

    try:
        title = require_text(params["title"], "title")
        description = optional_text(params.get("description"), "description")
        ids = parse_ids(params.get("document_ids"))
    except InvalidParameter as e:
        return bad_request(str(e))

    project = await deps.projects.create(
        caller.account_id,
        title=title,
        description=description,
        document_ids=await _visible_document_ids(deps, caller, ids),
    )

    logger.info(
        "Project created",
        extra={"structured": {"project_id": project.id, "documents": len(project.document_ids)}},
    )

    return Ok({"project": render_project(project)})


async def update_project(
    caller: Caller,
    deps: Collaborators,
    *,
    project_id: Any,
    fmt: str,
    params: Mapping[str, Any],
) -> HandlerResult:
    """Replace the membership with ``document_ids``, then apply title/description.

    An update without ``document_ids`` empties the project.
    """
    try:
        pid = parse_id(project_id)
        require_format(fmt)
        ids = parse_ids(params.get("document_ids"))
        attrs = pick(params, "title", "description")
        if "title" in attrs:
            attrs["title"] = require_text(attrs["title"], "title")
        if "description" in attrs:
            attrs["description"] = optional_text(attrs["description"], "description")
    except InvalidParameter as e:
        return bad_request(str(e))

    project = await deps.projects.find(pid, projects_visible_to(caller))
    if project is None:
        return not_found("Project not found")

    if not can_write(caller, project):
        return forbidden("You are not allowed to update this project.")

    await deps.projects.set_membership(project.id, await _visible_document_ids(deps, caller, ids))

    updated = await deps.projects.update(project.id, attrs)
    if updated is None:
        return not_found("Project not found")

    return Ok({"project": render_project(updated)})


async def destroy_project(
    caller: Caller, deps: Collaborators, *, project_id: Any, fmt: str
) -> HandlerResult:
    """Delete a project; only its owner may."""
    try:
        pid = parse_id(project_id)
        require_format(fmt)
    except InvalidParameter as e:
        return bad_request(str(e))

    project = await deps.projects.find(pid, projects_visible_to(caller))
    if project is None:
        return not_found("Project not found")

    if not can_destroy(caller, project):
        return forbidden("You are not allowed to delete this project.")

    await deps.projects.destroy(project.id)
    logger.info("Project deleted", extra={"structured": {"project_id": project.id}})

    return Ok(None)
