"""Document endpoints - upload, fetch, entities, notes, update and delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse, Response

from backend.app.api.auth import get_current_caller
from backend.app.api.deps import get_collaborators
from backend.app.api.params import read_params
from backend.app.api.responses import to_response
from backend.app.config import Settings, get_settings
from backend.app.db.context import Caller
from backend.app.db.repositories import Collaborators
from backend.app.handlers import documents
from backend.app.handlers.result import bad_request
from backend.app.handlers.validation import InvalidParameter, is_truthy
from backend.app.utils.logging import silence_logs

router = APIRouter(prefix="/api", tags=["documents"])

CallerDep = Annotated[Caller, Depends(get_current_caller)]
CollaboratorsDep = Annotated[Collaborators, Depends(get_collaborators)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
CallbackQuery = Annotated[str | None, Query()]


@router.get("", include_in_schema=False)
async def index(settings: SettingsDep) -> RedirectResponse:
    """The bare API root points at the API documentation."""
    return RedirectResponse(settings.api_help_url)


@router.post("/upload.{fmt}")
async def upload_document(
    fmt: str,
    request: Request,
    caller: CallerDep,
    deps: CollaboratorsDep,
    settings: SettingsDep,
) -> Response:
    """Upload a document (multipart: file, title, access, source, description, secure)."""
    try:
        fields = await read_params(request)
    except InvalidParameter as e:
        return to_response(bad_request(str(e)), operation="upload", caller=caller, fmt=fmt)

    with silence_logs(is_truthy(fields.get("secure"))):
        result = await documents.upload(caller, deps, settings, fields=fields, fmt=fmt)
        return to_response(
            result, operation="upload", caller=caller, fmt=fmt, callback=fields.get("callback")
        )


@router.get("/documents/{document_id}.{fmt}")
async def get_document(
    document_id: str,
    fmt: str,
    caller: CallerDep,
    deps: CollaboratorsDep,
    settings: SettingsDep,
    callback: CallbackQuery = None,
) -> Response:
    """Canonical document JSON."""
    result = await documents.fetch_document(
        caller, deps, settings, document_id=document_id, fmt=fmt
    )
    return to_response(result, operation="document", caller=caller, fmt=fmt, callback=callback)


@router.get("/documents/{document_id}/entities.{fmt}")
async def get_entities(
    document_id: str,
    fmt: str,
    caller: CallerDep,
    deps: CollaboratorsDep,
    callback: CallbackQuery = None,
) -> Response:
    """Entities of a document grouped by kind."""
    result = await documents.fetch_entities(caller, deps, document_id=document_id, fmt=fmt)
    return to_response(result, operation="entities", caller=caller, fmt=fmt, callback=callback)


@router.get("/documents/{document_id}/notes/{note_id}.{fmt}")
async def get_note(
    document_id: str,
    note_id: str,
    fmt: str,
    caller: CallerDep,
    deps: CollaboratorsDep,
    callback: CallbackQuery = None,
) -> Response:
    """Canonical note JSON."""
    result = await documents.fetch_note(
        caller, deps, document_id=document_id, note_id=note_id, fmt=fmt
    )
    return to_response(result, operation="note", caller=caller, fmt=fmt, callback=callback)


@router.put("/documents/{document_id}.{fmt}")
async def update_document(
    document_id: str,
    fmt: str,
    request: Request,
    caller: CallerDep,
    deps: CollaboratorsDep,
    settings: SettingsDep,
) -> Response:
    """Update access, title, description, source, related_article or published_url."""
    try:
        params = await read_params(request)
    except InvalidParameter as e:
        return to_response(bad_request(str(e)), operation="update", caller=caller, fmt=fmt)

    result = await documents.update_document(
        caller, deps, settings, document_id=document_id, fmt=fmt, params=params
    )
    return to_response(
        result, operation="update", caller=caller, fmt=fmt, callback=params.get("callback")
    )


@router.api_route("/documents/{document_id}.{fmt}", methods=["DELETE", "POST"])
async def delete_document(
    document_id: str,
    fmt: str,
    request: Request,
    caller: CallerDep,
    deps: CollaboratorsDep,
) -> Response:
    """Delete a document; POST is accepted with ``_method=delete``."""
    try:
        params = await read_params(request)
    except InvalidParameter as e:
        return to_response(bad_request(str(e)), operation="destroy", caller=caller, fmt=fmt)

    method = request.method
    if str(params.get("_method", "")).upper() == "DELETE":
        method = "DELETE"

    result = await documents.destroy_document(
        caller, deps, document_id=document_id, fmt=fmt, method=method
    )
    return to_response(
        result, operation="destroy", caller=caller, fmt=fmt, callback=params.get("callback")
    )
