"""Document handlers - upload, fetch, update and destroy."""

from collections.abc import Mapping
from typing import Any

from backend.app.access.policy import can_destroy
from backend.app.access.scope import documents_visible_to, notes_visible_to
from backend.app.canonical.render import (
    FULL_OPTIONS,
    render_document,
    render_entities,
    render_note,
)
from backend.app.config import Settings
from backend.app.db.context import Authenticated, Caller
from backend.app.db.repositories import UPDATABLE_DOCUMENT_FIELDS, Collaborators, NewDocument
from backend.app.handlers.result import (
    HandlerResult,
    Ok,
    bad_request,
    forbidden,
    not_found,
)
from backend.app.handlers.validation import (
    InvalidParameter,
    is_truthy,
    optional_text,
    parse_id,
    pick,
    require_format,
    require_text,
)
from backend.app.models.access import Access, InvalidAccessLevel, access_from_name
from backend.app.models.documents import Document
from backend.app.search.engine import PAGE_BREAK
from backend.app.utils.logging import get_logger, silence_logs

logger = get_logger(__name__)

FILE_REQUIRED = "The file parameter must be the contents of a file."

OPTIONAL_TEXT_FIELDS = ("description", "source", "related_article", "published_url")


def _is_file_like(value: Any) -> bool:
    """Uploaded files expose a filename and a readable stream."""
    return (
        bool(getattr(value, "filename", None))
        and hasattr(getattr(value, "file", None), "read")
    )


def _extract_text(upload: Any) -> str:
    """Decode plain-text uploads; other formats are left to the processing pipeline."""
    content_type = getattr(upload, "content_type", None) or ""
    if not content_type.startswith("text/"):
        return ""

    stream = upload.file
    text = stream.read().decode("utf-8", errors="replace")
    stream.seek(0)
    return text


async def _render_full(
    deps: Collaborators, settings: Settings, caller: Caller, document: Document
) -> dict[str, Any]:
    notes = await deps.notes.for_document(document.id)
    return render_document(
        document, FULL_OPTIONS, caller=caller, base_url=settings.public_base_url, notes=notes
    )


async def upload(
    caller: Caller,
    deps: Collaborators,
    settings: Settings,
    *,
    fields: Mapping[str, Any],
    fmt: str,
) -> HandlerResult:
    """Create a document from an uploaded file.

    Fields: file, title (required); access, source, description, language,
    related_article, published_url, secure (optional). A secure upload runs
    with logging silenced for this request only.
    """
    with silence_logs(is_truthy(fields.get("secure"))):
        try:
            require_format(fmt)
        except InvalidParameter as e:
            return bad_request(str(e))

        upload_file = fields.get("file")

        if not isinstance(caller, Authenticated) or not upload_file or not fields.get("title"):
            return bad_request("An authenticated account, a file and a title are required.")

        if not _is_file_like(upload_file):
            return bad_request(FILE_REQUIRED)

        try:
            title = require_text(fields["title"], "title")
            text = {key: optional_text(fields.get(key), key) for key in OPTIONAL_TEXT_FIELDS}
            language = optional_text(fields.get("language"), "language")
            access = access_from_name(fields.get("access") or Access.PRIVATE.symbol)
        except (InvalidParameter, InvalidAccessLevel) as e:
            return bad_request(str(e))

        full_text = _extract_text(upload_file)
        document = await deps.documents.create(
            NewDocument(
                account_id=caller.account_id,
                organization_id=caller.organization_id,
                title=title,
                access=access,
                language=language or "en",
                file_name=upload_file.filename,
                full_text=full_text,
                page_count=full_text.count(PAGE_BREAK) + 1 if full_text else 0,
                **text,
            )
        )
        try:
            size = await deps.storage.save(document.id, upload_file.filename, upload_file.file)
        except Exception:
            logger.warning(
                "Storing upload failed, removing document",
                extra={"structured": {"document_id": document.id}},
            )
            await deps.documents.destroy(document.id)
            raise

        logger.info(
            "Document uploaded",
            extra={
                "structured": {
                    "document_id": document.id,
                    "account_id": caller.account_id,
                    "title": document.title,
                    "file_name": upload_file.filename,
                    "bytes": size,
                }
            },
        )

        return Ok(await _render_full(deps, settings, caller, document))


async def fetch_document(
    caller: Caller,
    deps: Collaborators,
    settings: Settings,
    *,
    document_id: Any,
    fmt: str,
) -> HandlerResult:
    """Canonical document with access, sections and annotations."""
    try:
        doc_id = parse_id(document_id)
        require_format(fmt)
    except InvalidParameter as e:
        return bad_request(str(e))

    document = await deps.documents.find(doc_id, documents_visible_to(caller))
    if document is None:
        return not_found("Document not found")

    return Ok({"document": await _render_full(deps, settings, caller, document)})


async def fetch_note(
    caller: Caller,
    deps: Collaborators,
    *,
    document_id: Any,
    note_id: Any,
    fmt: str,
) -> HandlerResult:
    """Canonical note; both note and parent document must be visible."""
    try:
        doc_id = parse_id(document_id)
        nid = parse_id(note_id, "note_id")
        require_format(fmt)
    except InvalidParameter as e:
        return bad_request(str(e))

    document = await deps.documents.find(doc_id, documents_visible_to(caller))
    if document is None:
        return not_found("Annotation not found")

    note = await deps.notes.find(nid, document, notes_visible_to(caller))
    if note is None:
        return not_found("Annotation not found")

    return Ok({"annotation": render_note(note, document)})


async def fetch_entities(
    caller: Caller,
    deps: Collaborators,
    *,
    document_id: Any,
    fmt: str,
) -> HandlerResult:
    """Entities of a visible document grouped by kind."""
    try:
        doc_id = parse_id(document_id)
        require_format(fmt)
    except InvalidParameter as e:
        return bad_request(str(e))

    document = await deps.documents.find(doc_id, documents_visible_to(caller))
    if document is None:
        return not_found("Document not found")

    return Ok({"entities": render_entities(document)})


async def update_document(
    caller: Caller,
    deps: Collaborators,
    settings: Settings,
    *,
    document_id: Any,
    fmt: str,
    params: Mapping[str, Any],
) -> HandlerResult:
    """Apply whitelisted attribute changes through the policy-checked update.

    A refused update answers 403 with the unmodified document (configurable
    via ``forbidden_update_includes_document``).
    """
    try:
        doc_id = parse_id(document_id)
        require_format(fmt)
        attrs = pick(params, *sorted(UPDATABLE_DOCUMENT_FIELDS))
        if "access" in attrs:
            attrs["access"] = access_from_name(attrs["access"])
        if "title" in attrs:
            attrs["title"] = require_text(attrs["title"], "title")
        for key in OPTIONAL_TEXT_FIELDS:
            if key in attrs:
                attrs[key] = optional_text(attrs[key], key)
    except (InvalidParameter, InvalidAccessLevel) as e:
        return bad_request(str(e))

    document = await deps.documents.find(doc_id, documents_visible_to(caller))
    if document is None:
        return not_found("Document not found")

    outcome = await deps.documents.secure_update(document.id, attrs, caller)
    if outcome.document is None:
        return not_found("Document not found")

    if not outcome.applied:
        payload = None
        if settings.forbidden_update_includes_document:
            payload = {"document": await _render_full(deps, settings, caller, outcome.document)}
        return forbidden("You are not allowed to update this document.", payload)

    updated = outcome.document
    if document.cacheable or updated.cacheable:
        await deps.cache.invalidate(updated.canonical_cache_path)

    logger.info(
        "Document updated",
        extra={"structured": {"document_id": updated.id, "fields": sorted(attrs)}},
    )

    return Ok({"document": await _render_full(deps, settings, caller, updated)})


async def destroy_document(
    caller: Caller,
    deps: Collaborators,
    *,
    document_id: Any,
    fmt: str,
    method: str,
) -> HandlerResult:
    """Delete a document the caller owns or collaborates on."""
    if method.upper() != "DELETE":
        return bad_request("Documents can only be deleted with a DELETE request.")

    try:
        doc_id = parse_id(document_id)
        require_format(fmt)
    except InvalidParameter as e:
        return bad_request(str(e))

    document = await deps.documents.find(doc_id, documents_visible_to(caller))
    if document is None:
        return not_found("Document not found")

    if not can_destroy(caller, document):
        return forbidden("You are not allowed to delete this document.")

    await deps.documents.destroy(document.id)
    if document.cacheable:
        await deps.cache.invalidate(document.canonical_cache_path)

    logger.info("Document deleted", extra={"structured": {"document_id": document.id}})

    return Ok(None)
