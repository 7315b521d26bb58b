"""Search endpoint - GET /api/search.{fmt}."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from backend.app.api.auth import get_current_caller
from backend.app.api.deps import get_collaborators
from backend.app.api.responses import to_response
from backend.app.config import Settings, get_settings
from backend.app.db.context import Caller
from backend.app.db.repositories import Collaborators
from backend.app.handlers import search as search_handler

router = APIRouter(prefix="/api", tags=["search"])


@router.get("/search.{fmt}")
async def search_documents(
    fmt: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    deps: Annotated[Collaborators, Depends(get_collaborators)],
    settings: Annotated[Settings, Depends(get_settings)],
    q: Annotated[str | None, Query(max_length=1000)] = None,
    page: Annotated[int, Query()] = 1,
    per_page: Annotated[int | None, Query()] = None,
    mentions: Annotated[int | None, Query()] = None,
    entities: Annotated[bool, Query()] = False,
    callback: Annotated[str | None, Query()] = None,
) -> Response:
    """Search documents visible to the caller.

    Args:
        fmt: json or js
        q: Search term
        page: 1-based page
        per_page: Page size
        mentions: Snippets per hit (clamped to 1..10; < 1 disables)
        entities: Include entity facets
        callback: JSONP callback for the js format

    Returns:
        total, page, per_page, q, documents (+ entities)
    """
    result = await search_handler.search(
        caller,
        deps,
        settings,
        fmt=fmt,
        q=q,
        page=page,
        per_page=per_page,
        mentions=mentions,
        entities=entities,
    )
    return to_response(result, operation="search", caller=caller, fmt=fmt, callback=callback)
