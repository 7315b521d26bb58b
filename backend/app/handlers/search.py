"""Search handler."""

from typing import Any

from backend.app.access.scope import documents_visible_to
from backend.app.canonical.render import render_search_hit
from backend.app.config import Settings
from backend.app.db.context import Caller
from backend.app.db.repositories import Collaborators
from backend.app.handlers.result import HandlerResult, Ok, bad_request
from backend.app.handlers.validation import InvalidParameter, require_format
from backend.app.models.search import Pagination, SearchQuery, clamp_mentions


async def search(
    caller: Caller,
    deps: Collaborators,
    settings: Settings,
    *,
    fmt: str,
    q: str | None,
    page: int = 1,
    per_page: int | None = None,
    mentions: int | None = None,
    entities: bool = False,
) -> HandlerResult:
    """Search documents visible to the caller.

    Args:
        caller: Current caller
        deps: Collaborators
        settings: Application settings
        fmt: Response format (json or js)
        q: Free-text term
        page: 1-based page number
        per_page: Page size, capped at settings.search_max_per_page
        mentions: Requested snippets per hit; clamped to [1, 10], < 1 disables
        entities: Whether to include entity facets

    Returns:
        Ok with total/page/per_page/q/documents (and entities when requested)
    """
    try:
        require_format(fmt)
    except InvalidParameter as e:
        return bad_request(str(e))

    if page < 1:
        return bad_request("page must be a positive integer")

    size = per_page if per_page is not None else settings.search_default_per_page
    if size < 1:
        return bad_request("per_page must be a positive integer")
    size = min(size, settings.search_max_per_page)

    query = SearchQuery(
        term=q or "",
        pagination=Pagination(page=page, per_page=size),
        include_entities=entities,
        mentions=clamp_mentions(mentions),
    )

    result = await deps.search.search(query, documents_visible_to(caller))

    payload: dict[str, Any] = {
        "total": result.total,
        "page": result.page,
        "per_page": result.per_page,
        "q": q,
        "documents": [
            render_search_hit(hit, caller=caller, base_url=settings.public_base_url)
            for hit in result.hits
        ],
    }

    if entities:
        payload["entities"] = {
            kind: [facet.model_dump() for facet in values]
            for kind, values in (result.facets or {}).items()
        }

    return Ok(payload)
