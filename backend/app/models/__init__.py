"""Models package - re-exports for convenience."""

from backend.app.models.access import (
    ACCESS_MAP,
    PUBLIC_LEVELS,
    Access,
    InvalidAccessLevel,
    access_from_name,
)
from backend.app.models.documents import Document, Entity, Note, Project, Section
from backend.app.models.search import (
    FacetValue,
    Mention,
    Pagination,
    SearchHit,
    SearchQuery,
    SearchResult,
    clamp_mentions,
)

__all__ = [
    # Access
    "Access",
    "ACCESS_MAP",
    "PUBLIC_LEVELS",
    "InvalidAccessLevel",
    "access_from_name",
    # Documents
    "Document",
    "Section",
    "Entity",
    "Note",
    "Project",
    # Search
    "SearchQuery",
    "Pagination",
    "SearchResult",
    "SearchHit",
    "Mention",
    "FacetValue",
    "clamp_mentions",
]
