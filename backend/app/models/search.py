"""Search query and result models."""

from pydantic import BaseModel, Field

from backend.app.models.documents import Document

MENTIONS_MIN = 1
MENTIONS_MAX = 10


def clamp_mentions(raw: int | None) -> int | None:
    """Normalize the requested mention-snippet count.

    Values above the maximum are capped; zero or negative disables mentions.
    """
    if raw is None:
        return None
    if raw < MENTIONS_MIN:
        return None
    return min(raw, MENTIONS_MAX)


class Pagination(BaseModel):
    """1-based page cursor."""

    page: int = Field(1, ge=1)
    per_page: int = Field(10, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


class SearchQuery(BaseModel):
    """Validated search request."""

    term: str = ""
    pagination: Pagination = Field(default_factory=Pagination)
    include_entities: bool = False
    mentions: int | None = Field(None, ge=MENTIONS_MIN, le=MENTIONS_MAX)


class Mention(BaseModel):
    """Snippet of a page matching the search term."""

    page: int
    text: str


class SearchHit(BaseModel):
    """Matching document with optional mention snippets."""

    document: Document
    score: float
    mentions: list[Mention] | None = None


class FacetValue(BaseModel):
    """Entity value with its hit count."""

    value: str
    count: int


class SearchResult(BaseModel):
    """Page of search hits."""

    total: int
    page: int
    per_page: int
    hits: list[SearchHit]
    facets: dict[str, list[FacetValue]] | None = None
