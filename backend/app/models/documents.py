"""Document, note and project domain models."""

from datetime import datetime

from pydantic import BaseModel, Field

from backend.app.models.access import Access


class Section(BaseModel):
    """Named chapter marker inside a document."""

    title: str
    page: int = Field(..., ge=1)


class Entity(BaseModel):
    """Extracted entity (person, place, organization, ...)."""

    kind: str
    value: str
    relevance: float = 0.0


class Document(BaseModel):
    """Stored document and its access-control fields."""

    id: int
    account_id: int
    organization_id: int
    access: Access = Access.PRIVATE
    title: str
    description: str | None = None
    source: str | None = None
    related_article: str | None = None
    published_url: str | None = None
    language: str = "en"
    page_count: int = 0
    full_text: str = ""
    file_name: str | None = None
    created_at: datetime
    updated_at: datetime
    collaborator_ids: frozenset[int] = frozenset()
    sections: list[Section] = Field(default_factory=list)
    entities: list[Entity] = Field(default_factory=list)

    @property
    def cacheable(self) -> bool:
        """Public renderings are served from the page cache."""
        return self.access.is_public

    @property
    def canonical_cache_path(self) -> str:
        return f"/api/documents/{self.id}.json"


class Note(BaseModel):
    """Annotation attached to a single document."""

    id: int
    document_id: int
    account_id: int
    organization_id: int
    page: int = Field(1, ge=1)
    title: str
    content: str = ""
    # None inherits the parent document's access level
    access: Access | None = None
    created_at: datetime


class Project(BaseModel):
    """Named collection of documents owned by one account."""

    id: int
    account_id: int
    title: str
    description: str | None = None
    document_ids: frozenset[int] = frozenset()
    created_at: datetime
