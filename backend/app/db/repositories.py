"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from typing import Any, BinaryIO, Protocol

from backend.app.access.scope import DocumentScope, NoteScope, ProjectScope
from backend.app.db.context import Caller
from backend.app.models.access import Access
from backend.app.models.documents import Document, Note, Project
from backend.app.models.search import Pagination, SearchQuery, SearchResult

UPDATABLE_DOCUMENT_FIELDS = frozenset(
    {"access", "title", "description", "source", "related_article", "published_url"}
)
UPDATABLE_PROJECT_FIELDS = frozenset({"title", "description"})


@dataclass
class NewDocument:
    """Attributes for a freshly uploaded document."""

    account_id: int
    organization_id: int
    title: str
    access: Access = Access.PRIVATE
    description: str | None = None
    source: str | None = None
    related_article: str | None = None
    published_url: str | None = None
    language: str = "en"
    file_name: str | None = None
    full_text: str = ""
    page_count: int = 0


@dataclass
class UpdateOutcome:
    """Result of a policy-checked update.

    ``document`` is None when the row vanished; otherwise it holds the
    updated row when ``applied`` and the untouched row when refused.
    """

    applied: bool
    document: Document | None


@dataclass
class DocumentPage:
    """Scoped page of documents with the unpaginated total."""

    documents: list[Document]
    total: int


class DocumentRepository(Protocol):
    """Repository for document operations."""

    async def find(self, document_id: int, scope: DocumentScope) -> Document | None:
        """Get a document by ID if the scope admits it.

        Args:
            document_id: Document ID
            scope: Visibility scope of the caller

        Returns:
            Document or None if absent or hidden
        """
        ...

    async def query(self, scope: DocumentScope, pagination: Pagination) -> DocumentPage:
        """List documents admitted by the scope, newest first."""
        ...

    async def create(self, attrs: NewDocument) -> Document:
        """Persist a new document owned by ``attrs.account_id``."""
        ...

    async def secure_update(
        self, document_id: int, attrs: dict[str, Any], caller: Caller
    ) -> UpdateOutcome:
        """Apply ``attrs`` only if ``caller`` can write the current row.

        Load, authorization check and write form one unit of work.
        """
        ...

    async def destroy(self, document_id: int) -> None:
        """Delete a document together with its notes and project memberships."""
        ...


class NoteRepository(Protocol):
    """Repository for note operations."""

    async def find(self, note_id: int, document: Document, scope: NoteScope) -> Note | None:
        """Get a note on ``document`` if the scope admits it."""
        ...

    async def for_document(self, document_id: int) -> list[Note]:
        """All notes attached to a document, unfiltered."""
        ...


class ProjectRepository(Protocol):
    """Repository for project operations."""

    async def find(self, project_id: int, scope: ProjectScope) -> Project | None:
        """Get a project by ID if the scope admits it."""
        ...

    async def query(self, scope: ProjectScope) -> list[Project]:
        """List projects admitted by the scope, ordered by ID."""
        ...

    async def create(
        self,
        account_id: int,
        *,
        title: str,
        description: str | None,
        document_ids: set[int],
    ) -> Project:
        """Create a project with its initial membership."""
        ...

    async def update(self, project_id: int, attrs: dict[str, Any]) -> Project | None:
        """Apply title/description changes."""
        ...

    async def set_membership(self, project_id: int, document_ids: set[int]) -> None:
        """Replace the membership set in one atomic step."""
        ...

    async def destroy(self, project_id: int) -> None:
        """Delete a project; member documents are untouched."""
        ...


class SearchIndex(Protocol):
    """Full-text search collaborator."""

    async def search(self, query: SearchQuery, scope: DocumentScope) -> SearchResult:
        """Run ``query`` restricted to ``scope``."""
        ...


class PageCache(Protocol):
    """Cache of rendered canonical documents."""

    async def invalidate(self, path: str) -> None:
        """Drop the cached rendering stored under ``path``."""
        ...


class FileStorage(Protocol):
    """Storage for original uploaded files."""

    async def save(self, document_id: int, file_name: str, stream: BinaryIO) -> int:
        """Store the upload and return its size in bytes."""
        ...


@dataclass
class Collaborators:
    """External collaborators a handler may call."""

    documents: DocumentRepository
    notes: NoteRepository
    projects: ProjectRepository
    search: SearchIndex
    cache: PageCache
    storage: FileStorage
