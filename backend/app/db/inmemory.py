"""In-memory implementations of repository interfaces."""

import asyncio
import itertools
from datetime import datetime
from typing import Any, BinaryIO

from backend.app.access.policy import can_write
from backend.app.access.scope import DocumentScope, NoteScope, ProjectScope
from backend.app.db.context import Caller
from backend.app.db.repositories import (
    UPDATABLE_DOCUMENT_FIELDS,
    UPDATABLE_PROJECT_FIELDS,
    Collaborators,
    DocumentPage,
    NewDocument,
    UpdateOutcome,
)
from backend.app.models.documents import Document, Note, Project
from backend.app.models.search import Pagination


class InMemoryStore:
    """Shared tables for the in-memory repositories.

    Repositories share one store so that cascading deletes reach notes and
    project memberships.
    """

    def __init__(self) -> None:
        self.documents: dict[int, Document] = {}
        self.notes: dict[int, Note] = {}
        self.projects: dict[int, Project] = {}
        self.lock = asyncio.Lock()
        self._document_ids = itertools.count(1)
        self._note_ids = itertools.count(1)
        self._project_ids = itertools.count(1)

    def next_document_id(self) -> int:
        return next(self._document_ids)

    def next_note_id(self) -> int:
        return next(self._note_ids)

    def next_project_id(self) -> int:
        return next(self._project_ids)

    def add_document(self, document: Document) -> Document:
        """Insert a fully-formed document (seeding and tests)."""
        self.documents[document.id] = document
        return document

    def add_note(self, note: Note) -> Note:
        """Insert a fully-formed note (seeding and tests)."""
        self.notes[note.id] = note
        return note


class InMemoryDocumentRepository:
    """In-memory implementation of DocumentRepository."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def find(self, document_id: int, scope: DocumentScope) -> Document | None:
        """Get document by ID."""
        document = self._store.documents.get(document_id)

        if document is None or not scope.matches(document):
            return None

        return document

    async def query(self, scope: DocumentScope, pagination: Pagination) -> DocumentPage:
        """List scoped documents, newest first."""
        visible = [doc for doc in self._store.documents.values() if scope.matches(doc)]
        visible.sort(key=lambda doc: (doc.created_at, doc.id), reverse=True)

        start = pagination.offset
        return DocumentPage(
            documents=visible[start : start + pagination.per_page],
            total=len(visible),
        )

    async def create(self, attrs: NewDocument) -> Document:
        """Create a new document."""
        now = datetime.now()
        document = Document(
            id=self._store.next_document_id(),
            account_id=attrs.account_id,
            organization_id=attrs.organization_id,
            access=attrs.access,
            title=attrs.title,
            description=attrs.description,
            source=attrs.source,
            related_article=attrs.related_article,
            published_url=attrs.published_url,
            language=attrs.language,
            page_count=attrs.page_count,
            full_text=attrs.full_text,
            file_name=attrs.file_name,
            created_at=now,
            updated_at=now,
        )
        self._store.documents[document.id] = document
        return document

    async def secure_update(
        self, document_id: int, attrs: dict[str, Any], caller: Caller
    ) -> UpdateOutcome:
        """Update a document after re-checking write access on the live row."""
        async with self._store.lock:
            current = self._store.documents.get(document_id)

            if current is None:
                return UpdateOutcome(applied=False, document=None)

            if not can_write(caller, current):
                return UpdateOutcome(applied=False, document=current)

            changes = {k: v for k, v in attrs.items() if k in UPDATABLE_DOCUMENT_FIELDS}
            updated = Document.model_validate(
                {**current.model_dump(), **changes, "updated_at": datetime.now()}
            )
            self._store.documents[document_id] = updated
            return UpdateOutcome(applied=True, document=updated)

    async def destroy(self, document_id: int) -> None:
        """Delete a document, its notes and its project memberships."""
        async with self._store.lock:
            self._store.documents.pop(document_id, None)

            orphaned = [n.id for n in self._store.notes.values() if n.document_id == document_id]
            for note_id in orphaned:
                del self._store.notes[note_id]

            for project in list(self._store.projects.values()):
                if document_id in project.document_ids:
                    self._store.projects[project.id] = project.model_copy(
                        update={"document_ids": project.document_ids - {document_id}}
                    )


class InMemoryNoteRepository:
    """In-memory implementation of NoteRepository."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def find(self, note_id: int, document: Document, scope: NoteScope) -> Note | None:
        """Get note by ID."""
        note = self._store.notes.get(note_id)

        if note is None or not scope.matches(note, document):
            return None

        return note

    async def for_document(self, document_id: int) -> list[Note]:
        """List notes attached to a document."""
        notes = [n for n in self._store.notes.values() if n.document_id == document_id]
        notes.sort(key=lambda n: (n.page, n.id))
        return notes


class InMemoryProjectRepository:
    """In-memory implementation of ProjectRepository."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def find(self, project_id: int, scope: ProjectScope) -> Project | None:
        """Get project by ID."""
        project = self._store.projects.get(project_id)

        if project is None or not scope.matches(project):
            return None

        return project

    async def query(self, scope: ProjectScope) -> list[Project]:
        """List projects owned within the scope."""
        if scope.is_empty:
            return []

        projects = [p for p in self._store.projects.values() if scope.matches(p)]
        return sorted(projects, key=lambda p: p.id)

    async def create(
        self,
        account_id: int,
        *,
        title: str,
        description: str | None,
        document_ids: set[int],
    ) -> Project:
        """Create a project."""
        async with self._store.lock:
            project = Project(
                id=self._store.next_project_id(),
                account_id=account_id,
                title=title,
                description=description,
                document_ids=frozenset(d for d in document_ids if d in self._store.documents),
                created_at=datetime.now(),
            )
            self._store.projects[project.id] = project
            return project

    async def update(self, project_id: int, attrs: dict[str, Any]) -> Project | None:
        """Update project attributes."""
        async with self._store.lock:
            project = self._store.projects.get(project_id)

            if project is None:
                return None

            changes = {k: v for k, v in attrs.items() if k in UPDATABLE_PROJECT_FIELDS}
            updated = project.model_copy(update=changes)
            self._store.projects[project_id] = updated
            return updated

    async def set_membership(self, project_id: int, document_ids: set[int]) -> None:
        """Replace project membership in a single step."""
        async with self._store.lock:
            project = self._store.projects.get(project_id)

            if project is None:
                return

            target = frozenset(d for d in document_ids if d in self._store.documents)
            self._store.projects[project_id] = project.model_copy(update={"document_ids": target})

    async def destroy(self, project_id: int) -> None:
        """Delete a project."""
        async with self._store.lock:
            self._store.projects.pop(project_id, None)


class InMemoryPageCache:
    """In-memory implementation of PageCache."""

    def __init__(self) -> None:
        self.pages: dict[str, str] = {}
        self.invalidated: list[str] = []

    async def invalidate(self, path: str) -> None:
        """Drop a cached page."""
        self.pages.pop(path, None)
        self.invalidated.append(path)


class InMemoryFileStorage:
    """In-memory implementation of FileStorage."""

    def __init__(self) -> None:
        self.files: dict[int, tuple[str, bytes]] = {}

    async def save(self, document_id: int, file_name: str, stream: BinaryIO) -> int:
        """Keep the uploaded bytes keyed by document."""
        data = stream.read()
        self.files[document_id] = (file_name, data)
        return len(data)


def build_inmemory_collaborators(store: InMemoryStore | None = None) -> Collaborators:
    """Wire every collaborator to one shared in-memory store."""
    from backend.app.search.engine import InMemorySearchIndex

    store = store or InMemoryStore()
    return Collaborators(
        documents=InMemoryDocumentRepository(store),
        notes=InMemoryNoteRepository(store),
        projects=InMemoryProjectRepository(store),
        search=InMemorySearchIndex(store),
        cache=InMemoryPageCache(),
        storage=InMemoryFileStorage(),
    )
