"""SQL implementations of repository interfaces."""

from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.app.access.policy import can_write
from backend.app.access.scope import DocumentScope, NoteScope, ProjectScope
from backend.app.db.context import Caller
from backend.app.db.models import (
    Collaboration,
    DocumentRow,
    EntityRow,
    NoteRow,
    ProjectMembership,
    ProjectRow,
    SectionRow,
)
from backend.app.db.queries import document_scope_clause, project_scope_clause
from backend.app.db.repositories import (
    UPDATABLE_DOCUMENT_FIELDS,
    UPDATABLE_PROJECT_FIELDS,
    DocumentPage,
    NewDocument,
    UpdateOutcome,
)
from backend.app.models.access import Access
from backend.app.models.documents import Document, Entity, Note, Project, Section
from backend.app.models.search import Pagination

_DOCUMENT_LOADS = (
    selectinload(DocumentRow.collaborators),
    selectinload(DocumentRow.sections),
    selectinload(DocumentRow.entities),
)


def to_document(row: DocumentRow) -> Document:
    """Convert a loaded document row to the domain model."""
    return Document(
        id=row.document_id,
        account_id=row.account_id,
        organization_id=row.organization_id,
        access=Access(row.access),
        title=row.title,
        description=row.description,
        source=row.source,
        related_article=row.related_article,
        published_url=row.published_url,
        language=row.language,
        page_count=row.page_count,
        full_text=row.full_text,
        file_name=row.file_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
        collaborator_ids=frozenset(c.account_id for c in row.collaborators),
        sections=[
            Section(title=s.title, page=s.page)
            for s in sorted(row.sections, key=lambda s: (s.page, s.section_id))
        ],
        entities=[Entity(kind=e.kind, value=e.value, relevance=e.relevance) for e in row.entities],
    )


def to_note(row: NoteRow) -> Note:
    """Convert a note row to the domain model."""
    return Note(
        id=row.note_id,
        document_id=row.document_id,
        account_id=row.account_id,
        organization_id=row.organization_id,
        page=row.page,
        title=row.title,
        content=row.content,
        access=Access(row.access) if row.access is not None else None,
        created_at=row.created_at,
    )


def to_project(row: ProjectRow) -> Project:
    """Convert a loaded project row to the domain model."""
    return Project(
        id=row.project_id,
        account_id=row.account_id,
        title=row.title,
        description=row.description,
        document_ids=frozenset(m.document_id for m in row.memberships),
        created_at=row.created_at,
    )


class SqlDocumentRepository:
    """SQL implementation of DocumentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _load(self, document_id: int, *, for_update: bool = False) -> DocumentRow | None:
        stmt = (
            select(DocumentRow)
            .where(DocumentRow.document_id == document_id)
            .options(*_DOCUMENT_LOADS)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find(self, document_id: int, scope: DocumentScope) -> Document | None:
        """Get document by ID."""
        result = await self._session.execute(
            select(DocumentRow)
            .where(DocumentRow.document_id == document_id, document_scope_clause(scope))
            .options(*_DOCUMENT_LOADS)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()

        if row is None:
            return None

        return to_document(row)

    async def query(self, scope: DocumentScope, pagination: Pagination) -> DocumentPage:
        """List scoped documents, newest first."""
        clause = document_scope_clause(scope)

        total = await self._session.scalar(
            select(func.count()).select_from(DocumentRow).where(clause)
        )
        result = await self._session.execute(
            select(DocumentRow)
            .where(clause)
            .options(*_DOCUMENT_LOADS)
            .execution_options(populate_existing=True)
            .order_by(DocumentRow.created_at.desc(), DocumentRow.document_id.desc())
            .offset(pagination.offset)
            .limit(pagination.per_page)
        )

        return DocumentPage(
            documents=[to_document(row) for row in result.scalars().all()],
            total=total or 0,
        )

    async def create(self, attrs: NewDocument) -> Document:
        """Create a new document."""
        now = datetime.now()
        row = DocumentRow(
            account_id=attrs.account_id,
            organization_id=attrs.organization_id,
            access=int(attrs.access),
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

        self._session.add(row)
        await self._session.commit()

        created = await self._load(row.document_id)
        assert created is not None
        return to_document(created)

    async def secure_update(
        self, document_id: int, attrs: dict[str, Any], caller: Caller
    ) -> UpdateOutcome:
        """Update a document after re-checking write access on the locked row."""
        row = await self._load(document_id, for_update=True)

        if row is None:
            await self._session.rollback()
            return UpdateOutcome(applied=False, document=None)

        current = to_document(row)
        if not can_write(caller, current):
            await self._session.rollback()
            return UpdateOutcome(applied=False, document=current)

        for key, value in attrs.items():
            if key not in UPDATABLE_DOCUMENT_FIELDS:
                continue
            setattr(row, key, int(value) if key == "access" else value)
        row.updated_at = datetime.now()

        await self._session.commit()

        updated = await self._load(document_id)
        assert updated is not None
        return UpdateOutcome(applied=True, document=to_document(updated))

    async def destroy(self, document_id: int) -> None:
        """Delete a document, its notes and its project memberships."""
        for model in (NoteRow, ProjectMembership, Collaboration, SectionRow, EntityRow):
            await self._session.execute(delete(model).where(model.document_id == document_id))

        await self._session.execute(
            delete(DocumentRow).where(DocumentRow.document_id == document_id)
        )
        await self._session.commit()


class SqlNoteRepository:
    """SQL implementation of NoteRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(self, note_id: int, document: Document, scope: NoteScope) -> Note | None:
        """Get note by ID."""
        result = await self._session.execute(
            select(NoteRow).where(NoteRow.note_id == note_id, NoteRow.document_id == document.id)
        )
        row = result.scalar_one_or_none()

        if row is None:
            return None

        note = to_note(row)
        if not scope.matches(note, document):
            return None

        return note

    async def for_document(self, document_id: int) -> list[Note]:
        """List notes attached to a document."""
        result = await self._session.execute(
            select(NoteRow)
            .where(NoteRow.document_id == document_id)
            .order_by(NoteRow.page, NoteRow.note_id)
        )
        return [to_note(row) for row in result.scalars().all()]


class SqlProjectRepository:
    """SQL implementation of ProjectRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _load(self, project_id: int) -> ProjectRow | None:
        result = await self._session.execute(
            select(ProjectRow)
            .where(ProjectRow.project_id == project_id)
            .options(selectinload(ProjectRow.memberships))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _existing_document_ids(self, document_ids: set[int]) -> set[int]:
        if not document_ids:
            return set()
        result = await self._session.execute(
            select(DocumentRow.document_id).where(DocumentRow.document_id.in_(document_ids))
        )
        return set(result.scalars().all())

    async def find(self, project_id: int, scope: ProjectScope) -> Project | None:
        """Get project by ID."""
        result = await self._session.execute(
            select(ProjectRow)
            .where(ProjectRow.project_id == project_id, project_scope_clause(scope))
            .options(selectinload(ProjectRow.memberships))
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()

        if row is None:
            return None

        return to_project(row)

    async def query(self, scope: ProjectScope) -> list[Project]:
        """List projects owned within the scope."""
        result = await self._session.execute(
            select(ProjectRow)
            .where(project_scope_clause(scope))
            .options(selectinload(ProjectRow.memberships))
            .execution_options(populate_existing=True)
            .order_by(ProjectRow.project_id)
        )
        return [to_project(row) for row in result.scalars().all()]

    async def create(
        self,
        account_id: int,
        *,
        title: str,
        description: str | None,
        document_ids: set[int],
    ) -> Project:
        """Create a project."""
        row = ProjectRow(
            account_id=account_id,
            title=title,
            description=description,
            created_at=datetime.now(),
        )
        row.memberships = [
            ProjectMembership(document_id=document_id)
            for document_id in sorted(await self._existing_document_ids(document_ids))
        ]

        self._session.add(row)
        await self._session.commit()

        created = await self._load(row.project_id)
        assert created is not None
        return to_project(created)

    async def update(self, project_id: int, attrs: dict[str, Any]) -> Project | None:
        """Update project attributes."""
        row = await self._load(project_id)

        if row is None:
            return None

        for key, value in attrs.items():
            if key in UPDATABLE_PROJECT_FIELDS:
                setattr(row, key, value)

        await self._session.commit()

        updated = await self._load(project_id)
        assert updated is not None
        return to_project(updated)

    async def set_membership(self, project_id: int, document_ids: set[int]) -> None:
        """Replace project membership in one transaction."""
        target = await self._existing_document_ids(document_ids)

        result = await self._session.execute(
            select(ProjectMembership.document_id).where(ProjectMembership.project_id == project_id)
        )
        current = set(result.scalars().all())

        stale = current - target
        if stale:
            await self._session.execute(
                delete(ProjectMembership).where(
                    ProjectMembership.project_id == project_id,
                    ProjectMembership.document_id.in_(stale),
                )
            )

        for document_id in sorted(target - current):
            self._session.add(ProjectMembership(project_id=project_id, document_id=document_id))

        await self._session.commit()

    async def destroy(self, project_id: int) -> None:
        """Delete a project and its memberships; documents are untouched."""
        await self._session.execute(
            delete(ProjectMembership).where(ProjectMembership.project_id == project_id)
        )
        await self._session.execute(delete(ProjectRow).where(ProjectRow.project_id == project_id))
        await self._session.commit()
