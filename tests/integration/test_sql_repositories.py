"""Integration tests for the SQL repositories on SQLite (aiosqlite)."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.app.access.scope import (
    documents_visible_to,
    notes_visible_to,
    projects_visible_to,
)
from backend.app.db.context import ANONYMOUS, Caller
from backend.app.db.models import (
    Collaboration,
    DocumentRow,
    EntityRow,
    NoteRow,
    SectionRow,
)
from backend.app.db.repositories import NewDocument
from backend.app.db.seed_dev import SAMPLE_DOCUMENTS, seed_dev_data
from backend.app.db.sql_repositories import (
    SqlDocumentRepository,
    SqlNoteRepository,
    SqlProjectRepository,
    to_document,
)
from backend.app.models.access import Access
from backend.app.models.search import Pagination, SearchQuery
from backend.app.search.engine import SqlSearchIndex
from tests.helpers import BASE_TIME, COLLEAGUE, OUTSIDER, OWNER

CALLERS: list[Caller] = [ANONYMOUS, OWNER, COLLEAGUE, OUTSIDER]


async def _add_document(
    session: AsyncSession,
    *,
    access: Access,
    account_id: int = OWNER.account_id,
    organization_id: int = OWNER.organization_id,
    title: str = "Report",
    collaborators: tuple[int, ...] = (),
    offset: int = 0,
) -> int:
    created = BASE_TIME + timedelta(minutes=offset)
    row = DocumentRow(
        account_id=account_id,
        organization_id=organization_id,
        access=int(access),
        title=title,
        full_text=f"{title} body",
        created_at=created,
        updated_at=created,
    )
    row.collaborators = [Collaboration(account_id=a) for a in collaborators]
    row.sections = [SectionRow(title="Intro", page=1)]
    row.entities = [EntityRow(kind="person", value="Ada", relevance=0.5)]
    session.add(row)
    await session.commit()
    return row.document_id


async def _seed_matrix(session: AsyncSession) -> list[int]:
    """One document per interesting access combination."""
    return [
        await _add_document(session, access=Access.PUBLIC, offset=1),
        await _add_document(session, access=Access.EXPORTED, offset=2),
        await _add_document(session, access=Access.ORGANIZATION, offset=3),
        await _add_document(session, access=Access.PRIVATE, offset=4),
        await _add_document(session, access=Access.PENDING, offset=5),
        await _add_document(
            session, access=Access.PRIVATE, collaborators=(OUTSIDER.account_id,), offset=6
        ),
        await _add_document(
            session,
            access=Access.ORGANIZATION,
            account_id=OUTSIDER.account_id,
            organization_id=OUTSIDER.organization_id,
            offset=7,
        ),
    ]


async def _assert_scope_parity(session: AsyncSession) -> None:
    """The compiled WHERE clause admits exactly what scope.matches admits."""
    await _seed_matrix(session)
    repo = SqlDocumentRepository(session)

    result = await session.execute(select(DocumentRow))
    rows = result.scalars().all()
    for row in rows:
        await session.refresh(row, ["collaborators", "sections", "entities"])
    everything = [to_document(row) for row in rows]

    for caller in CALLERS:
        scope = documents_visible_to(caller)
        page = await repo.query(scope, Pagination(page=1, per_page=100))

        expected = {d.id for d in everything if scope.matches(d)}
        assert {d.id for d in page.documents} == expected, caller
        assert page.total == len(expected)

        for document in everything:
            found = await repo.find(document.id, scope)
            assert (found is not None) == (document.id in expected)


@pytest.mark.asyncio
async def test_scope_clause_matches_python_policy(sqlite_session: AsyncSession) -> None:
    await _assert_scope_parity(sqlite_session)


@pytest.mark.postgres
@pytest.mark.asyncio
async def test_scope_clause_matches_python_policy_on_postgres(
    postgres_session: AsyncSession,
) -> None:
    await _assert_scope_parity(postgres_session)


@pytest.mark.asyncio
async def test_query_orders_newest_first(sqlite_session: AsyncSession) -> None:
    ids = await _seed_matrix(sqlite_session)
    repo = SqlDocumentRepository(sqlite_session)

    page = await repo.query(documents_visible_to(OWNER), Pagination(page=1, per_page=2))

    assert [d.id for d in page.documents] == [ids[5], ids[4]]


@pytest.mark.asyncio
async def test_create_and_load_nested_fields(sqlite_session: AsyncSession) -> None:
    repo = SqlDocumentRepository(sqlite_session)

    created = await repo.create(
        NewDocument(
            account_id=OWNER.account_id,
            organization_id=OWNER.organization_id,
            title="Uploaded",
            access=Access.ORGANIZATION,
            full_text="page one\fpage two",
            page_count=2,
        )
    )

    assert created.id > 0
    assert created.access is Access.ORGANIZATION
    assert created.collaborator_ids == frozenset()

    found = await repo.find(created.id, documents_visible_to(COLLEAGUE))
    assert found is not None
    assert found.page_count == 2


@pytest.mark.asyncio
async def test_secure_update(sqlite_session: AsyncSession) -> None:
    document_id = await _add_document(sqlite_session, access=Access.ORGANIZATION, title="Original")
    repo = SqlDocumentRepository(sqlite_session)

    refused = await repo.secure_update(document_id, {"title": "Changed"}, COLLEAGUE)
    assert not refused.applied
    assert refused.document is not None
    assert refused.document.title == "Original"

    applied = await repo.secure_update(
        document_id, {"title": "Changed", "access": Access.PUBLIC}, OWNER
    )
    assert applied.applied
    assert applied.document is not None
    assert applied.document.title == "Changed"
    assert applied.document.access is Access.PUBLIC

    missing = await repo.secure_update(9999, {"title": "x"}, OWNER)
    assert missing.document is None


@pytest.mark.asyncio
async def test_destroy_removes_dependents(sqlite_session: AsyncSession) -> None:
    document_id = await _add_document(
        sqlite_session, access=Access.PRIVATE, collaborators=(COLLEAGUE.account_id,)
    )
    sqlite_session.add(
        NoteRow(
            document_id=document_id,
            account_id=OWNER.account_id,
            organization_id=OWNER.organization_id,
            title="Remark",
        )
    )
    await sqlite_session.commit()

    projects = SqlProjectRepository(sqlite_session)
    project = await projects.create(
        OWNER.account_id, title="Audit", description=None, document_ids={document_id}
    )

    await SqlDocumentRepository(sqlite_session).destroy(document_id)

    for model in (DocumentRow, NoteRow, Collaboration, SectionRow, EntityRow):
        count = await sqlite_session.scalar(select(func.count()).select_from(model))
        assert count == 0, model.__name__

    reloaded = await projects.find(project.id, projects_visible_to(OWNER))
    assert reloaded is not None
    assert reloaded.document_ids == frozenset()


@pytest.mark.asyncio
async def test_note_repository_applies_note_scope(sqlite_session: AsyncSession) -> None:
    document_id = await _add_document(sqlite_session, access=Access.PUBLIC)
    note = NoteRow(
        document_id=document_id,
        account_id=OWNER.account_id,
        organization_id=OWNER.organization_id,
        title="Private remark",
        access=int(Access.PRIVATE),
    )
    sqlite_session.add(note)
    await sqlite_session.commit()

    documents = SqlDocumentRepository(sqlite_session)
    notes = SqlNoteRepository(sqlite_session)
    document = await documents.find(document_id, documents_visible_to(ANONYMOUS))
    assert document is not None

    assert await notes.find(note.note_id, document, notes_visible_to(ANONYMOUS)) is None
    assert await notes.find(note.note_id, document, notes_visible_to(OWNER)) is not None
    assert [n.title for n in await notes.for_document(document_id)] == ["Private remark"]


@pytest.mark.asyncio
async def test_project_membership_replacement(sqlite_session: AsyncSession) -> None:
    first = await _add_document(sqlite_session, access=Access.PRIVATE)
    second = await _add_document(sqlite_session, access=Access.PRIVATE)
    repo = SqlProjectRepository(sqlite_session)

    project = await repo.create(
        OWNER.account_id, title="Audit", description=None, document_ids={first, 9999}
    )
    assert project.document_ids == {first}

    await repo.set_membership(project.id, {second})
    await repo.set_membership(project.id, {second})

    updated = await repo.update(project.id, {"title": "Audit 2", "account_id": 1})
    assert updated is not None
    assert updated.title == "Audit 2"
    assert updated.account_id == OWNER.account_id
    assert updated.document_ids == {second}

    assert await repo.query(projects_visible_to(ANONYMOUS)) == []
    assert await repo.find(project.id, projects_visible_to(COLLEAGUE)) is None

    await repo.destroy(project.id)
    assert await repo.find(project.id, projects_visible_to(OWNER)) is None


@pytest.mark.asyncio
async def test_sql_search_respects_scope(sqlite_session: AsyncSession) -> None:
    public = await _add_document(sqlite_session, access=Access.PUBLIC, title="Budget hearing")
    await _add_document(sqlite_session, access=Access.PRIVATE, title="Budget draft")
    await _add_document(sqlite_session, access=Access.PUBLIC, title="Weather")
    index = SqlSearchIndex(sqlite_session)

    anonymous = await index.search(SearchQuery(term="budget"), documents_visible_to(ANONYMOUS))
    owner = await index.search(SearchQuery(term="budget"), documents_visible_to(OWNER))

    assert [hit.document.id for hit in anonymous.hits] == [public]
    assert owner.total == 2


@pytest.mark.asyncio
async def test_seed_dev_data_is_idempotent(sqlite_engine: AsyncEngine) -> None:
    await seed_dev_data(sqlite_engine)
    await seed_dev_data(sqlite_engine)

    async with AsyncSession(sqlite_engine) as session:
        count = await session.scalar(select(func.count()).select_from(DocumentRow))

    assert count == len(SAMPLE_DOCUMENTS)
