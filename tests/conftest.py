"""Shared pytest fixtures for all test suites."""

import os
from collections.abc import AsyncGenerator, Callable, Iterator
from datetime import timedelta
from typing import Any

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from backend.app.api.deps import get_collaborators
from backend.app.db.inmemory import InMemoryStore, build_inmemory_collaborators
from backend.app.db.models import Account, Base, Organization
from backend.app.db.repositories import Collaborators
from backend.app.main import app
from backend.app.models.access import Access
from backend.app.models.documents import Document, Note
from tests.helpers import BASE_TIME, COLLEAGUE, OUTSIDER, OWNER


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def collaborators(store: InMemoryStore) -> Collaborators:
    return build_inmemory_collaborators(store)


@pytest.fixture
def make_document(store: InMemoryStore) -> Callable[..., Document]:
    """Insert documents directly into the store, oldest first."""

    def _make(**overrides: Any) -> Document:
        document_id = store.next_document_id()
        created = BASE_TIME + timedelta(minutes=document_id)
        fields: dict[str, Any] = {
            "id": document_id,
            "account_id": OWNER.account_id,
            "organization_id": OWNER.organization_id,
            "access": Access.PRIVATE,
            "title": f"Document {document_id}",
            "created_at": created,
            "updated_at": created,
        }
        fields.update(overrides)
        return store.add_document(Document(**fields))

    return _make


@pytest.fixture
def make_note(store: InMemoryStore) -> Callable[..., Note]:
    def _make(document: Document, **overrides: Any) -> Note:
        fields: dict[str, Any] = {
            "id": store.next_note_id(),
            "document_id": document.id,
            "account_id": document.account_id,
            "organization_id": document.organization_id,
            "title": "Note",
            "created_at": BASE_TIME,
        }
        fields.update(overrides)
        return store.add_note(Note(**fields))

    return _make


@pytest.fixture
def client(collaborators: Collaborators) -> Iterator[TestClient]:
    """Test client wired to the in-memory collaborators."""
    app.dependency_overrides[get_collaborators] = lambda: collaborators
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Single-connection in-memory SQLite engine with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


async def _seed_accounts(session: AsyncSession) -> None:
    session.add_all(
        [
            Organization(organization_id=1, name="Newsroom"),
            Organization(organization_id=2, name="Other Desk"),
        ]
    )
    session.add_all(
        [
            Account(
                account_id=c.account_id,
                organization_id=c.organization_id,
                email=f"{c.account_id}@example.com",
            )
            for c in (OWNER, COLLEAGUE, OUTSIDER)
        ]
    )
    await session.commit()


@pytest_asyncio.fixture
async def sqlite_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Session over the SQLite engine with the test organizations and accounts seeded."""
    factory = async_sessionmaker(bind=sqlite_engine, expire_on_commit=False)

    async with factory() as session:
        await _seed_accounts(session)
        yield session


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_session(
    postgres_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(bind=postgres_engine, expire_on_commit=False)

    async with factory() as session:
        await _seed_accounts(session)
        yield session
