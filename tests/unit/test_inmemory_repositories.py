"""Unit tests for the in-memory document repository."""

import pytest
from pydantic import ValidationError

from backend.app.db.inmemory import InMemoryDocumentRepository, InMemoryStore
from backend.app.models.access import Access
from backend.app.models.documents import Document
from tests.helpers import BASE_TIME, OWNER


def _store_with_document() -> tuple[InMemoryStore, Document]:
    store = InMemoryStore()
    document = store.add_document(
        Document(
            id=store.next_document_id(),
            account_id=OWNER.account_id,
            organization_id=OWNER.organization_id,
            access=Access.PUBLIC,
            title="Original",
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        )
    )
    return store, document


@pytest.mark.asyncio
async def test_secure_update_validates_values() -> None:
    store, document = _store_with_document()
    repo = InMemoryDocumentRepository(store)

    with pytest.raises(ValidationError):
        await repo.secure_update(document.id, {"title": 123}, OWNER)

    assert store.documents[document.id] == document


@pytest.mark.asyncio
async def test_secure_update_applies_whitelisted_fields() -> None:
    store, document = _store_with_document()
    repo = InMemoryDocumentRepository(store)

    outcome = await repo.secure_update(
        document.id, {"title": "Renamed", "account_id": 99, "access": Access.PRIVATE}, OWNER
    )

    assert outcome.applied
    assert outcome.document is not None
    assert outcome.document.title == "Renamed"
    assert outcome.document.account_id == OWNER.account_id
    assert outcome.document.access is Access.PRIVATE
