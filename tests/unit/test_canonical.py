"""Unit tests for canonical renderings."""

from datetime import datetime

from backend.app.canonical.render import (
    API_OPTIONS,
    FULL_OPTIONS,
    CanonicalOptions,
    render_document,
    render_entities,
    render_note,
    render_project,
    render_search_hit,
    slugify,
)
from backend.app.db.context import ANONYMOUS
from backend.app.models.access import Access
from backend.app.models.documents import Document, Entity, Note, Project, Section
from backend.app.models.search import Mention, SearchHit
from tests.helpers import COLLEAGUE, OWNER

NOW = datetime(2026, 3, 1, 9, 30)
BASE_URL = "https://docs.example.org/"


def _document(**extra: object) -> Document:
    fields: dict[str, object] = {
        "id": 12,
        "account_id": OWNER.account_id,
        "organization_id": OWNER.organization_id,
        "access": Access.PUBLIC,
        "title": "City Budget: 2026 Draft!",
        "page_count": 4,
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(extra)
    return Document(**fields)


def _note(note_id: int, page: int, access: Access | None) -> Note:
    return Note(
        id=note_id,
        document_id=12,
        account_id=OWNER.account_id,
        organization_id=OWNER.organization_id,
        page=page,
        title=f"Note {note_id}",
        access=access,
        created_at=NOW,
    )


def test_slugify() -> None:
    assert slugify("City Budget: 2026 Draft!") == "city-budget-2026-draft"
    assert slugify("!!!") == "untitled"


def test_minimal_options_omit_nested_parts() -> None:
    data = render_document(_document(), CanonicalOptions(), caller=ANONYMOUS, base_url=BASE_URL)

    assert data["id"] == 12
    assert data["pages"] == 4
    assert "access" not in data
    assert "sections" not in data
    assert "annotations" not in data
    assert "contributor" not in data
    assert data["canonical_url"] == (
        "https://docs.example.org/documents/12-city-budget-2026-draft.html"
    )
    assert data["resources"] == {
        "text": "https://docs.example.org/documents/12-city-budget-2026-draft.txt"
    }


def test_full_options_render_sections_and_contributor() -> None:
    document = _document(
        sections=[Section(title="Revenue", page=3), Section(title="Summary", page=1)],
        related_article="https://news.example.org/budget",
    )

    data = render_document(document, FULL_OPTIONS, caller=ANONYMOUS, base_url=BASE_URL)

    assert data["access"] == "public"
    assert data["sections"] == [
        {"title": "Summary", "page": 1},
        {"title": "Revenue", "page": 3},
    ]
    assert data["contributor"] == {"account_id": OWNER.account_id, "organization_id": 1}
    assert data["resources"]["related_article"] == "https://news.example.org/budget"
    assert data["annotations"] == []


def test_annotations_filtered_by_note_visibility() -> None:
    document = _document()
    notes = [_note(2, 5, Access.PRIVATE), _note(1, 2, None), _note(3, 1, Access.PUBLIC)]

    anonymous = render_document(
        document, FULL_OPTIONS, caller=ANONYMOUS, base_url=BASE_URL, notes=notes
    )
    owner = render_document(document, FULL_OPTIONS, caller=OWNER, base_url=BASE_URL, notes=notes)

    assert [n["id"] for n in anonymous["annotations"]] == [3, 1]
    assert [n["id"] for n in owner["annotations"]] == [3, 1, 2]


def test_collaborator_ids_only_for_writers() -> None:
    document = _document(collaborator_ids=frozenset({30, 31}))

    as_owner = render_document(document, FULL_OPTIONS, caller=OWNER, base_url=BASE_URL)
    as_colleague = render_document(document, FULL_OPTIONS, caller=COLLEAGUE, base_url=BASE_URL)

    assert as_owner["collaborator_ids"] == [30, 31]
    assert "collaborator_ids" not in as_colleague


def test_render_note_reports_effective_access() -> None:
    document = _document(access=Access.ORGANIZATION)

    assert render_note(_note(1, 1, None), document)["access"] == "organization"
    assert render_note(_note(2, 1, Access.PRIVATE), document)["access"] == "private"


def test_render_search_hit_adds_mentions() -> None:
    hit = SearchHit(
        document=_document(),
        score=3.0,
        mentions=[Mention(page=2, text="the budget vote")],
    )

    data = render_search_hit(hit, caller=ANONYMOUS, base_url=BASE_URL)

    assert data["mentions"] == [{"page": 2, "text": "the budget vote"}]
    assert data["access"] == "public"
    assert "sections" not in data
    assert API_OPTIONS.contributor


def test_render_search_hit_without_mentions() -> None:
    data = render_search_hit(
        SearchHit(document=_document(), score=1.0), caller=ANONYMOUS, base_url=BASE_URL
    )
    assert "mentions" not in data


def test_render_project_sorts_document_ids() -> None:
    project = Project(
        id=4,
        account_id=OWNER.account_id,
        title="Audit",
        document_ids=frozenset({9, 2, 5}),
        created_at=NOW,
    )

    assert render_project(project) == {
        "id": 4,
        "title": "Audit",
        "description": None,
        "document_ids": [2, 5, 9],
    }


def test_render_entities_grouped_by_kind() -> None:
    document = _document(
        entities=[
            Entity(kind="person", value="Ada", relevance=0.2),
            Entity(kind="place", value="Springfield", relevance=0.9),
            Entity(kind="person", value="Grace", relevance=0.8),
        ]
    )

    assert render_entities(document) == {
        "person": [
            {"value": "Grace", "relevance": 0.8},
            {"value": "Ada", "relevance": 0.2},
        ],
        "place": [{"value": "Springfield", "relevance": 0.9}],
    }
