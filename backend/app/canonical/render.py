"""Canonical JSON renderings of documents, notes, projects and entities.

Option flags widen what is presentable; they never widen what the caller is
entitled to see. Nested notes pass through ``note_visible_to`` and editor-only
fields through ``can_write`` regardless of the options requested.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from backend.app.access.policy import can_write
from backend.app.access.scope import note_visible_to
from backend.app.db.context import Caller
from backend.app.models.documents import Document, Note, Project
from backend.app.models.search import SearchHit

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class CanonicalOptions:
    """Which nested parts of a document to render."""

    access: bool = False
    sections: bool = False
    annotations: bool = False
    contributor: bool = False


# Search hits: summaries without nested structure
API_OPTIONS = CanonicalOptions(access=True, contributor=True)

# Direct fetch, update and upload responses
FULL_OPTIONS = CanonicalOptions(access=True, sections=True, annotations=True, contributor=True)


def slugify(title: str) -> str:
    slug = _SLUG_STRIP.sub("-", title.lower()).strip("-")
    return slug or "untitled"


def render_document(
    document: Document,
    options: CanonicalOptions,
    *,
    caller: Caller,
    base_url: str,
    notes: Iterable[Note] = (),
) -> dict[str, Any]:
    """Render a document under ``options`` for ``caller``."""
    base_url = base_url.rstrip("/")
    doc_url = f"{base_url}/documents/{document.id}-{slugify(document.title)}"

    data: dict[str, Any] = {
        "id": document.id,
        "title": document.title,
    }

    if options.access:
        data["access"] = document.access.symbol

    data.update(
        {
            "pages": document.page_count,
            "description": document.description,
            "language": document.language,
            "source": document.source,
            "created_at": document.created_at.isoformat(),
            "updated_at": document.updated_at.isoformat(),
            "canonical_url": f"{doc_url}.html",
        }
    )

    resources: dict[str, Any] = {"text": f"{doc_url}.txt"}
    if document.related_article:
        resources["related_article"] = document.related_article
    if document.published_url:
        resources["published_url"] = document.published_url
    data["resources"] = resources

    if options.access and can_write(caller, document):
        data["collaborator_ids"] = sorted(document.collaborator_ids)

    if options.contributor:
        data["contributor"] = {
            "account_id": document.account_id,
            "organization_id": document.organization_id,
        }

    if options.sections:
        data["sections"] = [
            {"title": section.title, "page": section.page}
            for section in sorted(document.sections, key=lambda s: (s.page, s.title))
        ]

    if options.annotations:
        visible = [n for n in notes if note_visible_to(caller, n, document)]
        data["annotations"] = [
            render_note(note, document) for note in sorted(visible, key=lambda n: (n.page, n.id))
        ]

    return data


def render_note(note: Note, document: Document) -> dict[str, Any]:
    """Render a note; inherited access is reported as the document's level."""
    access = note.access if note.access is not None else document.access
    return {
        "id": note.id,
        "document_id": note.document_id,
        "page": note.page,
        "title": note.title,
        "content": note.content,
        "access": access.symbol,
        "created_at": note.created_at.isoformat(),
    }


def render_search_hit(
    hit: SearchHit, *, caller: Caller, base_url: str, options: CanonicalOptions = API_OPTIONS
) -> dict[str, Any]:
    data = render_document(hit.document, options, caller=caller, base_url=base_url)
    if hit.mentions is not None:
        data["mentions"] = [mention.model_dump() for mention in hit.mentions]
    return data


def render_project(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "document_ids": sorted(project.document_ids),
    }


def render_entities(document: Document) -> dict[str, list[dict[str, Any]]]:
    """Entities grouped by kind, most relevant first."""
    grouped: dict[str, list[dict[str, Any]]] = {}

    for entity in sorted(document.entities, key=lambda e: (e.kind, -e.relevance, e.value)):
        grouped.setdefault(entity.kind, []).append(
            {"value": entity.value, "relevance": entity.relevance}
        )

    return grouped
