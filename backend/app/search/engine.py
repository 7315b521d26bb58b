"""Document search - token matching restricted to a caller's scope."""

from collections import Counter

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.app.access.scope import DocumentScope
from backend.app.db.inmemory import InMemoryStore
from backend.app.db.models import DocumentRow
from backend.app.db.queries import document_scope_clause
from backend.app.db.sql_repositories import to_document
from backend.app.models.documents import Document
from backend.app.models.search import (
    FacetValue,
    Mention,
    SearchHit,
    SearchQuery,
    SearchResult,
)

PAGE_BREAK = "\f"
SNIPPET_RADIUS = 60
FACET_LIMIT = 10


def tokenize(term: str) -> list[str]:
    """Lowercase whitespace tokens of the search term."""
    return [token for token in term.lower().split() if token]


def score_document(document: Document, tokens: list[str]) -> float:
    """Count query tokens appearing in the title, description or text.

    Title matches weigh double.
    """
    if not tokens:
        return 0.0

    title = document.title.lower()
    body = f"{document.description or ''} {document.full_text}".lower()

    score = 0.0
    for token in tokens:
        if token in title:
            score += 2.0
        if token in body:
            score += 1.0
    return score


def extract_mentions(document: Document, tokens: list[str], limit: int) -> list[Mention]:
    """Snippets around the first token match on each page, up to ``limit``."""
    mentions: list[Mention] = []

    for page_number, page_text in enumerate(document.full_text.split(PAGE_BREAK), start=1):
        lowered = page_text.lower()
        positions = [lowered.find(token) for token in tokens if token in lowered]
        if not positions:
            continue

        at = min(positions)
        start = max(0, at - SNIPPET_RADIUS)
        end = min(len(page_text), at + SNIPPET_RADIUS)
        mentions.append(Mention(page=page_number, text=" ".join(page_text[start:end].split())))

        if len(mentions) >= limit:
            break

    return mentions


def build_facets(documents: list[Document]) -> dict[str, list[FacetValue]]:
    """Entity counts by kind across all matching documents."""
    counts: dict[str, Counter[str]] = {}

    for document in documents:
        for entity in document.entities:
            counts.setdefault(entity.kind, Counter())[entity.value] += 1

    return {
        kind: [
            FacetValue(value=value, count=count)
            for value, count in sorted(counter.items(), key=lambda x: (-x[1], x[0]))[:FACET_LIMIT]
        ]
        for kind, counter in sorted(counts.items())
    }


def rank(query: SearchQuery, candidates: list[Document]) -> SearchResult:
    """Score, order and paginate candidate documents.

    Scoring strategy:
    - Empty term matches every candidate, newest first
    - Otherwise drop candidates with score 0
    - Sort by score descending, then newest first, then ID (for determinism)
    """
    tokens = tokenize(query.term)

    scored: list[tuple[Document, float]] = []
    for document in candidates:
        score = score_document(document, tokens)
        if tokens and score == 0:
            continue
        scored.append((document, score))

    scored.sort(key=lambda x: (-x[1], -x[0].created_at.timestamp(), -x[0].id))

    pagination = query.pagination
    window = scored[pagination.offset : pagination.offset + pagination.per_page]

    hits = [
        SearchHit(
            document=document,
            score=score,
            mentions=(
                extract_mentions(document, tokens, query.mentions)
                if query.mentions and tokens
                else None
            ),
        )
        for document, score in window
    ]

    return SearchResult(
        total=len(scored),
        page=pagination.page,
        per_page=pagination.per_page,
        hits=hits,
        facets=build_facets([doc for doc, _ in scored]) if query.include_entities else None,
    )


class InMemorySearchIndex:
    """Search over an InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def search(self, query: SearchQuery, scope: DocumentScope) -> SearchResult:
        """Search documents visible within ``scope``."""
        candidates = [doc for doc in self._store.documents.values() if scope.matches(doc)]
        return rank(query, candidates)


class SqlSearchIndex:
    """Search backed by the documents table.

    The scope clause is applied in the database; scoring runs in Python.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def search(self, query: SearchQuery, scope: DocumentScope) -> SearchResult:
        """Search documents visible within ``scope``."""
        stmt = (
            select(DocumentRow)
            .where(document_scope_clause(scope))
            .options(
                selectinload(DocumentRow.collaborators),
                selectinload(DocumentRow.sections),
                selectinload(DocumentRow.entities),
            )
            .execution_options(populate_existing=True)
        )

        tokens = tokenize(query.term)
        if tokens:
            stmt = stmt.where(
                or_(
                    *(
                        column.ilike(f"%{token}%")
                        for token in tokens
                        for column in (
                            DocumentRow.title,
                            DocumentRow.description,
                            DocumentRow.full_text,
                        )
                    )
                )
            )

        result = await self._session.execute(stmt)
        candidates = [to_document(row) for row in result.scalars().all()]
        return rank(query, candidates)
