"""Unit tests for search parameter normalization."""

import pytest
from pydantic import ValidationError

from backend.app.models.search import Pagination, SearchQuery, clamp_mentions


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, None),
        (0, None),
        (-3, None),
        (1, 1),
        (5, 5),
        (10, 10),
        (15, 10),
    ],
)
def test_clamp_mentions(raw: int | None, expected: int | None) -> None:
    assert clamp_mentions(raw) == expected


def test_pagination_offset() -> None:
    assert Pagination(page=1, per_page=10).offset == 0
    assert Pagination(page=3, per_page=25).offset == 50


def test_pagination_rejects_zero_page() -> None:
    with pytest.raises(ValidationError):
        Pagination(page=0, per_page=10)


def test_search_query_rejects_unclamped_mentions() -> None:
    """Callers must clamp before building the query."""
    with pytest.raises(ValidationError):
        SearchQuery(term="budget", mentions=11)


def test_search_query_defaults() -> None:
    query = SearchQuery()

    assert query.term == ""
    assert query.pagination.page == 1
    assert query.mentions is None
    assert not query.include_entities
