"""Tests for the pagination executor and window clamping."""

import pytest

from snipvault.models.query import FilterSpec, Pagination, Scope
from snipvault.services.pagination import clamp_window, paginate, parse_window
from snipvault.services.query_compiler import compile_query


@pytest.fixture
def hundred_twenty(session, add_snippet):
    for i in range(120):
        add_snippet(f"snippet {i:03d}")
    return compile_query(Scope.OWNER, FilterSpec(), "alice")


def test_first_page_of_120(session, hundred_twenty):
    page = paginate(session, hundred_twenty, offset=0, limit=50)

    assert len(page.data) == 50
    assert page.pagination.total == 120
    assert page.pagination.has_more is True
    assert page.data[0].title == "snippet 119"


def test_last_partial_page_of_120(session, hundred_twenty):
    page = paginate(session, hundred_twenty, offset=100, limit=50)

    assert len(page.data) == 20
    assert page.pagination.total == 120
    assert page.pagination.has_more is False


def test_offset_past_end_returns_empty_page(session, hundred_twenty):
    page = paginate(session, hundred_twenty, offset=500, limit=50)

    assert page.data == []
    assert page.pagination.total == 120
    assert page.pagination.has_more is False


def test_pages_do_not_overlap(session, hundred_twenty):
    seen = []
    for offset in (0, 50, 100):
        seen.extend(s.id for s in paginate(session, hundred_twenty, offset, 50).data)
    assert len(seen) == len(set(seen)) == 120


def test_limit_is_clamped_not_rejected(session, hundred_twenty):
    assert paginate(session, hundred_twenty, 0, 1000).pagination.limit == 100
    assert len(paginate(session, hundred_twenty, 0, 0).data) == 1
    assert paginate(session, hundred_twenty, -5, 10).pagination.offset == 0


@pytest.mark.parametrize("offset, limit, total", [(0, 50, 0), (0, 50, 50), (0, 50, 51), (40, 10, 50), (45, 10, 50)])
def test_has_more_arithmetic(offset, limit, total):
    assert Pagination.build(offset, limit, total).has_more == (offset + limit < total)


def test_has_more_serializes_camel_case():
    dumped = Pagination.build(0, 50, 120).model_dump(by_alias=True)
    assert dumped == {"total": 120, "offset": 0, "limit": 50, "hasMore": True}


def test_clamp_window():
    assert clamp_window(-1, 0) == (0, 1)
    assert clamp_window(10, 101) == (10, 100)


def test_parse_window_defaults_garbage():
    assert parse_window(None, None) == (0, 50)
    assert parse_window("abc", "xyz") == (0, 50)
    assert parse_window("20", "500") == (20, 100)
    assert parse_window("-3", "-3") == (0, 1)
