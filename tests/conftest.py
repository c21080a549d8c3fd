"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from snipvault.app import create_app
from snipvault.database.schema import CategoryRow, FragmentRow, SnippetRow
from snipvault.database.session import get_engine

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = get_engine("sqlite:///:memory:")
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def add_snippet(session):
    """Insert a snippet row directly; returns the row."""
    counter = {"n": 0}

    def _add(
        title="snippet",
        owner="alice",
        description="",
        fragments=None,
        categories=(),
        updated_at=None,
        expiry_date=None,
        is_public=False,
        is_pinned=False,
        is_favorite=False,
    ):
        counter["n"] += 1
        if fragments is None:
            fragments = [{"file_name": "main.py", "code": "print('hi')", "language": "python"}]
        row = SnippetRow(
            user_id=owner,
            title=title,
            description=description,
            updated_at=updated_at or BASE_TIME + timedelta(minutes=counter["n"]),
            expiry_date=expiry_date,
            is_public=is_public,
            is_pinned=is_pinned,
            is_favorite=is_favorite,
        )
        row.fragments = [FragmentRow(position=i, **f) for i, f in enumerate(fragments)]
        row.categories = [CategoryRow(name=name) for name in categories]
        session.add(row)
        session.commit()
        return row

    return _add


@pytest.fixture
def app():
    return create_app("sqlite:///:memory:")


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def alice():
    return {"X-Owner-Id": "alice"}


@pytest.fixture
def bob():
    return {"X-Owner-Id": "bob"}


def snippet_body(title="hello", **overrides):
    body = {
        "title": title,
        "description": "",
        "is_public": False,
        "categories": [],
        "fragments": [{"file_name": "hello.py", "code": "print('hello')", "language": "python"}],
    }
    body.update(overrides)
    return body


def make_record(snippet_id, title=None, minutes=0, **overrides):
    from snipvault.models.snippet import Fragment, Snippet

    data = {
        "id": snippet_id,
        "user_id": "alice",
        "title": title or f"snippet {snippet_id}",
        "updated_at": BASE_TIME + timedelta(minutes=minutes),
        "fragments": [Fragment(id=1, file_name="main.py", code="pass", language="python")],
    }
    data.update(overrides)
    return Snippet(**data)


def make_page(records, offset=0, limit=50, total=None):
    from snipvault.models.query import PageResult, Pagination

    total = len(records) + offset if total is None else total
    return PageResult(data=list(records), pagination=Pagination.build(offset, limit, total))
