"""Snippet persistence and lifecycle orchestration."""

import logging
from typing import Optional

from sqlalchemy.orm import selectinload

from ..config import settings
from ..database.schema import SnippetRow
from ..database.session import get_session_factory
from ..errors import SnippetNotFoundError
from ..models.metadata import SnippetMetadata
from ..models.query import FilterSpec, PageResult, Scope
from ..models.snippet import Snippet, SnippetIn
from ..utils.time import utc_now
from . import lifecycle
from .metadata import get_metadata
from .pagination import paginate
from .query_compiler import compile_query
from .rows import apply_snippet_fields, snippet_from_row

logger = logging.getLogger(__name__)


class SnippetManager:
    def __init__(self, database_url: Optional[str] = None):
        self._database_url = database_url
        self._session_factory = None

    def configure(self, database_url: str) -> None:
        """Point the manager at a database; the engine is built lazily."""
        self._database_url = database_url
        self._session_factory = None

    def _session(self):
        if self._session_factory is None:
            self._session_factory = get_session_factory(self._database_url or settings.database_url)
        return self._session_factory()

    # -- reads --------------------------------------------------------------

    def list_snippets(
        self,
        scope: Scope,
        spec: FilterSpec,
        owner_id: Optional[str],
        offset: int,
        limit: int,
    ) -> PageResult:
        compiled = compile_query(scope, spec, owner_id)
        with self._session() as session:
            return paginate(session, compiled, offset, limit)

    def get_snippet(self, snippet_id: int, owner_id: Optional[str] = None) -> Snippet:
        """Owner lookup when ``owner_id`` is given, otherwise public-only."""
        with self._session() as session:
            row = session.get(
                SnippetRow,
                snippet_id,
                options=[selectinload(SnippetRow.fragments), selectinload(SnippetRow.categories)],
            )
            if row is None:
                raise SnippetNotFoundError(snippet_id)
            if owner_id is not None and row.user_id != owner_id:
                raise SnippetNotFoundError(snippet_id)
            if owner_id is None and (not row.is_public or row.expiry_date is not None):
                raise SnippetNotFoundError(snippet_id)
            return snippet_from_row(row)

    def get_fragment_code(self, snippet_id: int, fragment_id: int, owner_id: Optional[str] = None) -> str:
        snippet = self.get_snippet(snippet_id, owner_id)
        fragment = next((f for f in snippet.fragments if f.id == fragment_id), None)
        if fragment is None:
            raise SnippetNotFoundError(snippet_id, "Fragment not found")
        # Shell scripts break on carriage returns.
        return fragment.code.replace("\r\n", "\n").replace("\r", "\n")

    def metadata(self, scope: Scope, owner_id: Optional[str] = None) -> SnippetMetadata:
        with self._session() as session:
            return get_metadata(session, scope, owner_id)

    # -- writes -------------------------------------------------------------

    def create_snippet(self, body: SnippetIn, owner_id: str) -> Snippet:
        with self._session() as session:
            row = SnippetRow(
                user_id=owner_id,
                updated_at=utc_now(),
                expiry_date=None,
                is_pinned=body.is_pinned,
                is_favorite=body.is_favorite,
            )
            apply_snippet_fields(row, body)
            session.add(row)
            session.commit()
            logger.info(f"Created snippet {row.id} for owner {owner_id}")
            return snippet_from_row(row)

    def update_snippet(self, snippet_id: int, body: SnippetIn, owner_id: str) -> Snippet:
        """Replace title, description, visibility, tags and fragments.

        Pin and favorite flags have their own endpoints and are left alone.
        """
        with self._session() as session:
            row = lifecycle.load_owned(session, snippet_id, owner_id)
            apply_snippet_fields(row, body)
            row.updated_at = utc_now()
            session.commit()
            logger.info(f"Updated snippet {snippet_id}")
            return snippet_from_row(row)

    def set_pinned(self, snippet_id: int, is_pinned: bool, owner_id: str) -> Snippet:
        with self._session() as session:
            row = lifecycle.load_owned(session, snippet_id, owner_id)
            row.is_pinned = is_pinned
            session.commit()
            return snippet_from_row(row)

    def set_favorite(self, snippet_id: int, is_favorite: bool, owner_id: str) -> Snippet:
        with self._session() as session:
            row = lifecycle.load_owned(session, snippet_id, owner_id)
            row.is_favorite = is_favorite
            session.commit()
            return snippet_from_row(row)

    def move_to_recycle(self, snippet_id: int, owner_id: str) -> int:
        with self._session() as session:
            return lifecycle.move_to_recycle(session, snippet_id, owner_id)

    def restore(self, snippet_id: int, owner_id: str) -> int:
        with self._session() as session:
            return lifecycle.restore(session, snippet_id, owner_id)

    def purge(self, snippet_id: int, owner_id: str) -> int:
        with self._session() as session:
            return lifecycle.purge(session, snippet_id, owner_id)

    def purge_expired(self) -> list[int]:
        with self._session() as session:
            return lifecycle.purge_expired(session)


# Singleton
snippet_manager = SnippetManager()
