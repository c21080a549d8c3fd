"""Bounded page fetch plus an independent total count."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..database.schema import SnippetRow
from ..models.query import PageResult, Pagination
from .query_compiler import CompiledQuery
from .rows import snippet_from_row


def clamp_window(offset: int, limit: int, max_limit: Optional[int] = None) -> tuple[int, int]:
    max_limit = settings.max_limit if max_limit is None else max_limit
    return max(0, offset), min(max(1, limit), max_limit)


def parse_window(offset: Optional[str], limit: Optional[str]) -> tuple[int, int]:
    """Parse raw query values; garbage falls back to defaults, never an error."""
    return clamp_window(_to_int(offset, 0), _to_int(limit, settings.default_limit))


def _to_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def paginate(session: Session, compiled: CompiledQuery, offset: int, limit: int) -> PageResult:
    """Run the page read and the count read.

    The two reads are not wrapped in one transaction, so a concurrent write
    can leave ``total`` out of step with ``data``.
    """
    offset, limit = clamp_window(offset, limit)

    page_stmt = (
        select(SnippetRow)
        .where(compiled.where)
        .order_by(*compiled.order_by)
        .offset(offset)
        .limit(limit)
        .options(selectinload(SnippetRow.fragments), selectinload(SnippetRow.categories))
    )
    rows = session.scalars(page_stmt).all()

    count_stmt = select(func.count()).select_from(SnippetRow).where(compiled.where)
    total = session.scalar(count_stmt) or 0

    return PageResult(
        data=[snippet_from_row(row) for row in rows],
        pagination=Pagination.build(offset, limit, total),
    )
