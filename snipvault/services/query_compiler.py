"""Turn a FilterSpec into a SQLAlchemy predicate and ordering.

Every populated filter field contributes one bound clause to a
``ClauseBuilder``; the clauses are joined with AND. User input only ever
reaches SQL as bound parameters.
"""

import logging
from typing import NamedTuple, Optional

from sqlalchemy import and_, func, or_, true

from ..database.schema import CategoryRow, FragmentRow, SnippetRow
from ..models.query import FilterSpec, Scope, SortKey

logger = logging.getLogger(__name__)


class CompiledQuery(NamedTuple):
    where: object
    order_by: list


class ClauseBuilder:
    def __init__(self):
        self._clauses = []

    def add(self, clause) -> "ClauseBuilder":
        self._clauses.append(clause)
        return self

    def __len__(self) -> int:
        return len(self._clauses)

    def build(self):
        return and_(true(), *self._clauses)


def compile_query(scope: Scope, spec: FilterSpec, owner_id: Optional[str] = None) -> CompiledQuery:
    spec = spec.for_scope(scope)
    builder = ClauseBuilder()

    if scope is Scope.PUBLIC:
        builder.add(SnippetRow.is_public.is_(True))
        builder.add(SnippetRow.expiry_date.is_(None))
    else:
        if owner_id is None:
            raise ValueError("owner scope requires an owner id")
        builder.add(SnippetRow.user_id == owner_id)
        if spec.recycled:
            builder.add(SnippetRow.expiry_date.is_not(None))
        else:
            builder.add(SnippetRow.expiry_date.is_(None))

    # A snippet without fragments is not listable.
    builder.add(SnippetRow.fragments.any())

    if spec.search:
        term = spec.search
        fragment_fields = [FragmentRow.file_name.icontains(term, autoescape=True)]
        if spec.search_code:
            fragment_fields.append(FragmentRow.code.icontains(term, autoescape=True))
        builder.add(or_(
            SnippetRow.title.icontains(term, autoescape=True),
            SnippetRow.description.icontains(term, autoescape=True),
            SnippetRow.fragments.any(or_(*fragment_fields)),
        ))

    if spec.language:
        builder.add(SnippetRow.fragments.any(func.lower(FragmentRow.language) == spec.language))

    # Conjunctive: one EXISTS per requested tag.
    for name in spec.categories:
        builder.add(SnippetRow.categories.any(CategoryRow.name == name))

    if spec.favorites:
        builder.add(SnippetRow.is_favorite.is_(True))
    if spec.pinned:
        builder.add(SnippetRow.is_pinned.is_(True))

    logger.debug(f"Compiled {scope.value} query with {len(builder)} clauses, sort={spec.sort.value}")
    return CompiledQuery(where=builder.build(), order_by=order_by_for(spec.sort))


def order_by_for(sort: SortKey) -> list:
    """Total order: the sort column, then id ascending."""
    if sort is SortKey.OLDEST:
        primary = SnippetRow.updated_at.asc()
    elif sort is SortKey.ALPHA_ASC:
        primary = SnippetRow.title.collate("NOCASE").asc()
    elif sort is SortKey.ALPHA_DESC:
        primary = SnippetRow.title.collate("NOCASE").desc()
    else:
        primary = SnippetRow.updated_at.desc()
    return [primary, SnippetRow.id.asc()]
