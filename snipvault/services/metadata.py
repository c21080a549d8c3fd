"""Distinct category and language vocabularies for a scope."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..database.schema import CategoryRow, FragmentRow, SnippetRow
from ..models.metadata import MetadataCounts, SnippetMetadata
from ..models.query import Scope


def _scope_clause(scope: Scope, owner_id: Optional[str]):
    if scope is Scope.PUBLIC:
        return SnippetRow.is_public.is_(True) & SnippetRow.expiry_date.is_(None)
    if owner_id is None:
        raise ValueError("owner scope requires an owner id")
    # Recycled snippets count too: the recycle view filters with the same vocabulary.
    return SnippetRow.user_id == owner_id


def get_metadata(session: Session, scope: Scope, owner_id: Optional[str] = None) -> SnippetMetadata:
    clause = _scope_clause(scope, owner_id)

    categories = session.scalars(
        select(CategoryRow.name)
        .join(SnippetRow, CategoryRow.snippet_id == SnippetRow.id)
        .where(clause)
        .distinct()
        .order_by(CategoryRow.name)
    ).all()

    language = func.lower(FragmentRow.language)
    languages = session.scalars(
        select(language)
        .join(SnippetRow, FragmentRow.snippet_id == SnippetRow.id)
        .where(clause, FragmentRow.language != "")
        .distinct()
        .order_by(language)
    ).all()

    total = session.scalar(select(func.count()).select_from(SnippetRow).where(clause)) or 0

    return SnippetMetadata(
        categories=list(categories),
        languages=list(languages),
        counts=MetadataCounts(total=total),
    )
