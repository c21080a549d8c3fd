"""Conversion between ORM rows and API models."""

from ..database.schema import CategoryRow, FragmentRow, SnippetRow
from ..models.snippet import Fragment, Snippet, SnippetIn
from ..utils.time import as_utc


def snippet_from_row(row: SnippetRow) -> Snippet:
    return Snippet(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description or "",
        updated_at=as_utc(row.updated_at),
        expiry_date=as_utc(row.expiry_date),
        is_public=bool(row.is_public),
        is_pinned=bool(row.is_pinned),
        is_favorite=bool(row.is_favorite),
        categories=sorted(c.name for c in row.categories),
        fragments=[
            Fragment(
                id=f.id,
                file_name=f.file_name,
                code=f.code,
                language=f.language,
                position=f.position,
            )
            for f in row.fragments
        ],
    )


def apply_snippet_fields(row: SnippetRow, body: SnippetIn) -> None:
    """Full replace of the editable fields, fragments and categories included."""
    row.title = body.title
    row.description = body.description
    row.is_public = body.is_public
    row.categories = [CategoryRow(name=name) for name in body.categories]
    row.fragments = [
        FragmentRow(
            file_name=f.file_name,
            code=f.code,
            language=f.language.strip().lower(),
            position=f.position if f.position is not None else index,
        )
        for index, f in enumerate(body.fragments)
    ]
