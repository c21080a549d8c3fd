"""Request dependencies."""

from typing import Optional

from fastapi import HTTPException, Query, Request

from ..config import settings
from ..models.query import FilterSpec
from ..services.pagination import parse_window


def get_owner_id(request: Request) -> str:
    """Owner identity as established by the upstream authentication layer."""
    owner_id = request.headers.get(settings.owner_header, "").strip()
    if not owner_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return owner_id


def get_filter_spec(
    search: Optional[str] = None,
    search_code: Optional[str] = Query(None, alias="searchCode"),
    language: Optional[str] = None,
    category: Optional[str] = Query(None, description="Comma-separated; every category must match"),
    favorites: Optional[str] = None,
    pinned: Optional[str] = None,
    recycled: Optional[str] = None,
    sort: Optional[str] = Query(None, description="newest, oldest, alpha-asc or alpha-desc"),
) -> FilterSpec:
    # Values stay strings: unknown sorts and non-"true" flags fall back to defaults.
    return FilterSpec.from_query_params({
        "search": search,
        "searchCode": search_code,
        "language": language,
        "category": category,
        "favorites": favorites,
        "pinned": pinned,
        "recycled": recycled,
        "sort": sort,
    })


def get_window(offset: Optional[str] = None, limit: Optional[str] = None) -> tuple[int, int]:
    """Offset and limit, clamped rather than rejected."""
    return parse_window(offset, limit)
