"""Filter specification, sort keys and page results.

``FilterSpec`` is immutable. Every toggle returns a new value so the same
spec can be rebuilt from, and written back to, a query string without any
shared mutable state.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .snippet import Snippet


class SortKey(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    ALPHA_ASC = "alpha-asc"
    ALPHA_DESC = "alpha-desc"

    @classmethod
    def parse(cls, value) -> "SortKey":
        """Unknown or empty keys fall back to NEWEST."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.NEWEST


class Scope(str, Enum):
    OWNER = "owner"
    PUBLIC = "public"


def _flag(value: Optional[str]) -> bool:
    return value == "true"


class FilterSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: str = ""
    search_code: bool = False
    language: Optional[str] = None
    categories: tuple[str, ...] = ()
    favorites: bool = False
    pinned: bool = False
    recycled: bool = False
    sort: SortKey = SortKey.NEWEST

    @field_validator("search", mode="before")
    @classmethod
    def _normalize_search(cls, value):
        return (value or "").strip()

    @field_validator("language", mode="before")
    @classmethod
    def _normalize_language(cls, value):
        value = (value or "").strip().lower()
        return value or None

    @field_validator("categories", mode="before")
    @classmethod
    def _normalize_categories(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        names = {c.strip().lower() for c in value}
        names.discard("")
        return tuple(sorted(names))

    @field_validator("sort", mode="before")
    @classmethod
    def _normalize_sort(cls, value):
        return SortKey.parse(value)

    # -- query string round trip -------------------------------------------

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "FilterSpec":
        return cls(
            search=params.get("search"),
            search_code=_flag(params.get("searchCode")),
            language=params.get("language"),
            categories=params.get("category"),
            favorites=_flag(params.get("favorites")),
            pinned=_flag(params.get("pinned")),
            recycled=_flag(params.get("recycled")),
            sort=params.get("sort"),
        )

    def to_query_params(self) -> dict[str, str]:
        """Only non-default fields are written, like a clean address bar."""
        params: dict[str, str] = {}
        if self.search:
            params["search"] = self.search
        if self.search_code:
            params["searchCode"] = "true"
        if self.language:
            params["language"] = self.language
        if self.categories:
            params["category"] = ",".join(self.categories)
        if self.favorites:
            params["favorites"] = "true"
        if self.pinned:
            params["pinned"] = "true"
        if self.recycled:
            params["recycled"] = "true"
        if self.sort is not SortKey.NEWEST:
            params["sort"] = self.sort.value
        return params

    # -- pure updates -------------------------------------------------------

    def _replace(self, **changes) -> "FilterSpec":
        data = self.model_dump()
        data.update(changes)
        return FilterSpec.model_validate(data)

    def with_search(self, search: str) -> "FilterSpec":
        return self._replace(search=search)

    def with_search_code(self, search_code: bool) -> "FilterSpec":
        return self._replace(search_code=search_code)

    def with_language(self, language: Optional[str]) -> "FilterSpec":
        return self._replace(language=language)

    def with_categories(self, categories) -> "FilterSpec":
        return self._replace(categories=categories)

    def toggle_category(self, category: str) -> "FilterSpec":
        name = category.strip().lower()
        if name in self.categories:
            return self._replace(categories=[c for c in self.categories if c != name])
        return self._replace(categories=[*self.categories, name])

    def with_sort(self, sort) -> "FilterSpec":
        return self._replace(sort=sort)

    def with_favorites(self, favorites: bool) -> "FilterSpec":
        return self._replace(favorites=favorites)

    def cleared(self) -> "FilterSpec":
        """Drop every user filter; which bin is being viewed is kept."""
        return FilterSpec(recycled=self.recycled)

    # -- scope and identity -------------------------------------------------

    def for_scope(self, scope: Scope) -> "FilterSpec":
        """The public scope has no favorites, pins or recycle bin."""
        if scope is Scope.PUBLIC:
            return self._replace(favorites=False, pinned=False, recycled=False)
        return self

    def signature(self, scope: Scope) -> str:
        """Canonical cache key for (scope, filters, sort)."""
        payload = self.for_scope(scope).model_dump(mode="json")
        payload["scope"] = scope.value
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    # -- in-memory mirror of the SQL predicate ------------------------------

    def matches(self, snippet: Snippet, scope: Scope = Scope.OWNER, owner_id: Optional[str] = None) -> bool:
        spec = self.for_scope(scope)
        if not snippet.fragments:
            return False
        if scope is Scope.PUBLIC:
            if not snippet.is_public:
                return False
        elif owner_id is not None and snippet.user_id is not None and snippet.user_id != owner_id:
            return False

        if spec.recycled != snippet.is_recycled:
            return False
        if spec.favorites and not snippet.is_favorite:
            return False
        if spec.pinned and not snippet.is_pinned:
            return False
        if spec.language and not any(f.language.lower() == spec.language for f in snippet.fragments):
            return False
        if spec.categories and not set(spec.categories).issubset(snippet.categories):
            return False
        if spec.search:
            term = spec.search.lower()
            haystacks = [snippet.title, snippet.description]
            haystacks.extend(f.file_name for f in snippet.fragments)
            if spec.search_code:
                haystacks.extend(f.code for f in snippet.fragments)
            if not any(term in (h or "").lower() for h in haystacks):
                return False
        return True

    def sort_key(self, snippet: Snippet) -> tuple:
        """Key under which ``sorted()`` reproduces the SQL ordering."""
        # Placeholder ids ("temp-...") sort after every persisted id.
        id_key = (0, snippet.id, "") if isinstance(snippet.id, int) else (1, 0, str(snippet.id))
        if self.sort is SortKey.OLDEST:
            return (_timestamp(snippet.updated_at), id_key)
        if self.sort is SortKey.ALPHA_ASC:
            return (snippet.title.lower(), id_key)
        if self.sort is SortKey.ALPHA_DESC:
            return (_Descending(snippet.title.lower()), id_key)
        return (-_timestamp(snippet.updated_at), id_key)


def _timestamp(dt: datetime) -> float:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


class _Descending:
    """Inverts comparison so a string can sort descending inside a tuple key."""

    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __lt__(self, other: "_Descending") -> bool:
        return self.value > other.value

    def __eq__(self, other) -> bool:
        return isinstance(other, _Descending) and self.value == other.value


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    offset: int
    limit: int
    has_more: bool = Field(alias="hasMore")

    @classmethod
    def build(cls, offset: int, limit: int, total: int) -> "Pagination":
        return cls(total=total, offset=offset, limit=limit, has_more=offset + limit < total)


class PageResult(BaseModel):
    data: list[Snippet] = Field(default_factory=list)
    pagination: Pagination
