"""Snippet record models."""

from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel, Field, field_validator

from ..config import settings


def normalize_categories(categories: list[str], cap: Optional[int] = None) -> list[str]:
    """Lower-case, strip and de-duplicate tags, keeping first-seen order, then cap."""
    cap = settings.max_categories if cap is None else cap
    seen: list[str] = []
    for raw in categories:
        name = raw.strip().lower()
        if name and name not in seen:
            seen.append(name)
    return seen[:cap]


class FragmentIn(BaseModel):
    file_name: str = ""
    code: str = ""
    language: str = ""
    position: Optional[int] = None


class Fragment(BaseModel):
    id: Optional[Union[int, str]] = None
    file_name: str = ""
    code: str = ""
    language: str = ""
    position: int = 0


class SnippetIn(BaseModel):
    """Body of POST /snippets and PUT /snippets/{id}."""
    title: str
    description: str = ""
    is_public: bool = False
    is_pinned: bool = False
    is_favorite: bool = False
    categories: list[str] = Field(default_factory=list)
    fragments: list[FragmentIn] = Field(min_length=1)

    @field_validator("categories")
    @classmethod
    def _normalize_categories(cls, value: list[str]) -> list[str]:
        return normalize_categories(value)


class Snippet(BaseModel):
    # int once persisted; "temp-..." while an optimistic create is pending
    id: Union[int, str]
    user_id: Optional[str] = None
    title: str
    description: str = ""
    updated_at: datetime
    expiry_date: Optional[datetime] = None
    is_public: bool = False
    is_pinned: bool = False
    is_favorite: bool = False
    categories: list[str] = Field(default_factory=list)
    fragments: list[Fragment] = Field(default_factory=list)

    @property
    def is_recycled(self) -> bool:
        return self.expiry_date is not None


class PinRequest(BaseModel):
    is_pinned: bool


class FavoriteRequest(BaseModel):
    is_favorite: bool


class SnippetRef(BaseModel):
    id: int
