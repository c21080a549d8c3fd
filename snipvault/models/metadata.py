"""Filter vocabulary models."""

from pydantic import BaseModel, Field


class MetadataCounts(BaseModel):
    total: int = 0


class SnippetMetadata(BaseModel):
    categories: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    counts: MetadataCounts = Field(default_factory=MetadataCounts)
