"""Public snippet endpoints (no owner, no favorites or recycle bin)."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..models.metadata import SnippetMetadata
from ..models.query import FilterSpec, PageResult, Scope
from ..models.snippet import Snippet
from ..services.snippet_manager import snippet_manager
from .deps import get_filter_spec, get_window

router = APIRouter(prefix="/public/snippets", tags=["public"])


@router.get("", response_model=PageResult)
def list_public_snippets(
    spec: FilterSpec = Depends(get_filter_spec),
    window: tuple[int, int] = Depends(get_window),
):
    offset, limit = window
    return snippet_manager.list_snippets(Scope.PUBLIC, spec, None, offset, limit)


@router.get("/metadata", response_model=SnippetMetadata)
def get_public_metadata():
    return snippet_manager.metadata(Scope.PUBLIC)


@router.get("/{snippet_id}", response_model=Snippet)
def get_public_snippet(snippet_id: int):
    return snippet_manager.get_snippet(snippet_id)


@router.get("/{snippet_id}/{fragment_id}/raw", response_class=PlainTextResponse)
def get_public_raw_fragment(snippet_id: int, fragment_id: int):
    return snippet_manager.get_fragment_code(snippet_id, fragment_id)
