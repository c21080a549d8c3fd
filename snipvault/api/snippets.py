"""Owner-scoped snippet endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..models.metadata import SnippetMetadata
from ..models.query import FilterSpec, PageResult, Scope
from ..models.snippet import FavoriteRequest, PinRequest, Snippet, SnippetIn, SnippetRef
from ..services.snippet_manager import snippet_manager
from .deps import get_filter_spec, get_owner_id, get_window

router = APIRouter(prefix="/snippets", tags=["snippets"])


@router.get("", response_model=PageResult)
def list_snippets(
    spec: FilterSpec = Depends(get_filter_spec),
    window: tuple[int, int] = Depends(get_window),
    owner_id: str = Depends(get_owner_id),
):
    offset, limit = window
    return snippet_manager.list_snippets(Scope.OWNER, spec, owner_id, offset, limit)


@router.get("/metadata", response_model=SnippetMetadata)
def get_metadata(owner_id: str = Depends(get_owner_id)):
    return snippet_manager.metadata(Scope.OWNER, owner_id)


@router.post("", response_model=Snippet, status_code=201)
def create_snippet(body: SnippetIn, owner_id: str = Depends(get_owner_id)):
    return snippet_manager.create_snippet(body, owner_id)


@router.get("/{snippet_id}", response_model=Snippet)
def get_snippet(snippet_id: int, owner_id: str = Depends(get_owner_id)):
    return snippet_manager.get_snippet(snippet_id, owner_id)


@router.get("/{snippet_id}/{fragment_id}/raw", response_class=PlainTextResponse)
def get_raw_fragment(snippet_id: int, fragment_id: int, owner_id: str = Depends(get_owner_id)):
    return snippet_manager.get_fragment_code(snippet_id, fragment_id, owner_id)


@router.put("/{snippet_id}", response_model=Snippet)
def update_snippet(snippet_id: int, body: SnippetIn, owner_id: str = Depends(get_owner_id)):
    return snippet_manager.update_snippet(snippet_id, body, owner_id)


@router.patch("/{snippet_id}/recycle", response_model=SnippetRef)
def move_to_recycle(snippet_id: int, owner_id: str = Depends(get_owner_id)):
    return SnippetRef(id=snippet_manager.move_to_recycle(snippet_id, owner_id))


@router.patch("/{snippet_id}/restore", response_model=SnippetRef)
def restore_snippet(snippet_id: int, owner_id: str = Depends(get_owner_id)):
    return SnippetRef(id=snippet_manager.restore(snippet_id, owner_id))


@router.delete("/{snippet_id}", response_model=SnippetRef)
def delete_snippet(snippet_id: int, owner_id: str = Depends(get_owner_id)):
    return SnippetRef(id=snippet_manager.purge(snippet_id, owner_id))


@router.patch("/{snippet_id}/pin", response_model=Snippet)
def set_pinned(snippet_id: int, body: PinRequest, owner_id: str = Depends(get_owner_id)):
    return snippet_manager.set_pinned(snippet_id, body.is_pinned, owner_id)


@router.patch("/{snippet_id}/favorite", response_model=Snippet)
def set_favorite(snippet_id: int, body: FavoriteRequest, owner_id: str = Depends(get_owner_id)):
    return snippet_manager.set_favorite(snippet_id, body.is_favorite, owner_id)
