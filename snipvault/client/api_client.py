"""Async HTTP client for the snippet API."""

import logging
from typing import Optional

import httpx

from ..config import settings
from ..errors import AuthenticationError, InvalidStateError, SnipvaultError, SnippetNotFoundError, TransientError
from ..models.metadata import SnippetMetadata
from ..models.query import FilterSpec, PageResult, Scope
from ..models.snippet import Snippet, SnippetIn

logger = logging.getLogger(__name__)


def _list_path(scope: Scope) -> str:
    return "/public/snippets" if scope is Scope.PUBLIC else "/snippets"


class SnippetApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        owner_id: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url or settings.api_base_url, timeout=timeout)
        self._headers = {settings.owner_header: owner_id} if owner_id else {}

    async def __aenter__(self) -> "SnippetApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, *, params: Optional[dict] = None, json: Optional[dict] = None):
        try:
            response = await self._client.request(method, path, params=params, json=json, headers=self._headers)
        except httpx.HTTPError as e:
            raise TransientError(f"{method} {path} failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(f"{method} {path} rejected with {response.status_code}")
        if response.status_code == 404:
            if _error_code(response) == "invalid_state":
                raise InvalidStateError(None, _detail(response))
            raise SnippetNotFoundError(None, _detail(response) or "Snippet not found")
        if response.status_code >= 500:
            raise TransientError(f"{method} {path} failed with {response.status_code}", response.status_code)
        if response.status_code >= 400:
            raise SnipvaultError(f"{method} {path} rejected: {_detail(response)}")
        return response.json()

    # -- reads --------------------------------------------------------------

    async def list_snippets(self, scope: Scope, spec: FilterSpec, offset: int = 0, limit: Optional[int] = None) -> PageResult:
        params = spec.for_scope(scope).to_query_params()
        params["offset"] = str(offset)
        params["limit"] = str(limit or settings.default_limit)
        data = await self._request("GET", _list_path(scope), params=params)
        return PageResult.model_validate(data)

    async def get_metadata(self, scope: Scope = Scope.OWNER) -> SnippetMetadata:
        data = await self._request("GET", f"{_list_path(scope)}/metadata")
        return SnippetMetadata.model_validate(data)

    # -- writes -------------------------------------------------------------

    async def create_snippet(self, body: SnippetIn) -> Snippet:
        data = await self._request("POST", "/snippets", json=body.model_dump(mode="json"))
        return Snippet.model_validate(data)

    async def update_snippet(self, snippet_id: int, body: SnippetIn) -> Snippet:
        data = await self._request("PUT", f"/snippets/{snippet_id}", json=body.model_dump(mode="json"))
        return Snippet.model_validate(data)

    async def delete_snippet(self, snippet_id: int) -> int:
        data = await self._request("DELETE", f"/snippets/{snippet_id}")
        return data["id"]

    async def move_to_recycle(self, snippet_id: int) -> int:
        data = await self._request("PATCH", f"/snippets/{snippet_id}/recycle")
        return data["id"]

    async def restore_snippet(self, snippet_id: int) -> int:
        data = await self._request("PATCH", f"/snippets/{snippet_id}/restore")
        return data["id"]

    async def set_pinned(self, snippet_id: int, is_pinned: bool) -> Snippet:
        data = await self._request("PATCH", f"/snippets/{snippet_id}/pin", json={"is_pinned": is_pinned})
        return Snippet.model_validate(data)

    async def set_favorite(self, snippet_id: int, is_favorite: bool) -> Snippet:
        data = await self._request("PATCH", f"/snippets/{snippet_id}/favorite", json={"is_favorite": is_favorite})
        return Snippet.model_validate(data)


def _detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    return str(data.get("detail", "")) if isinstance(data, dict) else str(data)


def _error_code(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    return data.get("error") if isinstance(data, dict) else None
