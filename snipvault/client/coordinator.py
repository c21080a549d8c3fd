"""Optimistic mutations over the list cache.

Each mutation runs in three phases:

1. snapshot the cache entries it may touch and apply the speculative edit,
   synchronously, with no await in between;
2. await the authoritative API call, the only suspension point;
3. reconcile the entries with the server's record, or restore the snapshot
   verbatim on failure.

Snapshots are never chained: a failed mutation always returns to the state
captured when *it* started. Two mutations on the same record should not be
issued without awaiting the first; doing so is allowed but logged.
"""

import logging
import uuid
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from ..errors import AuthenticationError, SnipvaultError
from ..models.query import Scope
from ..models.snippet import Fragment, Snippet, SnippetIn
from ..utils.time import utc_now
from .api_client import SnippetApiClient
from .list_cache import CacheEntry, ListCache, RecordId

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "temp-"


class MutationKind(str, Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    RECYCLE = "recycle"
    RESTORE = "restore"
    PIN = "pin"
    FAVORITE = "favorite"


_REMOVING = {MutationKind.DELETE, MutationKind.RECYCLE, MutationKind.RESTORE}


@dataclass
class MutationSuccess:
    kind: MutationKind
    record_id: RecordId
    record: Optional[Snippet] = None
    ok: bool = True


@dataclass
class MutationFailure:
    kind: MutationKind
    record_id: Optional[RecordId]
    error: Exception
    ok: bool = False


MutationOutcome = Union[MutationSuccess, MutationFailure]


def _fragments_from(body: SnippetIn) -> list[Fragment]:
    return [
        Fragment(
            file_name=f.file_name,
            code=f.code,
            language=f.language.strip().lower(),
            position=f.position if f.position is not None else index,
        )
        for index, f in enumerate(body.fragments)
    ]


def _edited_fields(body: SnippetIn) -> dict:
    return {
        "title": body.title,
        "description": body.description,
        "is_public": body.is_public,
        "categories": sorted(body.categories),
        "fragments": _fragments_from(body),
        "updated_at": utc_now(),
    }


class MutationCoordinator:
    def __init__(
        self,
        cache: ListCache,
        api: SnippetApiClient,
        owner_id: Optional[str] = None,
        on_session_reset: Optional[Callable[[], None]] = None,
    ):
        self.cache = cache
        self.api = api
        self.owner_id = owner_id
        self._on_session_reset = on_session_reset
        self._pending: Counter = Counter()

    # -- public operations --------------------------------------------------

    async def create(self, body: SnippetIn) -> MutationOutcome:
        return await self.mutate(MutationKind.CREATE, None, body)

    async def edit(self, snippet_id: int, body: SnippetIn) -> MutationOutcome:
        return await self.mutate(MutationKind.EDIT, snippet_id, body)

    async def delete(self, snippet_id: int) -> MutationOutcome:
        return await self.mutate(MutationKind.DELETE, snippet_id)

    async def recycle(self, snippet_id: int) -> MutationOutcome:
        return await self.mutate(MutationKind.RECYCLE, snippet_id)

    async def restore(self, snippet_id: int) -> MutationOutcome:
        return await self.mutate(MutationKind.RESTORE, snippet_id)

    async def set_pinned(self, snippet_id: int, is_pinned: bool) -> MutationOutcome:
        return await self.mutate(MutationKind.PIN, snippet_id, is_pinned)

    async def set_favorite(self, snippet_id: int, is_favorite: bool) -> MutationOutcome:
        return await self.mutate(MutationKind.FAVORITE, snippet_id, is_favorite)

    async def mutate(self, kind: MutationKind, record_id: Optional[RecordId], transform=None) -> MutationOutcome:
        """Apply ``kind`` optimistically, call the API, then reconcile or roll back.

        ``transform`` is the ``SnippetIn`` body for create/edit and the new
        flag value for pin/favorite; other kinds take none.
        """
        kind = MutationKind(kind)
        if record_id is not None and self._pending[record_id]:
            logger.warning(f"{kind.value} on snippet {record_id} while another mutation is pending")

        touched = self._candidate_entries(record_id)
        snapshots = self.cache.snapshot(touched)
        placeholder_id = self._apply(kind, record_id, transform, touched)
        key = placeholder_id or record_id

        self._pending[key] += 1
        try:
            result = await self._call(kind, record_id, transform)
        except SnipvaultError as e:
            self.cache.restore(snapshots)
            logger.warning(f"{kind.value} on snippet {key} failed, rolled back {len(snapshots)} entries: {e}")
            if isinstance(e, AuthenticationError):
                self._reset_session()
            return MutationFailure(kind=kind, record_id=key, error=e)
        except BaseException:
            self.cache.restore(snapshots)
            raise
        finally:
            self._pending[key] -= 1
            if not self._pending[key]:
                del self._pending[key]

        record = self._reconcile(kind, record_id, placeholder_id, result, touched)
        logger.info(f"{kind.value} on snippet {record.id if record else record_id} confirmed")
        return MutationSuccess(kind=kind, record_id=record.id if record else record_id, record=record)

    # -- phases -------------------------------------------------------------

    def _candidate_entries(self, record_id: Optional[RecordId]) -> list[CacheEntry]:
        """Every owner entry, plus any other entry already showing the record."""
        return [
            entry for entry in self.cache.entries()
            if entry.scope is Scope.OWNER or (record_id is not None and entry.contains(record_id))
        ]

    def _apply(self, kind: MutationKind, record_id, transform, entries: list[CacheEntry]) -> Optional[str]:
        if kind is MutationKind.CREATE:
            placeholder = self._placeholder(transform)
            for entry in entries:
                if entry.scope is Scope.OWNER and entry.spec.matches(placeholder, Scope.OWNER, self.owner_id):
                    entry.prepend_record(placeholder)
            return placeholder.id

        if kind in _REMOVING:
            for entry in entries:
                entry.remove_record(record_id)
            return None

        if kind is MutationKind.EDIT:
            changes = _edited_fields(transform)
        elif kind is MutationKind.PIN:
            changes = {"is_pinned": bool(transform)}
        else:
            changes = {"is_favorite": bool(transform)}
        for entry in entries:
            entry.update_record(record_id, lambda s: s.model_copy(update=changes))
        return None

    def _placeholder(self, body: SnippetIn) -> Snippet:
        return Snippet(
            id=f"{PLACEHOLDER_PREFIX}{uuid.uuid4().hex}",
            user_id=self.owner_id,
            title=body.title,
            description=body.description,
            updated_at=utc_now(),
            is_public=body.is_public,
            is_pinned=body.is_pinned,
            is_favorite=body.is_favorite,
            categories=sorted(body.categories),
            fragments=_fragments_from(body),
        )

    async def _call(self, kind: MutationKind, record_id, transform):
        if kind is MutationKind.CREATE:
            return await self.api.create_snippet(transform)
        if kind is MutationKind.EDIT:
            return await self.api.update_snippet(record_id, transform)
        if kind is MutationKind.DELETE:
            return await self.api.delete_snippet(record_id)
        if kind is MutationKind.RECYCLE:
            return await self.api.move_to_recycle(record_id)
        if kind is MutationKind.RESTORE:
            return await self.api.restore_snippet(record_id)
        if kind is MutationKind.PIN:
            return await self.api.set_pinned(record_id, bool(transform))
        return await self.api.set_favorite(record_id, bool(transform))

    def _reconcile(self, kind: MutationKind, record_id, placeholder_id, result, entries: list[CacheEntry]) -> Optional[Snippet]:
        if kind is MutationKind.RECYCLE:
            # The record now belongs in recycle-bin listings we never saw it in.
            self.cache.invalidate(lambda e: e.scope is Scope.OWNER and e.spec.recycled)
            return None
        if kind is MutationKind.RESTORE:
            self.cache.invalidate(lambda e: e.scope is Scope.OWNER and not e.spec.recycled)
            return None
        if kind is MutationKind.DELETE:
            return None

        record: Snippet = result
        match_id = placeholder_id if kind is MutationKind.CREATE else record_id
        for entry in entries:
            if entry.replace_record(match_id, record):
                # A created record keeps the placeholder's slot at the head.
                self._settle(entry, record, keep_position=kind is MutationKind.CREATE)
        return record

    def _settle(self, entry: CacheEntry, record: Snippet, keep_position: bool = False) -> None:
        """Keep a reconciled entry honest about its filter and sort order."""
        if not entry.spec.matches(record, entry.scope, self.owner_id):
            entry.remove_record(record.id)
        elif not keep_position and not entry.is_ordered() and not entry.reorder_record(record.id):
            # The record sorts beyond the cached window; refetch instead.
            self.cache.invalidate(lambda e: e is entry)

    def _reset_session(self) -> None:
        logger.warning("Authentication rejected; resetting session")
        if self._on_session_reset is not None:
            self._on_session_reset()
