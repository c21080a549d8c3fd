"""Client-side cache of fetched snippet pages, one entry per filter signature.

An entry is an append-only list of pages until it is invalidated. Local
edits never mutate a cached ``PageResult`` or ``Snippet`` in place; they
swap in new page objects, so a snapshot is just the old list of pages.
"""

import logging
from bisect import bisect_right
from typing import Awaitable, Callable, Iterable, NamedTuple, Optional, Union

from ..models.query import FilterSpec, PageResult, Scope
from ..models.snippet import Snippet

logger = logging.getLogger(__name__)

RecordId = Union[int, str]
PageFetcher = Callable[[Scope, FilterSpec, int, Optional[int]], Awaitable[PageResult]]


class CacheEntry:
    def __init__(self, scope: Scope, spec: FilterSpec):
        self.scope = scope
        self.spec = spec.for_scope(scope)
        self.signature = spec.signature(scope)
        self.pages: list[PageResult] = []
        self.in_flight = False

    @property
    def records(self) -> list[Snippet]:
        return [record for page in self.pages for record in page.data]

    @property
    def next_offset(self) -> int:
        return sum(len(page.data) for page in self.pages)

    @property
    def has_more(self) -> bool:
        """Answered from the most recently fetched page; unfetched entries have more."""
        if not self.pages:
            return True
        return self.pages[-1].pagination.has_more

    @property
    def total(self) -> int:
        return self.pages[-1].pagination.total if self.pages else 0

    def contains(self, record_id: RecordId) -> bool:
        return any(record.id == record_id for page in self.pages for record in page.data)

    # -- local edits --------------------------------------------------------

    def update_record(self, record_id: RecordId, update: Callable[[Snippet], Snippet]) -> bool:
        changed = False
        pages = []
        for page in self.pages:
            if any(record.id == record_id for record in page.data):
                changed = True
                data = [update(record) if record.id == record_id else record for record in page.data]
                page = page.model_copy(update={"data": data})
            pages.append(page)
        if changed:
            self.pages = pages
        return changed

    def replace_record(self, record_id: RecordId, record: Snippet) -> bool:
        return self.update_record(record_id, lambda _old: record)

    def remove_record(self, record_id: RecordId) -> bool:
        """Drop the record and decrement every page's total.

        ``has_more`` is left alone: the server still has the same rows beyond
        the cached window.
        """
        if not self.contains(record_id):
            return False
        self.pages = [
            page.model_copy(update={
                "data": [record for record in page.data if record.id != record_id],
                "pagination": _shift_total(page, -1),
            })
            for page in self.pages
        ]
        return True

    def prepend_record(self, record: Snippet) -> bool:
        """Splice a record at the head of the first page; totals grow by one."""
        if not self.pages:
            return False
        first, rest = self.pages[0], self.pages[1:]
        pages = [first.model_copy(update={"data": [record, *first.data], "pagination": _shift_total(first, 1)})]
        pages.extend(page.model_copy(update={"pagination": _shift_total(page, 1)}) for page in rest)
        self.pages = pages
        return True

    def is_ordered(self) -> bool:
        keys = [self.spec.sort_key(record) for record in self.records]
        return all(not (b < a) for a, b in zip(keys, keys[1:]))

    def reorder_record(self, record_id: RecordId) -> bool:
        """Move a record to its sorted slot, keeping every page's length.

        Returns False when the record sorts past the last cached row while
        the server still has more; its slot is then outside the window.
        """
        records = self.records
        moved = next((r for r in records if r.id == record_id), None)
        if moved is None:
            return True
        others = [r for r in records if r.id != record_id]
        keys = [self.spec.sort_key(r) for r in others]
        slot = bisect_right(keys, self.spec.sort_key(moved))
        if slot == len(others) and self.has_more:
            return False
        others.insert(slot, moved)

        pages, start = [], 0
        for page in self.pages:
            chunk = others[start:start + len(page.data)]
            start += len(page.data)
            if chunk != page.data:
                page = page.model_copy(update={"data": chunk})
            pages.append(page)
        self.pages = pages
        return True


def _shift_total(page: PageResult, delta: int):
    pagination = page.pagination
    return pagination.model_copy(update={"total": max(0, pagination.total + delta)})


class EntrySnapshot(NamedTuple):
    entry: CacheEntry
    pages: tuple


class ListCache:
    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def get(self, signature: str) -> Optional[CacheEntry]:
        return self._entries.get(signature)

    def get_or_create(self, scope: Scope, spec: FilterSpec) -> CacheEntry:
        signature = spec.signature(scope)
        entry = self._entries.get(signature)
        if entry is None:
            entry = CacheEntry(scope, spec)
            self._entries[signature] = entry
        return entry

    def append_page(self, signature: str, page: PageResult) -> CacheEntry:
        entry = self._entries[signature]
        entry.pages = [*entry.pages, page]
        return entry

    def entries(self, scope: Optional[Scope] = None) -> list[CacheEntry]:
        return [e for e in self._entries.values() if scope is None or e.scope is scope]

    def invalidate(self, matcher: Callable[[CacheEntry], bool]) -> list[str]:
        """Remove every entry the matcher selects; they are refetched on next use."""
        dropped = [sig for sig, entry in self._entries.items() if matcher(entry)]
        for signature in dropped:
            del self._entries[signature]
        if dropped:
            logger.debug(f"Invalidated {len(dropped)} cache entries")
        return dropped

    def is_live(self, entry: CacheEntry) -> bool:
        return self._entries.get(entry.signature) is entry

    # -- snapshots ----------------------------------------------------------

    def snapshot(self, entries: Iterable[CacheEntry]) -> list[EntrySnapshot]:
        return [EntrySnapshot(entry, tuple(entry.pages)) for entry in entries]

    def restore(self, snapshots: Iterable[EntrySnapshot]) -> None:
        """Put back the exact page objects captured by ``snapshot``."""
        for snap in snapshots:
            snap.entry.pages = list(snap.pages)

    # -- infinite scroll ----------------------------------------------------

    async def load_more(
        self,
        scope: Scope,
        spec: FilterSpec,
        fetch: PageFetcher,
        limit: Optional[int] = None,
    ) -> Optional[PageResult]:
        """Fetch and append the next page for (scope, spec).

        Returns None without fetching when a fetch for the entry is already in
        flight or the entry is exhausted. The offset is the number of records
        already cached, so local removals are accounted for.
        """
        entry = self.get_or_create(scope, spec)
        if entry.in_flight or not entry.has_more:
            return None

        entry.in_flight = True
        try:
            page = await fetch(scope, entry.spec, entry.next_offset, limit)
        finally:
            entry.in_flight = False

        if not self.is_live(entry):
            logger.debug(f"Dropping page for invalidated entry {entry.signature}")
            return None
        self.append_page(entry.signature, page)
        return page
