"""Prefix/substring athlete search over the deduplicated index.

The index is sorted once by lower-cased name. A query then runs in two
phases:

1. Prefix: binary search to the first name >= query, scan forward while
   names start with the query. O(log n + k).
2. Substring: only if phase 1 found fewer than `limit`, a linear scan of
   the whole sorted index for names containing the query. O(n); this is
   the scaling limit when prefix hits are sparse.

Prefix matches always come before substring-only matches. Nothing is
re-ranked.
"""

from __future__ import annotations

from bisect import bisect_left
from typing import Iterable

from .models import AthleteSearchEntry

MIN_QUERY_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 10


class AthleteSearchIndex:
    """Immutable sorted index. Build once, query many times."""

    def __init__(self, entries: Iterable[AthleteSearchEntry]):
        # Ordinal str comparison on the lower-cased name, no locale collation
        self._entries = sorted(entries, key=lambda e: e.full_name.lower())
        self._names = [e.full_name.lower() for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[AthleteSearchEntry]:
        return list(self._entries)

    def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[AthleteSearchEntry]:
        """Athletes whose name starts with, then contains, the query.

        Queries shorter than MIN_QUERY_LENGTH return [] (same as no match).
        """
        q = (query or "").lower()
        if len(q) < MIN_QUERY_LENGTH or limit <= 0:
            return []

        results: list[AthleteSearchEntry] = []
        matched: set[int] = set()

        # Phase 1: prefix matches, alphabetical
        i = bisect_left(self._names, q)
        while i < len(self._names) and len(results) < limit:
            if not self._names[i].startswith(q):
                break
            results.append(self._entries[i])
            matched.add(i)
            i += 1

        if len(results) >= limit:
            return results

        # Phase 2: substring-only matches, index order
        for i, name in enumerate(self._names):
            if len(results) >= limit:
                break
            if i in matched:
                continue
            if q in name:
                results.append(self._entries[i])

        return results
