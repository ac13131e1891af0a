"""AthleteSearchService owns the loaded athlete index for a serving process.

Usage:
    service = AthleteSearchService.from_data_dir(settings.data_dir)
    service.load()          # optional; first query loads too
    service.search("jane")
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

from app.features.races.catalog import RaceCatalog

from . import artifacts
from .models import (
    AthleteProfile,
    AthleteRaceEntry,
    AthleteSearchEntry,
    ResultRef,
)
from .search import DEFAULT_SEARCH_LIMIT, AthleteSearchIndex

logger = logging.getLogger(__name__)

IndexLoader = Callable[[], tuple[list[AthleteSearchEntry], dict[str, list[ResultRef]]]]


class AthleteSearchService:
    """Search and profile lookups over an index loaded at most once.

    The index is read-only after load; there is no refresh. A rebuilt index
    is picked up by starting a new process.
    """

    def __init__(self, loader: IndexLoader):
        self._loader = loader
        self._lock = threading.Lock()
        self._index: AthleteSearchIndex | None = None
        self._entries_by_key: dict[str, AthleteSearchEntry] = {}
        self._profiles: dict[str, list[ResultRef]] = {}

    @classmethod
    def from_data_dir(cls, data_dir: Path) -> "AthleteSearchService":
        """Service backed by the gzipped artifacts in `data_dir`."""
        data_dir = Path(data_dir)

        def load():
            return artifacts.read_search_index(data_dir), artifacts.read_profiles(data_dir)

        return cls(load)

    @classmethod
    def from_index(
        cls,
        entries: list[AthleteSearchEntry],
        profiles: dict[str, list[ResultRef]] | None = None,
    ) -> "AthleteSearchService":
        """Service over in-memory data (tests, freshly built index)."""
        return cls(lambda: (list(entries), dict(profiles or {})))

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    def load(self) -> None:
        """Load the index once. Concurrent callers wait for the first load.

        Raises:
            IndexLoadError: artifacts missing or corrupt. Nothing is cached,
                so the next call retries.
        """
        if self._index is not None:
            return
        with self._lock:
            if self._index is not None:
                return
            entries, profiles = self._loader()
            self._entries_by_key = {e.key: e for e in entries}
            self._profiles = profiles
            self._index = AthleteSearchIndex(entries)
            logger.info(f"Athlete search ready: {len(self._index)} athletes")

    def _ensure_loaded(self) -> AthleteSearchIndex:
        self.load()
        return self._index

    def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[AthleteSearchEntry]:
        return self._ensure_loaded().search(query, limit)

    def entries(self) -> list[AthleteSearchEntry]:
        """The whole deduplicated index, sorted by name."""
        return self._ensure_loaded().entries

    @property
    def unique_athletes(self) -> int:
        return len(self._ensure_loaded())

    def get_entry(self, key: str) -> AthleteSearchEntry | None:
        self._ensure_loaded()
        return self._entries_by_key.get(key)

    def get_profile_refs(self, key: str) -> list[ResultRef]:
        """Result references in build order ([] for unknown keys)."""
        self._ensure_loaded()
        return list(self._profiles.get(key, []))

    def get_athlete_profile(self, key: str, catalog: RaceCatalog) -> AthleteProfile | None:
        """Rebuild an athlete's race history from the catalog.

        References to races or rows that no longer exist are skipped.
        Races are ordered most recent first.
        """
        entry = self.get_entry(key)
        refs = self.get_profile_refs(key)
        if entry is None or not refs:
            return None

        races: list[AthleteRaceEntry] = []
        for ref in refs:
            race = catalog.get_race(ref.race_slug)
            result = catalog.get_result(ref.race_slug, ref.result_id) if race else None
            if result is None:
                logger.warning(f"Dangling profile reference for {key}: {ref.race_slug}#{ref.result_id}")
                continue
            races.append(
                AthleteRaceEntry(
                    race_slug=race.slug,
                    race_name=race.name,
                    race_date=race.date,
                    result_id=result.id,
                    finish_time=result.finish_time,
                    age_group=result.age_group,
                    swim_time=result.swim_time,
                    bike_time=result.bike_time,
                    run_time=result.run_time,
                )
            )

        if not races:
            return None

        races.sort(key=lambda r: r.race_date, reverse=True)
        return AthleteProfile(
            key=key,
            full_name=entry.full_name,
            country=entry.country,
            country_iso=entry.country_iso,
            races=races,
        )
