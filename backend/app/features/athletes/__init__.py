"""
Athletes feature module — cross-race identity, index build and name search.

Usage:
    from app.features.athletes import AthleteSearchService, build_athlete_index

Pieces:
- identity: derive_identity_key (the one place keys are made)
- index_builder: offline pass producing entries, profiles, course stats
- search: sorted prefix-then-substring index
- artifacts: gzipped JSON writers/readers
- service: per-process owner of the loaded index
"""

from .models import (
    AthleteIndex,
    AthleteProfile,
    AthleteRaceEntry,
    AthleteSearchEntry,
    CourseStats,
    ResultRef,
)
from .identity import derive_identity_key, normalize_name
from .index_builder import AthleteIndexBuilder, build_athlete_index
from .search import DEFAULT_SEARCH_LIMIT, MIN_QUERY_LENGTH, AthleteSearchIndex
from .artifacts import IndexLoadError
from .service import AthleteSearchService

__all__ = [
    "AthleteIndex",
    "AthleteProfile",
    "AthleteRaceEntry",
    "AthleteSearchEntry",
    "CourseStats",
    "ResultRef",
    "derive_identity_key",
    "normalize_name",
    "AthleteIndexBuilder",
    "build_athlete_index",
    "DEFAULT_SEARCH_LIMIT",
    "MIN_QUERY_LENGTH",
    "AthleteSearchIndex",
    "IndexLoadError",
    "AthleteSearchService",
]
