"""Data models for the cross-race athlete index (dataclasses, no DB dependency)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple


@dataclass(frozen=True)
class AthleteSearchEntry:
    """One deduplicated athlete in the search index."""

    key: str  # "jane-doe--usa-f"
    full_name: str  # "Jane Doe"
    country: str  # "United States"
    country_iso: str  # "USA"
    race_count: int


class ResultRef(NamedTuple):
    """Pointer to one result row: (race slug, row id within that race)."""

    race_slug: str
    result_id: int


@dataclass
class CourseStats:
    """Aggregates over every edition of one course."""

    course_key: str  # "im703-new-york"
    display_name: str  # "IRONMAN 70.3 New York"
    distance: str  # "70.3" / "140.6"
    editions: int
    total_finishers: int
    median_finish_seconds: float = 0
    median_swim_seconds: float = 0
    median_bike_seconds: float = 0
    median_run_seconds: float = 0


@dataclass
class AthleteIndex:
    """Output of one index build."""

    entries: list[AthleteSearchEntry] = field(default_factory=list)
    profiles: dict[str, list[ResultRef]] = field(default_factory=dict)
    courses: list[CourseStats] = field(default_factory=list)
    races_indexed: int = 0
    races_skipped: list[str] = field(default_factory=list)
    total_results: int = 0


@dataclass
class AthleteRaceEntry:
    """One race in an athlete's history."""

    race_slug: str
    race_name: str
    race_date: str
    result_id: int
    finish_time: str
    age_group: str
    swim_time: str = ""
    bike_time: str = ""
    run_time: str = ""


@dataclass
class AthleteProfile:
    """Per-athlete race history, most recent race first."""

    key: str
    full_name: str
    country: str
    country_iso: str
    races: list[AthleteRaceEntry] = field(default_factory=list)
