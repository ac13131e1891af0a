"""Data models for triathlon race results (dataclasses, no DB dependency)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


class Discipline(str, Enum):
    """Timed segment of a triathlon (or the total)."""

    SWIM = "swim"
    BIKE = "bike"
    RUN = "run"
    FINISH = "finish"
    T1 = "t1"
    T2 = "t2"


class Scope(str, Enum):
    """Comparison field for a histogram."""

    OVERALL = "overall"
    AGE_GROUP = "age_group"


FINISHER_STATUS = "Finisher"

_YEAR_SUFFIX_RE = re.compile(r"-(19|20)\d{2}$")
_NAME_YEAR_RE = re.compile(r"\s+(19|20)\d{2}$")


@dataclass
class AthleteResult:
    """Single race-finish record (one CSV row).

    Split seconds are None when the split was not recorded.
    """

    id: int  # 0-based data row index within the race CSV
    full_name: str  # "Jane Doe"
    age_group: str  # "F30-34"
    gender: str  # "Female" / "Male"
    country: str  # "United States"
    country_iso: str  # "USA"
    status: str = FINISHER_STATUS
    first_name: str = ""
    last_name: str = ""
    bib: str = ""
    city: str = ""
    state: str = ""
    swim_time: str = ""
    bike_time: str = ""
    run_time: str = ""
    t1_time: str = ""
    t2_time: str = ""
    finish_time: str = ""  # "4:52:10"
    swim_seconds: int | None = None
    bike_seconds: int | None = None
    run_seconds: int | None = None
    t1_seconds: int | None = None
    t2_seconds: int | None = None
    finish_seconds: int | None = None  # 17530
    overall_rank: int | None = None
    gender_rank: int | None = None
    age_group_rank: int | None = None

    @property
    def is_finisher(self) -> bool:
        return self.status == FINISHER_STATUS

    def seconds_for(self, discipline: Discipline | str) -> int | None:
        """Elapsed seconds for a discipline, None if not recorded."""
        return getattr(self, f"{Discipline(discipline).value}_seconds")


@dataclass
class RaceInfo:
    """One race (event edition) from the manifest."""

    slug: str  # "im703-new-york-2025"
    name: str  # "IRONMAN 70.3 New York 2025"
    date: str  # "2025-06-01"
    location: str = ""
    finishers: int = 0
    event_id: str | None = None

    @property
    def course_key(self) -> str:
        """Slug without the edition year: all editions of a course share it."""
        return _YEAR_SUFFIX_RE.sub("", self.slug)

    @property
    def distance(self) -> str:
        return "70.3" if self.slug.startswith("im703") else "140.6"

    @property
    def course_name(self) -> str:
        return _NAME_YEAR_RE.sub("", self.name)


@dataclass
class HistogramBin:
    """Half-open time interval [range_start, range_end) with its count."""

    label: str  # "4:50"
    range_start: int
    range_end: int
    count: int
    is_target: bool = False


@dataclass
class HistogramData:
    """Distribution of a field plus where one observation sits in it."""

    bins: list[HistogramBin] = field(default_factory=list)
    target_seconds: int | None = None  # None = split not recorded
    percentile: int = 0  # share of the field the target beat (100 = fastest)
    median_seconds: float = 0


@dataclass
class BinTable:
    """Precomputed distribution for one (race, discipline, scope).

    `values` holds (seconds, count) pairs sorted ascending so the exact
    "strictly slower" count can be recovered for any target.
    """

    bins: list[HistogramBin] = field(default_factory=list)
    median_seconds: float = 0
    total: int = 0
    values: list[tuple[int, int]] = field(default_factory=list)


@dataclass
class DisciplineStats:
    """Field spread for one discipline (seconds, recorded values only)."""

    discipline: str
    fastest: int
    slowest: int
    median: float
    average: float


@dataclass
class GroupBreakdown:
    """Finisher share and times for a gender or age group."""

    group: str  # "Female" / "F30-34"
    count: int
    percentage: float
    median_finish: float
    fastest_finish: int


@dataclass
class LeaderboardEntry:
    id: int
    rank: int
    full_name: str
    country: str
    country_iso: str
    age_group: str
    gender: str
    finish_time: str
    swim_time: str
    bike_time: str
    run_time: str


@dataclass
class RaceStats:
    """Aggregate statistics for one race."""

    total_finishers: int
    disciplines: list[DisciplineStats] = field(default_factory=list)
    gender_breakdown: list[GroupBreakdown] = field(default_factory=list)
    age_group_breakdown: list[GroupBreakdown] = field(default_factory=list)
    leaderboard: list[LeaderboardEntry] = field(default_factory=list)
    histograms: dict[str, BinTable] = field(default_factory=dict)


@dataclass
class GlobalStats:
    """Dataset-wide counters."""

    race_count: int
    total_results: int
    unique_athletes: int
    full_course_count: int  # distinct 140.6 courses
    half_course_count: int  # distinct 70.3 courses
    earliest_race: RaceInfo | None = None
    most_recent_race: RaceInfo | None = None
