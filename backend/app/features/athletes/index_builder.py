"""Athlete index builder — one offline pass over every race's finishers.

Produces the deduplicated search entries, the key → result references
mapping used to rebuild athlete histories, and per-course aggregates.

Usage:
    index = build_athlete_index(catalog.races, catalog.load_results)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from app.features.races.histogram import compute_median, valid_observations
from app.features.races.models import AthleteResult, RaceInfo
from app.features.races.results_csv import ResultsParseError

from .identity import derive_identity_key
from .models import AthleteIndex, AthleteSearchEntry, CourseStats, ResultRef

logger = logging.getLogger(__name__)

# Per-race failures that skip the race instead of failing the build
RECOVERABLE_ERRORS = (FileNotFoundError, ResultsParseError, OSError, ValueError)


@dataclass
class _Accumulator:
    full_name: str
    country: str
    country_iso: str
    race_count: int = 1


@dataclass
class _CourseAccumulator:
    editions: list[RaceInfo] = field(default_factory=list)
    finishers: int = 0
    finish: list[int] = field(default_factory=list)
    swim: list[int] = field(default_factory=list)
    bike: list[int] = field(default_factory=list)
    run: list[int] = field(default_factory=list)


class AthleteIndexBuilder:
    """Accumulates races into an AthleteIndex.

    Entries keep first-sighting order; profile references keep the order
    races were added in.
    """

    def __init__(self):
        self._athletes: dict[str, _Accumulator] = {}
        self._profiles: dict[str, list[ResultRef]] = {}
        self._courses: dict[str, _CourseAccumulator] = {}
        self.races_indexed = 0
        self.races_skipped: list[str] = []
        self.total_results = 0

    def add_race(self, race: RaceInfo, results: Iterable[AthleteResult]) -> int:
        """Index one race's finishers. Returns number of results indexed."""
        course = self._courses.setdefault(race.course_key, _CourseAccumulator())
        course.editions.append(race)

        count = 0
        for r in results:
            if not r.is_finisher:
                continue
            count += 1
            key = derive_identity_key(r.full_name, r.country_iso, r.gender)
            existing = self._athletes.get(key)
            if existing:
                existing.race_count += 1
            else:
                self._athletes[key] = _Accumulator(
                    full_name=r.full_name,
                    country=r.country,
                    country_iso=r.country_iso,
                )
            self._profiles.setdefault(key, []).append(ResultRef(race.slug, r.id))

            course.finish.append(r.finish_seconds)
            course.swim.append(r.swim_seconds)
            course.bike.append(r.bike_seconds)
            course.run.append(r.run_seconds)

        course.finishers += count
        self.races_indexed += 1
        self.total_results += count
        return count

    def skip_race(self, race: RaceInfo, reason: Exception) -> None:
        logger.warning(f"Skipping race {race.slug}: {reason}")
        self.races_skipped.append(race.slug)

    def build(self) -> AthleteIndex:
        entries = [
            AthleteSearchEntry(
                key=key,
                full_name=a.full_name,
                country=a.country,
                country_iso=a.country_iso,
                race_count=a.race_count,
            )
            for key, a in self._athletes.items()
        ]
        return AthleteIndex(
            entries=entries,
            profiles={key: list(refs) for key, refs in self._profiles.items()},
            courses=[self._course_stats(k, c) for k, c in self._courses.items() if c.finishers],
            races_indexed=self.races_indexed,
            races_skipped=list(self.races_skipped),
            total_results=self.total_results,
        )

    @staticmethod
    def _course_stats(course_key: str, c: _CourseAccumulator) -> CourseStats:
        latest = max(c.editions, key=lambda r: r.date)
        return CourseStats(
            course_key=course_key,
            display_name=latest.course_name,
            distance=latest.distance,
            editions=len(c.editions),
            total_finishers=c.finishers,
            median_finish_seconds=compute_median(valid_observations(c.finish)),
            median_swim_seconds=compute_median(valid_observations(c.swim)),
            median_bike_seconds=compute_median(valid_observations(c.bike)),
            median_run_seconds=compute_median(valid_observations(c.run)),
        )


def build_athlete_index(
    races: Sequence[RaceInfo],
    load_results: Callable[[str], Sequence[AthleteResult]],
) -> AthleteIndex:
    """Build the athlete index over all races.

    A race whose results are missing or malformed is skipped with a warning;
    the rest of the build carries on.
    """
    builder = AthleteIndexBuilder()
    for race in races:
        try:
            results = load_results(race.slug)
        except RECOVERABLE_ERRORS as e:
            builder.skip_race(race, e)
            continue
        builder.add_race(race, results)

    index = builder.build()
    logger.info(
        f"Indexed {index.total_results} results across {index.races_indexed} races "
        f"({len(index.races_skipped)} skipped) → {len(index.entries)} unique athletes"
    )
    return index
