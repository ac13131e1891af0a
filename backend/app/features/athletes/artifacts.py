"""Serialized index artifacts (gzipped JSON): writers for the build, readers for serving.

Files, relative to the data directory:
    athlete-index.json.gz     [{key, fullName, country, countryISO, raceCount}, ...]
    athlete-profiles.json.gz  {key: [[raceSlug, resultId], ...]}
    courses.json.gz           [{courseKey, displayName, ...}, ...]
    histograms/{slug}.json.gz {discipline: {overall: table, perAgeGroup: {ag: table}}}

The compact table form of the index
    {countries: {iso: name}, athletes: [[fullName, iso, gender, raceCount], ...]}
is also accepted; keys are re-derived through the identity resolver.
"""

from __future__ import annotations

import gzip
import json
import logging
from pathlib import Path
from typing import Any

from app.features.races.models import BinTable, Discipline, HistogramBin
from app.features.races.precompute import DisciplineTables, RaceHistograms

from .identity import derive_identity_key
from .models import AthleteIndex, AthleteSearchEntry, CourseStats, ResultRef

logger = logging.getLogger(__name__)

SEARCH_INDEX_FILE = "athlete-index.json.gz"
PROFILES_FILE = "athlete-profiles.json.gz"
COURSES_FILE = "courses.json.gz"
HISTOGRAMS_DIR = "histograms"


class IndexLoadError(RuntimeError):
    """A serving artifact is missing or unreadable."""


# =============================================================================
# Low-level I/O
# =============================================================================

def write_json_gz(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(gzip.compress(json.dumps(data, ensure_ascii=False).encode("utf-8")))


def read_json_gz(path: Path) -> Any:
    """Read a gzipped JSON artifact.

    Raises:
        IndexLoadError: file missing, not gzip, or not JSON.
    """
    if not path.exists():
        raise IndexLoadError(f"Artifact not found: {path}")
    try:
        return json.loads(gzip.decompress(path.read_bytes()).decode("utf-8"))
    except (OSError, EOFError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise IndexLoadError(f"Corrupt artifact {path}: {e}") from e


# =============================================================================
# Search index + profiles
# =============================================================================

def entry_to_dict(entry: AthleteSearchEntry) -> dict:
    return {
        "key": entry.key,
        "fullName": entry.full_name,
        "country": entry.country,
        "countryISO": entry.country_iso,
        "raceCount": entry.race_count,
    }


def entries_from_data(data: Any) -> list[AthleteSearchEntry]:
    """Deserialize either index layout into search entries."""
    try:
        if isinstance(data, dict):
            countries = data.get("countries", {})
            return [
                AthleteSearchEntry(
                    key=derive_identity_key(full_name, iso, gender),
                    full_name=full_name,
                    country=countries.get(iso) or iso,
                    country_iso=iso,
                    race_count=int(race_count),
                )
                for full_name, iso, gender, race_count in data["athletes"]
            ]
        return [
            AthleteSearchEntry(
                key=row["key"],
                full_name=row["fullName"],
                country=row.get("country", ""),
                country_iso=row.get("countryISO", ""),
                race_count=int(row.get("raceCount", 0)),
            )
            for row in data
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise IndexLoadError(f"Malformed search index: {e}") from e


def profiles_from_data(data: Any) -> dict[str, list[ResultRef]]:
    try:
        return {
            key: [ResultRef(str(slug), int(result_id)) for slug, result_id in refs]
            for key, refs in data.items()
        }
    except (AttributeError, TypeError, ValueError) as e:
        raise IndexLoadError(f"Malformed profiles index: {e}") from e


def course_to_dict(course: CourseStats) -> dict:
    return {
        "courseKey": course.course_key,
        "displayName": course.display_name,
        "distance": course.distance,
        "editions": course.editions,
        "totalFinishers": course.total_finishers,
        "medianFinishSeconds": course.median_finish_seconds,
        "medianSwimSeconds": course.median_swim_seconds,
        "medianBikeSeconds": course.median_bike_seconds,
        "medianRunSeconds": course.median_run_seconds,
    }


def course_from_dict(data: dict) -> CourseStats:
    return CourseStats(
        course_key=data["courseKey"],
        display_name=data["displayName"],
        distance=data["distance"],
        editions=data["editions"],
        total_finishers=data["totalFinishers"],
        median_finish_seconds=data.get("medianFinishSeconds", 0),
        median_swim_seconds=data.get("medianSwimSeconds", 0),
        median_bike_seconds=data.get("medianBikeSeconds", 0),
        median_run_seconds=data.get("medianRunSeconds", 0),
    )


def write_athlete_index(data_dir: Path, index: AthleteIndex) -> None:
    """Write search index, profiles and course artifacts."""
    write_json_gz(data_dir / SEARCH_INDEX_FILE, [entry_to_dict(e) for e in index.entries])
    write_json_gz(
        data_dir / PROFILES_FILE,
        {key: [list(ref) for ref in refs] for key, refs in index.profiles.items()},
    )
    write_json_gz(data_dir / COURSES_FILE, [course_to_dict(c) for c in index.courses])


def read_search_index(data_dir: Path) -> list[AthleteSearchEntry]:
    entries = entries_from_data(read_json_gz(data_dir / SEARCH_INDEX_FILE))
    logger.info(f"Loaded search index: {len(entries)} athletes")
    return entries


def read_profiles(data_dir: Path) -> dict[str, list[ResultRef]]:
    profiles = profiles_from_data(read_json_gz(data_dir / PROFILES_FILE))
    logger.info(f"Loaded profiles index: {len(profiles)} athletes")
    return profiles


def read_courses(data_dir: Path) -> list[CourseStats]:
    path = data_dir / COURSES_FILE
    if not path.exists():
        return []
    try:
        return [course_from_dict(c) for c in read_json_gz(path)]
    except (KeyError, TypeError) as e:
        raise IndexLoadError(f"Malformed courses artifact: {e}") from e


# =============================================================================
# Precomputed histograms
# =============================================================================

def bin_table_to_dict(table: BinTable) -> dict:
    return {
        "bins": [
            {"label": b.label, "rangeStart": b.range_start, "rangeEnd": b.range_end, "count": b.count}
            for b in table.bins
        ],
        "medianSeconds": table.median_seconds,
        "totalAthletes": table.total,
        "values": [[v, c] for v, c in table.values],
    }


def bin_table_from_dict(data: dict) -> BinTable:
    return BinTable(
        bins=[
            HistogramBin(
                label=b["label"],
                range_start=b["rangeStart"],
                range_end=b["rangeEnd"],
                count=b["count"],
            )
            for b in data.get("bins", [])
        ],
        median_seconds=data.get("medianSeconds", 0),
        total=data.get("totalAthletes", 0),
        values=[(v, c) for v, c in data.get("values", [])],
    )


def write_race_histograms(data_dir: Path, race_slug: str, histograms: RaceHistograms) -> None:
    data = {
        discipline.value: {
            "overall": bin_table_to_dict(tables.overall),
            "perAgeGroup": {ag: bin_table_to_dict(t) for ag, t in tables.per_age_group.items()},
        }
        for discipline, tables in histograms.items()
    }
    write_json_gz(data_dir / HISTOGRAMS_DIR / f"{race_slug}.json.gz", data)


def read_race_histograms(data_dir: Path, race_slug: str) -> RaceHistograms | None:
    """Precomputed tables for a race; None when none were built.

    A corrupt table file is logged and treated as absent so the caller
    falls back to on-demand binning.
    """
    path = data_dir / HISTOGRAMS_DIR / f"{race_slug}.json.gz"
    if not path.exists():
        return None
    try:
        raw = read_json_gz(path)
        return {
            Discipline(name): DisciplineTables(
                overall=bin_table_from_dict(tables["overall"]),
                per_age_group={
                    ag: bin_table_from_dict(t) for ag, t in tables.get("perAgeGroup", {}).items()
                },
            )
            for name, tables in raw.items()
        }
    except (IndexLoadError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Ignoring precomputed histograms for {race_slug}: {e}")
        return None
