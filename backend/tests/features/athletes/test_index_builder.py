"""
Tests for the athlete index builder.
"""

import logging

import pytest

from app.features.athletes.identity import derive_identity_key
from app.features.athletes.index_builder import AthleteIndexBuilder, build_athlete_index
from app.features.athletes.models import ResultRef
from app.features.races.catalog import RaceCatalog
from app.features.races.models import RaceInfo
from app.features.races.results_csv import ResultsParseError

from conftest import csv_row, write_race_csv


JANE_KEY = derive_identity_key("Jane Doe", "USA", "Female")


@pytest.fixture
def results_by_race(make_result):
    return {
        "im703-new-york-2024": [
            make_result("Jane Doe", id=0, finish_seconds=17300, swim_seconds=2000),
            make_result("José García", id=1, gender="Male", country="Spain", country_iso="ESP",
                        age_group="M35-39", finish_seconds=18900),
            make_result("Bob Smith", id=2, gender="Male", status="DNF"),
        ],
        "im703-new-york-2025": [
            make_result("Jose Garcia", id=0, gender="Male", country="Spain", country_iso="ESP",
                        age_group="M35-39", finish_seconds=18600),
            make_result("Jane Doe", id=1, finish_seconds=17900, swim_seconds=2100),
        ],
    }


# =============================================================================
# Deduplication
# =============================================================================

class TestDeduplication:
    """Same athlete across races collapses to one entry."""

    def test_one_entry_per_athlete(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        assert len(index.entries) == 2
        keys = [e.key for e in index.entries]
        assert keys.count(JANE_KEY) == 1

    def test_race_count(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        jane = next(e for e in index.entries if e.key == JANE_KEY)
        assert jane.race_count == 2
        assert jane.full_name == "Jane Doe"
        assert jane.country_iso == "USA"

    def test_accented_spelling_merges(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        jose = next(e for e in index.entries if e.country_iso == "ESP")
        assert jose.race_count == 2
        # First sighting wins the display name
        assert jose.full_name == "José García"

    def test_non_finishers_ignored(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        assert all(e.full_name != "Bob Smith" for e in index.entries)
        assert index.total_results == 4

    def test_entries_in_first_sighting_order(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        assert [e.full_name for e in index.entries] == ["Jane Doe", "José García"]

    def test_race_count_matches_profile_length(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        for e in index.entries:
            assert e.race_count == len(index.profiles[e.key])


# =============================================================================
# Profiles
# =============================================================================

class TestProfiles:
    """Key → result references."""

    def test_refs_in_encounter_order(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        assert index.profiles[JANE_KEY] == [
            ResultRef("im703-new-york-2024", 0),
            ResultRef("im703-new-york-2025", 1),
        ]

    def test_refs_point_at_row_ids(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        for key, refs in index.profiles.items():
            for ref in refs:
                row = next(r for r in results_by_race[ref.race_slug] if r.id == ref.result_id)
                assert derive_identity_key(row.full_name, row.country_iso, row.gender) == key


# =============================================================================
# Failure handling
# =============================================================================

class TestSkippedRaces:
    """Missing or malformed races don't stop the build."""

    @pytest.mark.parametrize("error", [
        FileNotFoundError("gone"),
        ResultsParseError("Missing columns: FullName"),
        OSError("disk"),
    ])
    def test_bad_race_skipped(self, two_races, results_by_race, error, caplog):
        def load(slug):
            if slug == "im703-new-york-2024":
                raise error
            return results_by_race[slug]

        with caplog.at_level(logging.WARNING):
            index = build_athlete_index(two_races, load)

        assert index.races_skipped == ["im703-new-york-2024"]
        assert index.races_indexed == 1
        jane = next(e for e in index.entries if e.key == JANE_KEY)
        assert jane.race_count == 1
        assert "im703-new-york-2024" in caplog.text

    def test_unparseable_csv_skipped(self, tmp_path, caplog):
        races = [
            RaceInfo(slug="good-2024", name="Good 2024", date="2024-05-01"),
            RaceInfo(slug="bad-2024", name="Bad 2024", date="2024-06-01"),
        ]
        write_race_csv(tmp_path / "good-2024.csv", [csv_row("Jane Doe")])
        write_race_csv(tmp_path / "bad-2024.csv", [csv_row("x" * 200_000)])
        catalog = RaceCatalog(tmp_path)

        with caplog.at_level(logging.WARNING):
            index = build_athlete_index(races, catalog.load_results)

        assert index.races_skipped == ["bad-2024"]
        assert [e.full_name for e in index.entries] == ["Jane Doe"]
        assert "bad-2024" in caplog.text

    def test_all_races_missing(self, two_races):
        def load(slug):
            raise FileNotFoundError(slug)

        index = build_athlete_index(two_races, load)
        assert index.entries == []
        assert index.profiles == {}
        assert index.courses == []
        assert len(index.races_skipped) == 2

    def test_unexpected_error_propagates(self, two_races):
        def load(slug):
            raise KeyError(slug)

        with pytest.raises(KeyError):
            build_athlete_index(two_races, load)


# =============================================================================
# Course aggregates
# =============================================================================

class TestCourseStats:
    """Per-course aggregates across editions."""

    def test_editions_grouped(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        assert len(index.courses) == 1
        course = index.courses[0]
        assert course.course_key == "im703-new-york"
        assert course.display_name == "IRONMAN 70.3 New York"
        assert course.distance == "70.3"
        assert course.editions == 2
        assert course.total_finishers == 4

    def test_medians_exclude_missing(self, two_races, results_by_race):
        index = build_athlete_index(two_races, results_by_race.__getitem__)
        course = index.courses[0]
        # finishes: 17300, 18900, 18600, 17900 → (17900 + 18600) / 2
        assert course.median_finish_seconds == 18250
        # swim recorded only for Jane: 2000, 2100
        assert course.median_swim_seconds == 2050
        assert course.median_bike_seconds == 0

    def test_full_distance_course(self, make_result):
        race = RaceInfo(slug="im-lake-placid-2025", name="IRONMAN Lake Placid 2025", date="2025-07-20")
        builder = AthleteIndexBuilder()
        builder.add_race(race, [make_result(finish_seconds=40000)])
        course = builder.build().courses[0]
        assert course.distance == "140.6"
        assert course.median_finish_seconds == 40000
