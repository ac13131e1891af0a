"""
Tests for precomputed histogram tables and HistogramStore.
"""

import pytest

from app.features.athletes.artifacts import read_race_histograms, write_race_histograms
from app.features.races.catalog import RaceCatalog
from app.features.races.histogram import discipline_histogram
from app.features.races.models import BinTable, Discipline, Scope
from app.features.races.precompute import HistogramStore, build_race_histograms


@pytest.fixture
def field(make_result):
    return [
        make_result("A", age_group="F30-34", swim_seconds=1800, bike_seconds=9000,
                    run_seconds=6000, t1_seconds=150, t2_seconds=90, finish_seconds=17040),
        make_result("B", age_group="F30-34", swim_seconds=2000, bike_seconds=9500,
                    run_seconds=6500, t1_seconds=200, t2_seconds=120, finish_seconds=18320),
        make_result("C", age_group="F35-39", swim_seconds=2200, bike_seconds=9100,
                    run_seconds=7000, t1_seconds=240, t2_seconds=None, finish_seconds=18700),
        make_result("D", age_group="F35-39", swim_seconds=None, bike_seconds=10000,
                    run_seconds=7600, t1_seconds=300, t2_seconds=180, finish_seconds=20200),
        make_result("E", age_group="", swim_seconds=2500, bike_seconds=11000,
                    run_seconds=8000, t1_seconds=360, t2_seconds=240, finish_seconds=22100),
    ]


class FakeCatalog:
    """Serves results from memory and counts loads."""

    def __init__(self, results):
        self.results = results
        self.loads = 0

    def load_results(self, slug):
        self.loads += 1
        return self.results


class TestBuildRaceHistograms:
    """Tables for every discipline and scope."""

    def test_all_disciplines(self, field):
        tables = build_race_histograms(field)
        assert set(tables) == set(Discipline)

    def test_age_groups(self, field):
        tables = build_race_histograms(field)
        assert set(tables[Discipline.SWIM].per_age_group) == {"F30-34", "F35-39", ""}
        assert tables[Discipline.SWIM].overall.total == 4
        assert tables[Discipline.SWIM].per_age_group["F35-39"].total == 1

    def test_table_for(self, field):
        tables = build_race_histograms(field)[Discipline.FINISH]
        assert tables.table_for(Scope.OVERALL, "F30-34") is tables.overall
        assert tables.table_for("age_group", "F30-34").total == 2
        assert tables.table_for("age_group", "M99") is None


class TestPrecomputedMatchesOnDemand:
    """Both paths give identical answers for every athlete."""

    def test_every_athlete_discipline_scope(self, field):
        store = HistogramStore(FakeCatalog(field), loader=lambda slug: build_race_histograms(field))
        for athlete in field:
            for discipline in Discipline:
                for scope in Scope:
                    expected = discipline_histogram(field, athlete, discipline, scope)
                    assert store.get_histogram("race", athlete, discipline, scope) == expected

    def test_after_artifact_round_trip(self, field, tmp_path):
        write_race_histograms(tmp_path, "race", build_race_histograms(field))
        catalog = FakeCatalog(field)
        store = HistogramStore(catalog, loader=lambda slug: read_race_histograms(tmp_path, slug))
        for athlete in field:
            for discipline in Discipline:
                for scope in Scope:
                    expected = discipline_histogram(field, athlete, discipline, scope)
                    assert store.get_histogram("race", athlete, discipline, scope) == expected
        assert catalog.loads == 0


class TestHistogramStoreFallback:
    """On-demand path when no table is available."""

    def test_no_loader(self, field):
        catalog = FakeCatalog(field)
        store = HistogramStore(catalog)
        data = store.get_histogram("race", field[0], "swim")
        assert data == discipline_histogram(field, field[0], Discipline.SWIM, Scope.OVERALL)
        assert catalog.loads == 1

    def test_loader_returns_none(self, field):
        catalog = FakeCatalog(field)
        store = HistogramStore(catalog, loader=lambda slug: None)
        store.get_histogram("race", field[1], "run", "age_group")
        assert catalog.loads == 1

    def test_table_without_values(self, field):
        tables = build_race_histograms(field)
        overall = tables[Discipline.BIKE].overall
        tables[Discipline.BIKE].overall = BinTable(
            bins=overall.bins, median_seconds=overall.median_seconds, total=overall.total,
        )
        catalog = FakeCatalog(field)
        store = HistogramStore(catalog, loader=lambda slug: tables)
        data = store.get_histogram("race", field[0], "bike")
        assert data == discipline_histogram(field, field[0], Discipline.BIKE, Scope.OVERALL)
        assert catalog.loads == 1

    def test_loader_called_once_per_race(self, field):
        calls = []

        def loader(slug):
            calls.append(slug)
            return None

        store = HistogramStore(FakeCatalog(field), loader=loader)
        store.get_histogram("race", field[0], "swim")
        store.get_histogram("race", field[1], "bike")
        assert calls == ["race"]

    def test_on_disk_catalog(self, data_dir):
        catalog = RaceCatalog(data_dir)
        store = HistogramStore(catalog)
        jane = catalog.get_result("im703-new-york-2025", 1)
        data = store.get_histogram("im703-new-york-2025", jane, "finish", "overall")
        # Mary 17200, Jane 17900, Jose 18600
        assert data.percentile == 33
        assert data.median_seconds == 17900
        assert sum(b.count for b in data.bins) == 3
