"""Precomputed histogram tables per race, discipline and scope.

Built once at index time so result pages need not re-bin a whole race.
`HistogramStore` serves from these tables and falls back to the on-demand
path when a race has no table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .catalog import RaceCatalog
from .histogram import (
    BIN_SIZES,
    compute_bins,
    discipline_histogram,
    histogram_from_bin_table,
)
from .models import AthleteResult, BinTable, Discipline, HistogramData, Scope

logger = logging.getLogger(__name__)


@dataclass
class DisciplineTables:
    """Bin tables for one discipline of one race."""

    overall: BinTable
    per_age_group: dict[str, BinTable] = field(default_factory=dict)

    def table_for(self, scope: Scope | str, age_group: str) -> BinTable | None:
        if Scope(scope) == Scope.OVERALL:
            return self.overall
        return self.per_age_group.get(age_group)


RaceHistograms = dict[Discipline, DisciplineTables]


def build_race_histograms(results: Sequence[AthleteResult]) -> RaceHistograms:
    """Bin every discipline overall and per age group."""
    age_groups: dict[str, list[AthleteResult]] = {}
    for r in results:
        age_groups.setdefault(r.age_group or "", []).append(r)

    data: RaceHistograms = {}
    for discipline in Discipline:
        bin_size = BIN_SIZES[discipline]
        overall = compute_bins((r.seconds_for(discipline) for r in results), bin_size)
        per_age_group = {
            ag: compute_bins((r.seconds_for(discipline) for r in group), bin_size)
            for ag, group in age_groups.items()
        }
        data[discipline] = DisciplineTables(overall=overall, per_age_group=per_age_group)
    return data


class HistogramStore:
    """Serves athlete histograms, precomputed when available.

    Usage:
        store = HistogramStore(catalog, loader=lambda slug: read_race_histograms(path, slug))
        data = store.get_histogram("im703-new-york-2025", athlete, "swim", "overall")
    """

    def __init__(
        self,
        catalog: RaceCatalog,
        loader: Callable[[str], RaceHistograms | None] | None = None,
    ):
        self.catalog = catalog
        self.loader = loader
        self._tables: dict[str, RaceHistograms | None] = {}

    def tables_for(self, race_slug: str) -> RaceHistograms | None:
        if race_slug not in self._tables:
            self._tables[race_slug] = self.loader(race_slug) if self.loader else None
        return self._tables[race_slug]

    def get_histogram(
        self,
        race_slug: str,
        athlete: AthleteResult,
        discipline: Discipline | str,
        scope: Scope | str = Scope.OVERALL,
    ) -> HistogramData:
        discipline = Discipline(discipline)
        tables = self.tables_for(race_slug)
        if tables and discipline in tables:
            table = tables[discipline].table_for(scope, athlete.age_group or "")
            # Tables without exact values cannot reproduce the percentile.
            if table is not None and (table.total == 0 or table.values):
                return histogram_from_bin_table(table, athlete.seconds_for(discipline))

        logger.debug(f"No precomputed {discipline.value}/{Scope(scope).value} table for {race_slug}")
        results = self.catalog.load_results(race_slug)
        return discipline_histogram(results, athlete, discipline, scope)
