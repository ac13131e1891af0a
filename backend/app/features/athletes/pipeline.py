"""Offline build: race CSVs → search index, profiles, courses and histogram artifacts."""

from __future__ import annotations

import logging
from pathlib import Path

from app.features.races.catalog import RaceCatalog
from app.features.races.precompute import build_race_histograms

from .artifacts import write_athlete_index, write_race_histograms
from .index_builder import RECOVERABLE_ERRORS, build_athlete_index
from .models import AthleteIndex

logger = logging.getLogger(__name__)


def build_artifacts(
    catalog: RaceCatalog,
    out_dir: Path | None = None,
    with_histograms: bool = True,
) -> AthleteIndex:
    """Build every serving artifact from the catalog's races.

    Args:
        catalog: Source of the manifest and result CSVs.
        out_dir: Where artifacts go (defaults to the catalog's data dir).
        with_histograms: Also precompute per-race histogram tables.

    Returns:
        The built AthleteIndex (already written to disk).
    """
    out_dir = Path(out_dir or catalog.data_dir)
    index = build_athlete_index(catalog.races, catalog.load_results)
    write_athlete_index(out_dir, index)

    if with_histograms:
        written = 0
        for race in catalog.races:
            if race.slug in index.races_skipped:
                continue
            try:
                results = catalog.load_results(race.slug)
            except RECOVERABLE_ERRORS as e:
                logger.warning(f"No histograms for {race.slug}: {e}")
                continue
            write_race_histograms(out_dir, race.slug, build_race_histograms(results))
            written += 1
        logger.info(f"Precomputed histograms for {written} races")

    return index
