"""Races feature module — race results parsing, histograms, percentiles, statistics."""

from .models import (
    AthleteResult,
    BinTable,
    Discipline,
    HistogramBin,
    HistogramData,
    RaceInfo,
    RaceStats,
    Scope,
)
from .results_csv import ResultsCsvParser, ResultsParseError
from .catalog import RaceCatalog
from .histogram import (
    BIN_SIZES,
    compute_bins,
    compute_histogram,
    compute_median,
    discipline_histogram,
    histogram_from_bin_table,
    percentile_for,
)
from .precompute import HistogramStore, build_race_histograms
from .stats import calculate_global_stats, calculate_race_stats, rank_percent

__all__ = [
    "AthleteResult",
    "BinTable",
    "Discipline",
    "HistogramBin",
    "HistogramData",
    "RaceInfo",
    "RaceStats",
    "Scope",
    "ResultsCsvParser",
    "ResultsParseError",
    "RaceCatalog",
    "BIN_SIZES",
    "compute_bins",
    "compute_histogram",
    "compute_median",
    "discipline_histogram",
    "histogram_from_bin_table",
    "percentile_for",
    "HistogramStore",
    "build_race_histograms",
    "calculate_global_stats",
    "calculate_race_stats",
    "rank_percent",
]
