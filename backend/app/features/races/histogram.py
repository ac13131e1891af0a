"""Histogram & percentile engine for discipline splits and finish times.

Two paths produce the same HistogramData:
- on demand: `compute_histogram(observations, target, bin_size)`
- precomputed: `histogram_from_bin_table(table, target)` over a BinTable
  built at index time by `compute_bins`

Both use half-open bins [start, end) and the "count strictly slower" rule
for the percentile, so results are identical for the same field.
"""

from __future__ import annotations

from bisect import bisect_right
from collections import Counter
from typing import Iterable, Sequence

from app.shared.formatters import format_seconds_short, round_half_up

from .models import (
    AthleteResult,
    BinTable,
    Discipline,
    HistogramBin,
    HistogramData,
    Scope,
)

# Bin width per discipline, seconds
BIN_SIZES: dict[Discipline, int] = {
    Discipline.SWIM: 300,  # 5-minute bins
    Discipline.BIKE: 600,  # 10-minute bins
    Discipline.RUN: 600,
    Discipline.FINISH: 600,
    Discipline.T1: 60,  # 1-minute bins
    Discipline.T2: 60,
}


def bin_size_for(discipline: Discipline | str) -> int:
    return BIN_SIZES[Discipline(discipline)]


def valid_observations(observations: Iterable[int | float | None]) -> list[int | float]:
    """Drop unrecorded values (None / 0 / negative)."""
    return [v for v in observations if v is not None and v > 0]


def recorded_target(target: int | float | None) -> int | float | None:
    """The target itself, or None when it was not recorded (None / 0 / negative)."""
    if target is None or target <= 0:
        return None
    return target


def compute_median(values: Sequence[int | float]) -> float:
    """Exact order-statistic median; mean of the two middle values for even sizes."""
    if not values:
        return 0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def bin_edges(values: Sequence[int | float], bin_size: int) -> list[int]:
    """Bin starts covering every value.

    Lower edge is floor(min) aligned; the upper edge is the aligned start of
    the bin holding max plus one width, so a max sitting exactly on a bin
    boundary still gets its own bin.
    """
    if bin_size <= 0:
        raise ValueError(f"bin_size must be positive, got {bin_size}")
    low = int(min(values) // bin_size) * bin_size
    high = int(max(values) // bin_size) * bin_size + bin_size
    return list(range(low, high, bin_size))


def compute_bins(observations: Iterable[int | float | None], bin_size: int) -> BinTable:
    """Bin a field of observations (precomputable, no target)."""
    valid = valid_observations(observations)
    if not valid:
        return BinTable()

    counts = Counter(int(start // bin_size) * bin_size for start in valid)
    bins = [
        HistogramBin(
            label=format_seconds_short(start),
            range_start=start,
            range_end=start + bin_size,
            count=counts.get(start, 0),
        )
        for start in bin_edges(valid, bin_size)
    ]
    values = sorted(Counter(valid).items())
    return BinTable(
        bins=bins,
        median_seconds=compute_median(valid),
        total=len(valid),
        values=values,
    )


def percentile_for(observations: Iterable[int | float | None], target: int | float | None) -> int:
    """Share of the field (0-100) strictly slower than the target.

    Higher is better: 100 means nobody in the field was faster-or-equal
    except the target itself.
    """
    valid = valid_observations(observations)
    target = recorded_target(target)
    if not valid or target is None:
        return 0
    slower = sum(1 for v in valid if v > target)
    return round_half_up(slower / len(valid) * 100)


def compute_histogram(
    observations: Iterable[int | float | None],
    target: int | float | None,
    bin_size: int,
) -> HistogramData:
    """On-demand histogram of a field with the target's bin and percentile.

    An empty field is a valid "no data" state: no bins, percentile 0,
    median 0. A target that was not recorded (None or 0) gets no bin,
    percentile 0 and `target_seconds=None`.
    """
    target = recorded_target(target)
    valid = valid_observations(observations)
    if not valid:
        return HistogramData(target_seconds=target)

    table = compute_bins(valid, bin_size)
    return _apply_target(table.bins, target, table.median_seconds, percentile_for(valid, target))


def histogram_from_bin_table(table: BinTable, target: int | float | None) -> HistogramData:
    """Precomputed path: same result as `compute_histogram` over the same field."""
    target = recorded_target(target)
    if table.total == 0:
        return HistogramData(target_seconds=target)

    if target is None:
        percentile = 0
    else:
        seconds = [v for v, _ in table.values]
        first_slower = bisect_right(seconds, target)
        slower = sum(count for _, count in table.values[first_slower:])
        percentile = round_half_up(slower / table.total * 100)

    return _apply_target(table.bins, target, table.median_seconds, percentile)


def _apply_target(
    bins: Sequence[HistogramBin],
    target: int | float | None,
    median: float,
    percentile: int,
) -> HistogramData:
    target = recorded_target(target)
    marked = [
        HistogramBin(
            label=b.label,
            range_start=b.range_start,
            range_end=b.range_end,
            count=b.count,
            is_target=target is not None and b.range_start <= target < b.range_end,
        )
        for b in bins
    ]
    return HistogramData(
        bins=marked,
        target_seconds=target,
        percentile=percentile,
        median_seconds=median,
    )


def comparison_pool(
    results: Sequence[AthleteResult],
    athlete: AthleteResult,
    scope: Scope | str,
) -> list[AthleteResult]:
    """Field the athlete is compared against."""
    if Scope(scope) == Scope.AGE_GROUP:
        return [r for r in results if r.age_group == athlete.age_group]
    return list(results)


def discipline_histogram(
    results: Sequence[AthleteResult],
    athlete: AthleteResult,
    discipline: Discipline | str,
    scope: Scope | str = Scope.OVERALL,
) -> HistogramData:
    """On-demand histogram for one athlete's split within a race."""
    discipline = Discipline(discipline)
    pool = comparison_pool(results, athlete, scope)
    return compute_histogram(
        [r.seconds_for(discipline) for r in pool],
        athlete.seconds_for(discipline),
        BIN_SIZES[discipline],
    )
