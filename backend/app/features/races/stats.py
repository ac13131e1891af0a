"""Statistics for race results: per-race summaries and dataset-wide counters."""

from __future__ import annotations

from typing import Sequence

from app.shared.formatters import round_half_up

from .histogram import BIN_SIZES, compute_bins, compute_median, valid_observations
from .models import (
    AthleteResult,
    Discipline,
    DisciplineStats,
    GlobalStats,
    GroupBreakdown,
    LeaderboardEntry,
    RaceInfo,
    RaceStats,
)

LEADERBOARD_SIZE = 10

# Disciplines shown on a race summary (transitions are too noisy for it)
SUMMARY_DISCIPLINES = (Discipline.SWIM, Discipline.BIKE, Discipline.RUN, Discipline.FINISH)


def calculate_race_stats(
    results: Sequence[AthleteResult],
    leaderboard_size: int = LEADERBOARD_SIZE,
) -> RaceStats:
    """Calculate aggregate statistics for a race's finishers.

    Args:
        results: Finisher results, any order.
        leaderboard_size: Number of top overall finishers to include.

    Returns:
        RaceStats with discipline spreads, group breakdowns, leaderboard
        and per-discipline bin tables.
    """
    total = len(results)
    if not total:
        return RaceStats(total_finishers=0)

    disciplines = []
    histograms = {}
    for discipline in SUMMARY_DISCIPLINES:
        values = valid_observations(r.seconds_for(discipline) for r in results)
        histograms[discipline.value] = compute_bins(values, BIN_SIZES[discipline])
        if not values:
            continue
        disciplines.append(
            DisciplineStats(
                discipline=discipline.value,
                fastest=min(values),
                slowest=max(values),
                median=compute_median(values),
                average=round(sum(values) / len(values), 1),
            )
        )

    return RaceStats(
        total_finishers=total,
        disciplines=disciplines,
        gender_breakdown=_breakdown(results, lambda r: r.gender),
        age_group_breakdown=_breakdown(results, lambda r: r.age_group),
        leaderboard=_leaderboard(results, leaderboard_size),
        histograms=histograms,
    )


def rank_percent(rank: int | None, total: int) -> int | None:
    """'Top X%' for a rank within a field of `total`, never below 1."""
    if not rank or total <= 0:
        return None
    return max(1, round_half_up(rank / total * 100))


def calculate_global_stats(races: Sequence[RaceInfo], unique_athletes: int) -> GlobalStats:
    """Dataset-wide counters over the race manifest."""
    dated = sorted((r for r in races if r.date), key=lambda r: r.date)
    full_courses = {r.course_key for r in races if r.distance == "140.6"}
    half_courses = {r.course_key for r in races if r.distance == "70.3"}
    return GlobalStats(
        race_count=len(races),
        total_results=sum(r.finishers for r in races),
        unique_athletes=unique_athletes,
        full_course_count=len(full_courses),
        half_course_count=len(half_courses),
        earliest_race=dated[0] if dated else None,
        most_recent_race=dated[-1] if dated else None,
    )


def _breakdown(results: Sequence[AthleteResult], key) -> list[GroupBreakdown]:
    groups: dict[str, list[AthleteResult]] = {}
    for r in results:
        groups.setdefault(key(r) or "", []).append(r)

    total = len(results)
    breakdown = []
    for group, members in sorted(groups.items()):
        finishes = valid_observations(r.finish_seconds for r in members)
        breakdown.append(
            GroupBreakdown(
                group=group,
                count=len(members),
                percentage=round(len(members) / total * 100, 1),
                median_finish=compute_median(finishes),
                fastest_finish=min(finishes) if finishes else 0,
            )
        )
    return breakdown


def _leaderboard(results: Sequence[AthleteResult], size: int) -> list[LeaderboardEntry]:
    ranked = sorted(
        (r for r in results if r.overall_rank),
        key=lambda r: r.overall_rank,
    )
    return [
        LeaderboardEntry(
            id=r.id,
            rank=r.overall_rank,
            full_name=r.full_name,
            country=r.country,
            country_iso=r.country_iso,
            age_group=r.age_group,
            gender=r.gender,
            finish_time=r.finish_time,
            swim_time=r.swim_time,
            bike_time=r.bike_time,
            run_time=r.run_time,
        )
        for r in ranked[:size]
    ]
