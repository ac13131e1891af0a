"""
Races API Routes

Endpoints for the race manifest, race statistics, single results and
their percentile histograms.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from app.api.deps import get_catalog, get_histogram_store
from app.features.races import (
    AthleteResult,
    BinTable,
    Discipline,
    HistogramData,
    HistogramStore,
    RaceCatalog,
    RaceInfo,
    ResultsParseError,
    Scope,
    calculate_race_stats,
    rank_percent,
)
from app.shared.formatters import format_time

router = APIRouter()


# === Pydantic schemas ===


class RaceSchema(BaseModel):
    slug: str
    name: str
    date: str
    location: str = ""
    finishers: int = 0
    distance: str


class HistogramBinSchema(BaseModel):
    label: str
    range_start: int
    range_end: int
    count: int
    is_target: bool = False


class HistogramSchema(BaseModel):
    bins: list[HistogramBinSchema] = []
    target_seconds: Optional[int] = None
    percentile: int = 0
    median_seconds: float = 0


class RaceHistogramSchema(BaseModel):
    bins: list[HistogramBinSchema] = []
    median_seconds: float = 0
    total_athletes: int = 0


class DisciplineStatsSchema(BaseModel):
    discipline: str
    fastest: str
    slowest: str
    median: str
    average: str


class GroupBreakdownSchema(BaseModel):
    group: str
    count: int
    percentage: float
    median_finish: str
    fastest_finish: str


class LeaderboardEntrySchema(BaseModel):
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


class RaceStatsSchema(BaseModel):
    total_finishers: int
    disciplines: list[DisciplineStatsSchema] = []
    gender_breakdown: list[GroupBreakdownSchema] = []
    age_group_breakdown: list[GroupBreakdownSchema] = []
    leaderboard: list[LeaderboardEntrySchema] = []
    histograms: dict[str, RaceHistogramSchema] = {}


class DisciplineHistogramsSchema(BaseModel):
    discipline: str
    time: str
    overall: HistogramSchema
    age_group: HistogramSchema


class ResultSchema(BaseModel):
    id: int
    full_name: str
    bib: str
    age_group: str
    gender: str
    location: str
    country: str
    country_iso: str
    swim_time: str
    bike_time: str
    run_time: str
    t1_time: str
    t2_time: str
    finish_time: str
    overall_rank: Optional[int] = None
    gender_rank: Optional[int] = None
    age_group_rank: Optional[int] = None
    overall_top_percent: Optional[int] = None
    gender_top_percent: Optional[int] = None
    age_group_top_percent: Optional[int] = None


class ResultDetailSchema(BaseModel):
    race: RaceSchema
    result: ResultSchema
    histograms: list[DisciplineHistogramsSchema] = []


# === Helpers ===


def _race_schema(race: RaceInfo) -> RaceSchema:
    return RaceSchema(
        slug=race.slug,
        name=race.name,
        date=race.date,
        location=race.location,
        finishers=race.finishers,
        distance=race.distance,
    )


def _histogram_schema(data: HistogramData) -> HistogramSchema:
    return HistogramSchema(
        bins=[
            HistogramBinSchema(
                label=b.label,
                range_start=b.range_start,
                range_end=b.range_end,
                count=b.count,
                is_target=b.is_target,
            )
            for b in data.bins
        ],
        target_seconds=data.target_seconds,
        percentile=data.percentile,
        median_seconds=data.median_seconds,
    )


def _race_histogram_schema(table: BinTable) -> RaceHistogramSchema:
    return RaceHistogramSchema(
        bins=[
            HistogramBinSchema(
                label=b.label,
                range_start=b.range_start,
                range_end=b.range_end,
                count=b.count,
            )
            for b in table.bins
        ],
        median_seconds=table.median_seconds,
        total_athletes=table.total,
    )


def _require_race(catalog: RaceCatalog, slug: str) -> RaceInfo:
    race = catalog.get_race(slug)
    if not race:
        raise HTTPException(status_code=404, detail=f"Race not found: {slug}")
    return race


def _require_results(catalog: RaceCatalog, slug: str) -> list[AthleteResult]:
    try:
        return catalog.load_results(slug)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"Results not available: {slug}")
    except ResultsParseError as e:
        raise HTTPException(status_code=503, detail=f"Results unreadable for {slug}: {e}")


def _require_result(results: list[AthleteResult], result_id: int) -> AthleteResult:
    athlete = next((r for r in results if r.id == result_id), None)
    if not athlete:
        raise HTTPException(status_code=404, detail=f"Result not found: {result_id}")
    return athlete


# === Endpoints ===


@router.get("", response_model=list[RaceSchema])
async def list_races(catalog: RaceCatalog = Depends(get_catalog)):
    """Race manifest, most recent first."""
    races = sorted(catalog.races, key=lambda r: r.date, reverse=True)
    return [_race_schema(r) for r in races]


@router.get("/{slug}", response_model=RaceSchema)
async def get_race(slug: str, catalog: RaceCatalog = Depends(get_catalog)):
    """Get single race details."""
    return _race_schema(_require_race(catalog, slug))


@router.get("/{slug}/stats", response_model=RaceStatsSchema)
async def get_race_stats(slug: str, catalog: RaceCatalog = Depends(get_catalog)):
    """Discipline spreads, gender/age-group breakdowns, leaderboard, histograms."""
    _require_race(catalog, slug)
    stats = calculate_race_stats(_require_results(catalog, slug))

    return RaceStatsSchema(
        total_finishers=stats.total_finishers,
        disciplines=[
            DisciplineStatsSchema(
                discipline=d.discipline,
                fastest=format_time(d.fastest),
                slowest=format_time(d.slowest),
                median=format_time(d.median),
                average=format_time(d.average),
            )
            for d in stats.disciplines
        ],
        gender_breakdown=[
            GroupBreakdownSchema(
                group=g.group,
                count=g.count,
                percentage=g.percentage,
                median_finish=format_time(g.median_finish),
                fastest_finish=format_time(g.fastest_finish),
            )
            for g in stats.gender_breakdown
        ],
        age_group_breakdown=[
            GroupBreakdownSchema(
                group=g.group,
                count=g.count,
                percentage=g.percentage,
                median_finish=format_time(g.median_finish),
                fastest_finish=format_time(g.fastest_finish),
            )
            for g in stats.age_group_breakdown
        ],
        leaderboard=[LeaderboardEntrySchema(**vars(e)) for e in stats.leaderboard],
        histograms={k: _race_histogram_schema(t) for k, t in stats.histograms.items()},
    )


@router.get("/{slug}/results/{result_id}", response_model=ResultDetailSchema)
async def get_result(
    slug: str,
    result_id: int,
    catalog: RaceCatalog = Depends(get_catalog),
    store: HistogramStore = Depends(get_histogram_store),
):
    """One result with rank percentages and overall/age-group histograms per discipline."""
    race = _require_race(catalog, slug)
    results = _require_results(catalog, slug)
    athlete = _require_result(results, result_id)

    gender_total = sum(1 for r in results if r.gender == athlete.gender)
    age_group_total = sum(1 for r in results if r.age_group == athlete.age_group)

    histograms = [
        DisciplineHistogramsSchema(
            discipline=d.value,
            time=getattr(athlete, f"{d.value}_time"),
            overall=_histogram_schema(store.get_histogram(slug, athlete, d, Scope.OVERALL)),
            age_group=_histogram_schema(store.get_histogram(slug, athlete, d, Scope.AGE_GROUP)),
        )
        for d in Discipline
    ]

    return ResultDetailSchema(
        race=_race_schema(race),
        result=ResultSchema(
            id=athlete.id,
            full_name=athlete.full_name,
            bib=athlete.bib,
            age_group=athlete.age_group,
            gender=athlete.gender,
            location=", ".join(p for p in (athlete.city, athlete.state, athlete.country) if p),
            country=athlete.country,
            country_iso=athlete.country_iso,
            swim_time=athlete.swim_time,
            bike_time=athlete.bike_time,
            run_time=athlete.run_time,
            t1_time=athlete.t1_time,
            t2_time=athlete.t2_time,
            finish_time=athlete.finish_time,
            overall_rank=athlete.overall_rank,
            gender_rank=athlete.gender_rank,
            age_group_rank=athlete.age_group_rank,
            overall_top_percent=rank_percent(athlete.overall_rank, len(results)),
            gender_top_percent=rank_percent(athlete.gender_rank, gender_total),
            age_group_top_percent=rank_percent(athlete.age_group_rank, age_group_total),
        ),
        histograms=histograms,
    )


@router.get("/{slug}/results/{result_id}/histogram", response_model=HistogramSchema)
async def get_result_histogram(
    slug: str,
    result_id: int,
    discipline: Discipline = Query(default=Discipline.FINISH),
    scope: Scope = Query(default=Scope.OVERALL),
    catalog: RaceCatalog = Depends(get_catalog),
    store: HistogramStore = Depends(get_histogram_store),
):
    """Histogram of one discipline with the athlete's bin and percentile."""
    _require_race(catalog, slug)
    athlete = _require_result(_require_results(catalog, slug), result_id)
    return _histogram_schema(store.get_histogram(slug, athlete, discipline, scope))
