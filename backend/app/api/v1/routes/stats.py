"""
Stats API Routes

Dataset-wide counters and per-course difficulty aggregates.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.api.deps import get_catalog, get_courses, get_search_service
from app.features.athletes import AthleteSearchService, CourseStats
from app.features.races import RaceCatalog, calculate_global_stats

router = APIRouter()


class RaceRefSchema(BaseModel):
    slug: str
    name: str
    date: str


class GlobalStatsSchema(BaseModel):
    race_count: int
    total_results: int
    unique_athletes: int
    full_course_count: int
    half_course_count: int
    earliest_race: Optional[RaceRefSchema] = None
    most_recent_race: Optional[RaceRefSchema] = None


class CourseStatsSchema(BaseModel):
    course_key: str
    display_name: str
    distance: str
    editions: int
    total_finishers: int
    median_finish_seconds: float
    median_swim_seconds: float
    median_bike_seconds: float
    median_run_seconds: float


@router.get("/stats", response_model=GlobalStatsSchema)
async def get_global_stats(
    catalog: RaceCatalog = Depends(get_catalog),
    service: AthleteSearchService = Depends(get_search_service),
):
    """Totals across every race in the manifest."""
    stats = calculate_global_stats(catalog.races, service.unique_athletes)

    def ref(race):
        return RaceRefSchema(slug=race.slug, name=race.name, date=race.date) if race else None

    return GlobalStatsSchema(
        race_count=stats.race_count,
        total_results=stats.total_results,
        unique_athletes=stats.unique_athletes,
        full_course_count=stats.full_course_count,
        half_course_count=stats.half_course_count,
        earliest_race=ref(stats.earliest_race),
        most_recent_race=ref(stats.most_recent_race),
    )


@router.get("/courses", response_model=list[CourseStatsSchema])
async def list_courses(
    distance: Optional[Literal["70.3", "140.6"]] = Query(default=None),
    courses: list[CourseStats] = Depends(get_courses),
):
    """Courses ranked by median finish time, fastest first."""
    selected = [c for c in courses if distance is None or c.distance == distance]
    selected.sort(key=lambda c: (c.median_finish_seconds <= 0, c.median_finish_seconds))
    return [CourseStatsSchema(**vars(c)) for c in selected]
