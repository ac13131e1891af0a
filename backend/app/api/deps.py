"""
API Dependencies

Services live on `app.state`, created once in the lifespan handler.
"""

from fastapi import Request

from app.features.athletes import AthleteSearchService, CourseStats
from app.features.races import HistogramStore, RaceCatalog


def get_catalog(request: Request) -> RaceCatalog:
    return request.app.state.catalog


def get_search_service(request: Request) -> AthleteSearchService:
    return request.app.state.search_service


def get_histogram_store(request: Request) -> HistogramStore:
    return request.app.state.histogram_store


def get_courses(request: Request) -> list[CourseStats]:
    return request.app.state.courses
