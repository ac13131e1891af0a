"""
Athlete API Routes

Per-athlete race history rebuilt from the profile index.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.deps import get_catalog, get_search_service
from app.features.athletes import AthleteSearchService
from app.features.races import RaceCatalog

router = APIRouter()


class AthleteRaceSchema(BaseModel):
    race_slug: str
    race_name: str
    race_date: str
    result_id: int
    finish_time: str
    age_group: str
    swim_time: str = ""
    bike_time: str = ""
    run_time: str = ""


class AthleteProfileSchema(BaseModel):
    key: str
    full_name: str
    country: str
    country_iso: str
    race_count: int
    races: list[AthleteRaceSchema] = []


@router.get("/{key}", response_model=AthleteProfileSchema)
async def get_athlete(
    key: str,
    service: AthleteSearchService = Depends(get_search_service),
    catalog: RaceCatalog = Depends(get_catalog),
):
    """Athlete profile with every race, most recent first."""
    profile = service.get_athlete_profile(key, catalog)
    if not profile:
        raise HTTPException(status_code=404, detail=f"Athlete not found: {key}")

    return AthleteProfileSchema(
        key=profile.key,
        full_name=profile.full_name,
        country=profile.country,
        country_iso=profile.country_iso,
        race_count=len(profile.races),
        races=[
            AthleteRaceSchema(
                race_slug=r.race_slug,
                race_name=r.race_name,
                race_date=r.race_date,
                result_id=r.result_id,
                finish_time=r.finish_time,
                age_group=r.age_group,
                swim_time=r.swim_time,
                bike_time=r.bike_time,
                run_time=r.run_time,
            )
            for r in profile.races
        ],
    )
