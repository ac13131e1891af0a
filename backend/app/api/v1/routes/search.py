"""
Search API Routes

Athlete name search over the deduplicated cross-race index.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.api.deps import get_search_service
from app.config import settings
from app.features.athletes import AthleteSearchEntry, AthleteSearchService

router = APIRouter()


class AthleteSearchEntrySchema(BaseModel):
    key: str
    full_name: str
    country: str
    country_iso: str
    race_count: int

    @classmethod
    def from_entry(cls, entry: AthleteSearchEntry) -> "AthleteSearchEntrySchema":
        return cls(
            key=entry.key,
            full_name=entry.full_name,
            country=entry.country,
            country_iso=entry.country_iso,
            race_count=entry.race_count,
        )


@router.get("", response_model=list[AthleteSearchEntrySchema])
async def search_athletes(
    q: Optional[str] = Query(default=None, description="Part of an athlete's name"),
    limit: Optional[int] = Query(default=None, ge=0, le=settings.search_max_limit),
    service: AthleteSearchService = Depends(get_search_service),
):
    """
    Search athletes by partial name.

    Prefix matches first (alphabetical), then names containing the query.
    Queries shorter than 2 characters return an empty list.
    """
    if limit is None:
        limit = settings.search_default_limit
    entries = service.search(q or "", limit)
    return [AthleteSearchEntrySchema.from_entry(e) for e in entries]
