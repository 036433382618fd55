"""Places API router: live listings plus the user's saved destinations."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.models.orm import StoredPlace, User
from app.models.places import (
    Coordinates,
    Place,
    SavePlaceRequest,
    SavePlaceResponse,
    StoredPlaceResponse,
)
from app.services import user_store
from app.services.places_pipeline import places_pipeline

router = APIRouter(prefix="/places", tags=["places"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[Place])
async def list_places(
    category: Optional[str] = Query(None, description="Category key, e.g. temple or beach"),
    lat: Optional[str] = Query(None, description="Latitude of a point to search around"),
    lon: Optional[str] = Query(None, description="Longitude of a point to search around"),
    radius: Optional[str] = Query(None, description="Circle radius in meters (default 50000)"),
):
    """
    List places in the region, optionally restricted to one category.

    With `lat` and `lon` the listing covers a circle around that point instead
    of the whole region. Pipeline errors, such as an unknown category or a
    lone coordinate, are turned into `{"error": ...}` responses by the handler
    registered in `app.main`.
    """
    return await places_pipeline.list_places(category, lat=lat, lon=lon, radius=radius)


@router.get("/search", response_model=List[Place])
async def search_places(
    query: Optional[str] = Query(None, description="Place name to search"),
    lat: Optional[str] = Query(None, description="Latitude of a point to search around"),
    lon: Optional[str] = Query(None, description="Longitude of a point to search around"),
    radius: Optional[str] = Query(None, description="Circle radius in meters (default 50000)"),
):
    """Search places by name inside the region, or near a point."""
    return await places_pipeline.search_places(query, lat=lat, lon=lon, radius=radius)


@router.post("/save", response_model=SavePlaceResponse)
async def save_place(
    payload: SavePlaceRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Save a place to the current user's destinations (idempotent on externalId)."""
    place = await user_store.save_place(db, current_user.id, payload)
    return SavePlaceResponse(message="Place saved", place=_map_stored_place(place))


@router.get("/saved", response_model=List[StoredPlaceResponse])
async def get_saved_places(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the current user's saved destinations."""
    places = await user_store.get_saved_places(db, current_user.id)
    return [_map_stored_place(place) for place in places]


@router.get("/by-tag/{tag}", response_model=List[StoredPlaceResponse])
async def get_places_by_tag(tag: str, db: AsyncSession = Depends(get_db)):
    """Stored places carrying a tag."""
    places = await user_store.get_places_by_tag(db, tag)
    return [_map_stored_place(place) for place in places]


def _map_stored_place(place: StoredPlace) -> StoredPlaceResponse:
    return StoredPlaceResponse(
        id=place.id,
        name=place.name,
        description=place.description,
        coordinates=Coordinates(lon=place.lon, lat=place.lat),
        category=place.category,
        tags=place.tags or [],
        address=place.address,
        image_url=place.image_url,
        external_id=place.external_id,
        source=place.source,
    )
