"""Pydantic models for Places."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CategoryEnum(str, Enum):
    """Place categories, in classification order."""
    TEMPLE = "temple"
    BEACH = "beach"
    PEAK = "peak"
    CASTLE = "castle"
    PARK = "park"
    WILDLIFE = "wildlife"
    WATERFALL = "waterfall"
    MUSEUM = "museum"
    VILLAGE = "village"
    OTHER = "other"


class TagEnum(str, Enum):
    """Display tags."""
    CULTURE = "Culture"
    RELAXATION = "Relaxation"
    NATURE = "Nature"
    HISTORY = "History"
    WILDLIFE = "Wildlife"
    VILLAGE = "Village"
    RECREATION = "Recreation"
    ADVENTURE = "Adventure"


@dataclass
class RawRecord:
    """An unprocessed geodata result, in the provider's own tag vocabulary."""
    source: str
    native_id: str
    tags: Dict[str, str] = field(default_factory=dict)
    lat: Optional[float] = None
    lon: Optional[float] = None
    center: Optional[Dict[str, float]] = None

    @property
    def name(self) -> Optional[str]:
        name = self.tags.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
        return None

    def position(self) -> Optional[Tuple[float, float]]:
        """Return (lon, lat) from direct coordinates, else from the centroid."""
        if self.lat is not None and self.lon is not None:
            return float(self.lon), float(self.lat)
        center = self.center or {}
        if center.get("lat") is not None and center.get("lon") is not None:
            return float(center["lon"]), float(center["lat"])
        return None


class NearPoint(NamedTuple):
    """Circle to narrow a listing to, instead of the whole region."""
    lat: float
    lon: float
    radius_m: int


class Coordinates(BaseModel):
    """Longitude/latitude pair."""
    lon: float
    lat: float


class Place(BaseModel):
    """Normalized point of interest returned by the listing endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    description: str
    coordinates: Coordinates
    category: CategoryEnum = CategoryEnum.OTHER
    tags: List[TagEnum] = Field(default_factory=list)
    address: str
    image_url: str = Field(..., alias="imageUrl")
    external_id: str = Field(..., alias="externalId")
    source: str


class SavePlaceRequest(BaseModel):
    """Payload for saving a place to the user's destinations."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    lon: float
    lat: float
    tags: List[str] = Field(default_factory=list)
    address: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    external_id: str = Field(..., min_length=1, alias="externalId")
    category: CategoryEnum = CategoryEnum.OTHER


class StoredPlaceResponse(BaseModel):
    """A place persisted in the database."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    description: Optional[str] = None
    coordinates: Coordinates
    category: str
    tags: List[str] = Field(default_factory=list)
    address: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    external_id: Optional[str] = Field(None, alias="externalId")
    source: str


class SavePlaceResponse(BaseModel):
    """Result of a save request."""
    message: str
    place: StoredPlaceResponse
