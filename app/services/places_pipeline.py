"""Place listing pipeline: fetch, classify, resolve images, assemble."""
import logging
import math
from typing import List, Optional

from app.config import settings
from app.enrichment.image_resolver import ImageResolver, image_resolver
from app.errors import ClientInputError
from app.models.places import CategoryEnum, NearPoint, Place, RawRecord
from app.services.geoapify_client import GeoapifyClient, geoapify_client
from app.services.overpass_client import OverpassClient, overpass_client
from app.utils.classifier import classify, has_mandatory_fields
from app.utils.normalizers import assemble_places

logger = logging.getLogger(__name__)


def parse_category(value: Optional[str]) -> Optional[CategoryEnum]:
    """
    Validate a raw category parameter.

    Returns:
        The category, or None when no filter was given

    Raises:
        ClientInputError: Unknown category key
    """
    if value is None or not value.strip():
        return None
    key = value.strip().lower()
    try:
        return CategoryEnum(key)
    except ValueError:
        valid = ", ".join(category.value for category in CategoryEnum)
        raise ClientInputError(f"Invalid category '{value}'. Valid categories: {valid}")


def _coordinate(name: str, value: str, bound: float) -> float:
    try:
        number = float(value)
    except ValueError:
        raise ClientInputError(f"Invalid {name} '{value}': expected a number")
    if not math.isfinite(number) or abs(number) > bound:
        raise ClientInputError(f"Invalid {name} '{value}': must be between -{bound:g} and {bound:g}")
    return number


def parse_near(
    lat: Optional[str],
    lon: Optional[str],
    radius: Optional[str] = None,
) -> Optional[NearPoint]:
    """
    Validate raw lat/lon/radius parameters into a search circle.

    Returns:
        The circle, or None when neither coordinate was given

    Raises:
        ClientInputError: Only one coordinate, a value out of range, or a bad radius
    """
    lat = lat.strip() if lat else None
    lon = lon.strip() if lon else None
    if not lat and not lon:
        if radius:
            raise ClientInputError("radius requires lat and lon")
        return None
    if not lat or not lon:
        raise ClientInputError("lat and lon must be given together")

    radius_m = settings.nearby_radius_m
    if radius and radius.strip():
        try:
            radius_m = int(radius)
        except ValueError:
            raise ClientInputError(f"Invalid radius '{radius}': expected whole meters")
        if not 0 < radius_m <= settings.nearby_radius_max_m:
            raise ClientInputError(
                f"Invalid radius '{radius}': must be between 1 and {settings.nearby_radius_max_m} meters"
            )

    return NearPoint(lat=_coordinate("lat", lat, 90), lon=_coordinate("lon", lon, 180), radius_m=radius_m)


class PlacesPipeline:
    """Wires the geodata fetchers to classification and image resolution."""

    def __init__(
        self,
        fetcher: Optional[OverpassClient] = None,
        searcher: Optional[GeoapifyClient] = None,
        resolver: Optional[ImageResolver] = None,
    ):
        self.fetcher = fetcher or overpass_client
        self.searcher = searcher or geoapify_client
        self.resolver = resolver or image_resolver

    async def build(self, records: List[RawRecord]) -> List[Place]:
        """Turn raw records into places, preserving provider order."""
        kept = [record for record in records if has_mandatory_fields(record)]
        dropped = len(records) - len(kept)
        if dropped:
            logger.info(f"Dropped {dropped} records without a name or coordinates")

        classified = [classify(record) for record in kept]
        image_urls = await self.resolver.resolve_many(record.name for record in kept)

        return assemble_places(
            kept,
            [category for category, _ in classified],
            [tags for _, tags in classified],
            image_urls,
        )

    async def list_places(
        self,
        category: Optional[str] = None,
        lat: Optional[str] = None,
        lon: Optional[str] = None,
        radius: Optional[str] = None,
    ) -> List[Place]:
        """
        Listing for one category key (or all), across the region or near a point.

        Every parameter is checked before any upstream call.
        """
        parsed = parse_category(category)
        near = parse_near(lat, lon, radius)
        records = await self.fetcher.fetch_places(parsed, near=near)
        return await self.build(records)

    async def search_places(
        self,
        query: Optional[str],
        lat: Optional[str] = None,
        lon: Optional[str] = None,
        radius: Optional[str] = None,
    ) -> List[Place]:
        """Free-text search through Geoapify."""
        if not query or not query.strip():
            raise ClientInputError("Query is required")
        near = parse_near(lat, lon, radius)
        records = await self.searcher.search_places(query.strip(), near=near)
        return await self.build(records)


# Global instance
places_pipeline = PlacesPipeline()
