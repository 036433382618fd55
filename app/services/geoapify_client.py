"""Client for free-text place search through the Geoapify Places API."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.errors import UpstreamDataInvalid, UpstreamUnavailable
from app.models.places import NearPoint, RawRecord

logger = logging.getLogger(__name__)

SOURCE = "geoapify"
SEARCH_CATEGORIES = "tourism.attraction,tourism.sights,religion.place_of_worship,beach,natural,leisure.park"


def feature_to_record(feature: Dict[str, Any]) -> Optional[RawRecord]:
    """Convert one GeoJSON feature into a raw record with OSM-style tags."""
    properties = feature.get("properties") if isinstance(feature, dict) else None
    if not isinstance(properties, dict):
        return None

    raw = (properties.get("datasource") or {}).get("raw")
    tags: Dict[str, str] = {
        key: value for key, value in (raw or {}).items() if isinstance(value, str)
    }
    if properties.get("name"):
        tags["name"] = properties["name"]
    if properties.get("formatted") and "addr:full" not in tags:
        tags["addr:full"] = properties["formatted"]
    if properties.get("city") and "addr:city" not in tags:
        tags["addr:city"] = properties["city"]

    return RawRecord(
        source=SOURCE,
        native_id=str(properties.get("place_id") or "unknown"),
        tags=tags,
        lat=properties.get("lat"),
        lon=properties.get("lon"),
    )


class GeoapifyClient:
    """HTTP client wrapper for Geoapify place search."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.api_key = settings.geoapify_api_key
        self.base_url = "https://api.geoapify.com/v2/places"
        self.timeout = settings.http_timeout
        self.limit = settings.places_result_limit
        self.transport = transport

    def _circle_filter(self, near: NearPoint) -> str:
        return f"circle:{near.lon},{near.lat},{near.radius_m}"

    def _rect_filter(self) -> str:
        south, west, north, east = settings.bbox
        return f"rect:{west},{south},{east},{north}"

    async def search_places(self, query: str, near: Optional[NearPoint] = None) -> List[RawRecord]:
        """
        Search places by name inside the configured region, or inside a circle
        around `near` when given.

        Raises:
            UpstreamUnavailable: key missing, Geoapify unreachable or non-2xx
            UpstreamDataInvalid: payload without a `features` array
        """
        if not self.api_key:
            logger.warning("Geoapify API key not configured")
            raise UpstreamUnavailable("Place search provider is not configured")

        params = {
            "categories": SEARCH_CATEGORIES,
            "filter": self._circle_filter(near) if near is not None else self._rect_filter(),
            "name": query,
            "limit": self.limit,
            "apiKey": self.api_key,
        }
        if near is not None:
            params["bias"] = f"proximity:{near.lon},{near.lat}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Geoapify returned {exc.response.status_code} for query={query!r}")
            raise UpstreamUnavailable(
                f"Place search provider error: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            logger.error(f"Failed to reach Geoapify: {exc}")
            raise UpstreamUnavailable(f"Failed to reach place search provider: {exc}") from exc
        except ValueError as exc:
            raise UpstreamDataInvalid("Place search provider returned malformed JSON") from exc

        features = payload.get("features") if isinstance(payload, dict) else None
        if not isinstance(features, list):
            raise UpstreamDataInvalid("Geoapify response is missing the 'features' array")

        records = [record for record in map(feature_to_record, features) if record is not None]
        return records[: self.limit]


# Global instance
geoapify_client = GeoapifyClient()
