"""
Image Providers
Interchangeable photo lookup strategies used by the image resolver.

Every provider answers `search(place_name, client)` with a URL or None and may
raise httpx errors; the resolver treats a missing credential, an error status
and an empty result the same way. A provider without credentials reports
`is_configured = False` and is skipped.
"""
import logging
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class ImageProvider:
    """Base class for image lookup strategies."""

    name = "base"

    @property
    def is_configured(self) -> bool:
        return True

    def build_query(self, place_name: str) -> str:
        return f"{place_name} {settings.region_name}"

    async def search(self, place_name: str, client: httpx.AsyncClient) -> Optional[str]:
        raise NotImplementedError


class PexelsProvider(ImageProvider):
    """Primary provider: Pexels photo search."""

    name = "pexels"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key
        self.base_url = "https://api.pexels.com/v1/search"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, place_name: str, client: httpx.AsyncClient) -> Optional[str]:
        response = await client.get(
            self.base_url,
            params={"query": self.build_query(place_name), "per_page": 1, "orientation": "landscape"},
            headers={"Authorization": self.api_key},
        )
        response.raise_for_status()
        photos = response.json().get("photos") or []
        if not photos:
            return None
        src = photos[0].get("src") or {}
        return src.get("large") or src.get("original")


class UnsplashProvider(ImageProvider):
    """Secondary provider: Unsplash photo search."""

    name = "unsplash"

    def __init__(self, access_key: Optional[str] = None):
        self.access_key = access_key
        self.base_url = "https://api.unsplash.com/search/photos"

    @property
    def is_configured(self) -> bool:
        return bool(self.access_key)

    async def search(self, place_name: str, client: httpx.AsyncClient) -> Optional[str]:
        response = await client.get(
            self.base_url,
            params={"query": self.build_query(place_name), "per_page": 1, "orientation": "landscape"},
            headers={"Authorization": f"Client-ID {self.access_key}", "Accept-Version": "v1"},
        )
        response.raise_for_status()
        results = response.json().get("results") or []
        if not results:
            return None
        return (results[0].get("urls") or {}).get("regular")


class GooglePlacesPhotoProvider(ImageProvider):
    """Tertiary provider: first photo of the best Google Places text search hit."""

    name = "google_places"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key
        self.base_url = "https://maps.googleapis.com/maps/api/place"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, place_name: str, client: httpx.AsyncClient) -> Optional[str]:
        response = await client.get(
            f"{self.base_url}/textsearch/json",
            params={"query": self.build_query(place_name), "key": self.api_key},
        )
        response.raise_for_status()
        data: Any = response.json()

        if data.get("status") != "OK":
            logger.info(f"Google Places text search status: {data.get('status')}")
            return None

        for result in data.get("results") or []:
            photos = result.get("photos") or []
            if photos and photos[0].get("photo_reference"):
                return await self._photo_location(photos[0]["photo_reference"], client)
        return None

    async def _photo_location(self, reference: str, client: httpx.AsyncClient) -> Optional[str]:
        """
        Resolve a photo reference to the CDN URL Google redirects to.

        The photo endpoint itself needs the API key in its query string, so it
        is never handed to clients; only the redirect target is returned.
        """
        response = await client.get(
            f"{self.base_url}/photo",
            params={"maxwidth": 800, "photo_reference": reference, "key": self.api_key},
            follow_redirects=False,
        )
        if not response.is_redirect:
            logger.info(f"Google Places photo returned {response.status_code}, no redirect")
            return None

        location = response.headers.get("location")
        if not location or self.api_key in location:
            return None
        return location


class PlaceholderProvider(ImageProvider):
    """Terminal fallback: deterministic placeholder image with the place name."""

    name = "placeholder"

    def __init__(self, template: Optional[str] = None):
        self.template = template or settings.placeholder_image_url

    def url_for(self, place_name: str) -> str:
        return self.template.format(name=quote(place_name or settings.region_name, safe=""))

    async def search(self, place_name: str, client: httpx.AsyncClient) -> Optional[str]:
        return self.url_for(place_name)


def default_providers() -> List[ImageProvider]:
    """Network-backed providers in priority order, built from settings."""
    return [
        PexelsProvider(settings.pexels_api_key),
        UnsplashProvider(settings.unsplash_access_key),
        GooglePlacesPhotoProvider(settings.google_places_api_key),
    ]
