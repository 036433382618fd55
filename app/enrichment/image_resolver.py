"""
Image Resolver
Gives every place a displayable image URL.

Providers are tried in priority order and the first URL wins. Each provider's
answer (including a miss) is cached per lookup key, so a place name is sent to
a given provider at most once while the entry lives. When every provider
misses, the placeholder provider produces a deterministic URL, so resolution
never fails.
"""
import asyncio
import logging
from typing import Iterable, List, Optional

import httpx

from app.config import settings
from app.enrichment.image_cache import MISSING, ImageCache
from app.enrichment.image_providers import ImageProvider, PlaceholderProvider, default_providers

logger = logging.getLogger(__name__)


def lookup_key(place_name: str) -> str:
    """Cache key for a place name: whitespace collapsed, lower-cased."""
    return " ".join((place_name or "").lower().split())


class ImageResolver:
    """Runs the provider chain with caching and batch fan-out."""

    def __init__(
        self,
        providers: Optional[List[ImageProvider]] = None,
        cache: Optional[ImageCache] = None,
        placeholder: Optional[PlaceholderProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.providers = providers if providers is not None else default_providers()
        self.cache = cache or ImageCache(
            capacity=settings.image_cache_capacity,
            ttl_seconds=settings.image_cache_ttl_seconds,
        )
        self.placeholder = placeholder or PlaceholderProvider()
        self.timeout = settings.http_timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _lookup(
        self,
        provider: ImageProvider,
        place_name: str,
        client: httpx.AsyncClient,
    ) -> Optional[str]:
        """Ask one provider, going through the cache. Never raises."""
        cache_key = f"{provider.name}:{lookup_key(place_name)}"
        cached = self.cache.get(cache_key)
        if cached is not MISSING:
            return cached

        async with self.cache.lock_for(cache_key):
            # Another task may have filled the entry while we waited
            cached = self.cache.get(cache_key)
            if cached is not MISSING:
                return cached

            url = None
            try:
                url = await provider.search(place_name, client)
                if not url:
                    logger.info(f"{provider.name}: no image for {place_name!r}")
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    f"{provider.name}: HTTP {exc.response.status_code} for {place_name!r}"
                )
            except Exception as exc:
                logger.warning(f"{provider.name}: lookup failed for {place_name!r}: {exc}")

            self.cache.set(cache_key, url or None)
            return url or None

    async def resolve(self, place_name: str, client: Optional[httpx.AsyncClient] = None) -> str:
        """
        Resolve an image URL for one place.

        Args:
            place_name: Name of the place
            client: Shared HTTP client; a private one is opened when omitted

        Returns:
            A non-empty image URL
        """
        if not lookup_key(place_name):
            return self.placeholder.url_for(place_name)

        if client is None:
            async with self._client() as own_client:
                return await self.resolve(place_name, own_client)

        for provider in self.providers:
            if not provider.is_configured:
                continue
            url = await self._lookup(provider, place_name, client)
            if url:
                return url

        return self.placeholder.url_for(place_name)

    async def resolve_many(self, place_names: Iterable[str]) -> List[str]:
        """Resolve a batch concurrently; results keep the input order."""
        names = list(place_names)
        if not names:
            return []

        async with self._client() as client:
            return list(await asyncio.gather(*(self.resolve(name, client) for name in names)))


# Global instance
image_resolver = ImageResolver()
