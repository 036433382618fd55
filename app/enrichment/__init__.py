"""
Enrichment Module
=================

Overlays places with data from third-party services after classification.

Current responsibilities:
- Image resolution across photo providers (Pexels, Unsplash, Google Places)
- Bounded caching of provider answers
"""

from .image_cache import ImageCache
from .image_providers import (
    ImageProvider,
    PexelsProvider,
    UnsplashProvider,
    GooglePlacesPhotoProvider,
    PlaceholderProvider,
)
from .image_resolver import (
    ImageResolver,
    image_resolver,
)

__all__ = [
    "ImageCache",
    "ImageProvider",
    "PexelsProvider",
    "UnsplashProvider",
    "GooglePlacesPhotoProvider",
    "PlaceholderProvider",
    "ImageResolver",
    "image_resolver",
]
