"""
Data normalizers to ensure consistent place structure across the application.

Raw provider records, once classified and given an image, are merged here into
the public `Place` shape. Records without a name or a resolvable position are
dropped, so whatever reaches the frontend is always renderable on a map.
"""

from typing import Iterable, List, Optional, Set

from app.config import settings
from app.models.places import CategoryEnum, Coordinates, Place, RawRecord, TagEnum
from app.utils.classifier import has_mandatory_fields


def default_description(name: str) -> str:
    return f"Explore {name} in {settings.region_name}."


def external_id_for(record: RawRecord) -> str:
    """Namespace the provider's identifier, e.g. `overpass-node-123`."""
    return f"{record.source}-{record.native_id}"


def assemble_place(
    record: RawRecord,
    category: CategoryEnum,
    tags: Set[TagEnum],
    image_url: str,
) -> Optional[Place]:
    """
    Merge a classified record and its resolved image into a Place.

    Args:
        record: Raw provider record
        category: Category chosen by the classifier
        tags: Display tags derived by the classifier
        image_url: URL produced by the image resolver

    Returns:
        Place, or None if the record lacks a name or coordinates
    """
    if not has_mandatory_fields(record):
        return None

    name = record.name
    lon, lat = record.position()
    raw_tags = record.tags or {}

    address = (
        raw_tags.get("addr:full")
        or raw_tags.get("addr:city")
        or settings.region_name
    )

    return Place(
        name=name,
        description=raw_tags.get("description") or default_description(name),
        coordinates=Coordinates(lon=lon, lat=lat),
        category=category,
        tags=sorted(tags, key=lambda tag: tag.value),
        address=address,
        image_url=image_url,
        external_id=external_id_for(record),
        source=record.source,
    )


def assemble_places(
    records: Iterable[RawRecord],
    categories: Iterable[CategoryEnum],
    tag_sets: Iterable[Set[TagEnum]],
    image_urls: Iterable[str],
) -> List[Place]:
    """Assemble records in order, skipping those that fail the mandatory filter."""
    places: List[Place] = []
    for record, category, tags, image_url in zip(records, categories, tag_sets, image_urls):
        place = assemble_place(record, category, tags, image_url)
        if place is not None:
            places.append(place)
    return places
