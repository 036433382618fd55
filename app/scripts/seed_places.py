"""
Import live region listings into the places table.

Usage:
    tn-seed-places
    tn-seed-places --category temple --category beach
    tn-seed-places --dry-run

Re-running is safe: places are keyed on their external ID, so rows that are
already stored are left alone and only new ones are inserted.
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.config import settings
from app.database import AsyncSessionLocal, engine, init_db
from app.errors import PlacesError
from app.models.places import CategoryEnum, Place, SavePlaceRequest
from app.services import user_store
from app.services.places_pipeline import PlacesPipeline, places_pipeline

logger = logging.getLogger(__name__)


def to_save_request(place: Place) -> SavePlaceRequest:
    return SavePlaceRequest(
        name=place.name,
        description=place.description,
        lon=place.coordinates.lon,
        lat=place.coordinates.lat,
        tags=[tag.value for tag in place.tags],
        address=place.address,
        image_url=place.image_url,
        external_id=place.external_id,
        category=place.category,
    )


async def seed_places(
    pipeline: PlacesPipeline,
    session_factory: async_sessionmaker,
    categories: Optional[List[str]] = None,
    dry_run: bool = False,
) -> Tuple[int, int]:
    """
    Fetch listings for each category (or all at once) and store the new ones.

    Places returned under several categories are stored once.

    Returns:
        (fetched, inserted) counts of distinct places
    """
    unique = {}
    for category in categories or [None]:
        for place in await pipeline.list_places(category):
            unique.setdefault(place.external_id, place)
        logger.info(f"Fetched category={category or 'all'}, {len(unique)} distinct places so far")

    if dry_run:
        return len(unique), 0

    inserted = 0
    async with session_factory() as db:
        for place in unique.values():
            _, created = await user_store.get_or_create_place(
                db, to_save_request(place), source=place.source
            )
            if created:
                inserted += 1

    return len(unique), inserted


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"Import {settings.region_name} places into the database"
    )
    parser.add_argument(
        "--category",
        action="append",
        choices=[category.value for category in CategoryEnum],
        help="Category to import; repeat for several (default: every category in one query)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and count places without writing them",
    )
    return parser


async def run(categories: Optional[List[str]], dry_run: bool) -> int:
    await init_db()
    try:
        fetched, inserted = await seed_places(places_pipeline, AsyncSessionLocal, categories, dry_run)
    except PlacesError as exc:
        logger.error(f"Seeding failed: {exc.message}")
        return 1
    finally:
        await engine.dispose()

    logger.info(f"Seeding done: {fetched} fetched, {inserted} inserted")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return asyncio.run(run(args.category, args.dry_run))


if __name__ == "__main__":
    sys.exit(main())
