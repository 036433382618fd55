"""Persistence helpers for users and their saved destinations."""
import json
import logging
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.orm import SavedDestination, StoredPlace, User
from app.models.places import SavePlaceRequest

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalars().first()


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    password_hash: str,
    date_of_birth: Optional[str] = None,
) -> User:
    user = User(
        name=name,
        email=email.lower(),
        password_hash=password_hash,
        date_of_birth=date_of_birth,
        interests=[],
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def update_interests(db: AsyncSession, user: User, interests: List[str]) -> User:
    user.interests = list(interests)
    await db.commit()
    await db.refresh(user)
    return user


async def _find_place(db: AsyncSession, external_id: str) -> Optional[StoredPlace]:
    result = await db.execute(select(StoredPlace).where(StoredPlace.external_id == external_id))
    return result.scalars().first()


async def get_or_create_place(
    db: AsyncSession,
    payload: SavePlaceRequest,
    source: str = "api",
) -> Tuple[StoredPlace, bool]:
    """
    Return the stored place for the payload's external ID, inserting it if needed.

    The insert is committed straight away. When a concurrent request commits
    the same external ID first, the unique constraint rejects this insert and
    the winner's row is returned instead.

    Returns:
        (place, created)
    """
    place = await _find_place(db, payload.external_id)
    if place is not None:
        return place, False

    place = StoredPlace(
        name=payload.name,
        description=payload.description,
        lon=payload.lon,
        lat=payload.lat,
        category=payload.category.value,
        tags=list(dict.fromkeys(payload.tags)),
        address=payload.address,
        image_url=payload.image_url,
        external_id=payload.external_id,
        source=source,
    )
    db.add(place)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(f"externalId={payload.external_id} was stored concurrently, reusing it")
        existing = await _find_place(db, payload.external_id)
        if existing is None:
            raise
        return existing, False

    await db.refresh(place)
    logger.info(f"Stored new place externalId={payload.external_id}")
    return place, True


async def save_place(db: AsyncSession, user_id: str, payload: SavePlaceRequest) -> StoredPlace:
    """
    Persist a place (once per external ID) and link it to the user.

    Saving the same external ID twice reuses the stored place and does not
    duplicate the user's link to it.
    """
    place, _ = await get_or_create_place(db, payload)

    link = await db.execute(
        select(SavedDestination).where(
            SavedDestination.user_id == user_id,
            SavedDestination.place_id == place.id,
        )
    )
    if link.scalars().first() is None:
        db.add(SavedDestination(user_id=user_id, place_id=place.id))
        try:
            await db.commit()
        except IntegrityError:
            # Same user saving the same place twice at once; one link is enough
            await db.rollback()
            await db.refresh(place)

    return place


async def get_saved_place_ids(db: AsyncSession, user_id: str) -> List[str]:
    result = await db.execute(
        select(SavedDestination.place_id)
        .where(SavedDestination.user_id == user_id)
        .order_by(SavedDestination.id)
    )
    return list(result.scalars().all())


async def get_saved_places(db: AsyncSession, user_id: str) -> List[StoredPlace]:
    """Places saved by the user, in the order they were saved."""
    result = await db.execute(
        select(StoredPlace)
        .join(SavedDestination, SavedDestination.place_id == StoredPlace.id)
        .where(SavedDestination.user_id == user_id)
        .order_by(SavedDestination.id)
    )
    return list(result.scalars().all())


async def get_places_by_tag(db: AsyncSession, tag: str) -> List[StoredPlace]:
    """
    Stored places carrying the tag (case-insensitive).

    The database narrows the rows with a substring match on the serialized
    tag list; the exact per-tag comparison is done here.
    """
    wanted = tag.strip().lower()
    if not wanted:
        return []

    result = await db.execute(
        select(StoredPlace)
        .where(
            func.lower(cast(StoredPlace.tags, String)).contains(
                json.dumps(wanted), autoescape=True
            )
        )
        .order_by(StoredPlace.created_at)
    )
    return [
        place
        for place in result.scalars().all()
        if any(str(existing).lower() == wanted for existing in (place.tags or []))
    ]
