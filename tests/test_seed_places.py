import pytest
from sqlalchemy import select

from app.errors import UpstreamUnavailable
from app.models.orm import StoredPlace
from app.models.places import Coordinates, Place
from app.scripts import seed_places as seeder


def _place(external_id, name, category="temple", tags=("Culture",)):
    return Place(
        name=name,
        description=f"Explore {name} in Tamil Nadu.",
        coordinates=Coordinates(lon=78.1, lat=9.9),
        category=category,
        tags=list(tags),
        address="Madurai",
        imageUrl=f"https://img/{external_id}.jpg",
        externalId=external_id,
        source="overpass",
    )


class StubPipeline:
    def __init__(self, by_category):
        self.by_category = by_category
        self.calls = []

    async def list_places(self, category=None):
        self.calls.append(category)
        return self.by_category.get(category, [])


@pytest.mark.asyncio
async def test_seed_inserts_new_places_and_is_idempotent(session_factory):
    pipeline = StubPipeline(
        {
            None: [
                _place("overpass-node-1", "Meenakshi Amman Temple"),
                _place("overpass-node-2", "Marina Beach", category="beach", tags=("Relaxation",)),
            ]
        }
    )

    first = await seeder.seed_places(pipeline, session_factory)
    second = await seeder.seed_places(pipeline, session_factory)

    assert first == (2, 2)
    assert second == (2, 0)
    assert pipeline.calls == [None, None]

    async with session_factory() as db:
        rows = (await db.execute(select(StoredPlace).order_by(StoredPlace.external_id))).scalars().all()
    assert [row.external_id for row in rows] == ["overpass-node-1", "overpass-node-2"]
    assert rows[0].source == "overpass"
    assert rows[1].tags == ["Relaxation"]
    assert rows[1].image_url == "https://img/overpass-node-2.jpg"


@pytest.mark.asyncio
async def test_seed_per_category_stores_shared_places_once(session_factory):
    shared = _place("overpass-way-7", "Shore Temple")
    pipeline = StubPipeline(
        {
            "temple": [shared],
            "beach": [shared, _place("overpass-node-8", "Elliot's Beach", category="beach")],
        }
    )

    fetched, inserted = await seeder.seed_places(pipeline, session_factory, ["temple", "beach"])

    assert (fetched, inserted) == (2, 2)
    assert pipeline.calls == ["temple", "beach"]


@pytest.mark.asyncio
async def test_seed_dry_run_writes_nothing(session_factory):
    pipeline = StubPipeline({None: [_place("overpass-node-1", "Gingee Fort", category="castle")]})

    assert await seeder.seed_places(pipeline, session_factory, dry_run=True) == (1, 0)

    async with session_factory() as db:
        assert (await db.execute(select(StoredPlace))).scalars().all() == []


@pytest.mark.asyncio
async def test_seed_propagates_upstream_failure(session_factory):
    class FailingPipeline:
        async def list_places(self, category=None):
            raise UpstreamUnavailable("Failed to reach geodata provider")

    with pytest.raises(UpstreamUnavailable):
        await seeder.seed_places(FailingPipeline(), session_factory)


def test_parser_accepts_repeated_categories():
    args = seeder.build_parser().parse_args(["--category", "temple", "--category", "beach", "--dry-run"])
    assert args.category == ["temple", "beach"]
    assert args.dry_run is True

    assert seeder.build_parser().parse_args([]).category is None


def test_parser_rejects_unknown_category():
    with pytest.raises(SystemExit):
        seeder.build_parser().parse_args(["--category", "volcano"])
