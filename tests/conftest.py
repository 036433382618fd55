import os
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

# Settings are read at import time, so the test environment is fixed before
# anything under app/ is imported.
_DB_DIR = tempfile.mkdtemp(prefix="tn-explorer-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret-key-for-jwt-signing-0123456789"
for _key in (
    "PEXELS_API_KEY",
    "UNSPLASH_ACCESS_KEY",
    "GOOGLE_PLACES_API_KEY",
    "GEOAPIFY_API_KEY",
    "GOOGLE_API_KEY",
    "SEARCH_ENGINE_ID",
    "OPENROUTER_API_KEY",
):
    os.environ[_key] = ""


@pytest.fixture(scope="session")
def client():
    from fastapi.testclient import TestClient

    from app.main import app

    # Entering the context runs the lifespan hook, which creates the tables
    with TestClient(app) as test_client:
        yield test_client


def overpass_element(element_id, tags, lat=11.0, lon=78.0, element_type="node", center=None):
    element = {"type": element_type, "id": element_id, "tags": tags}
    if center is not None:
        element["center"] = center
    else:
        element["lat"] = lat
        element["lon"] = lon
    return element


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Sessions on a throwaway database, for tests that drive the store directly."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    from app.database import Base
    from app.models import orm  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()
