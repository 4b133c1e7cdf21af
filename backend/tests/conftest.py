import os
import sys

import pytest
from httpx import ASGITransport, AsyncClient

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Honour any externally provided DATABASE_URL (e.g. CI may point at Postgres)
# but fall back to an in-memory SQLite database so local runs remain isolated.
DEFAULT_DB_URL = os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ALLOWED_ORIGINS", "")

# Register every model with the declarative Base before create_all runs.
from golf_league import db, models  # noqa: F401,E402
from golf_league.cache import standings_cache  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


async def _reset_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.drop_all)
        await conn.run_sync(db.Base.metadata.create_all)


@pytest.fixture
async def league_db(anyio_backend):
    """Fresh engine and schema bound to the running test's event loop."""

    db.engine = None
    db.AsyncSessionLocal = None
    engine = db.get_engine()
    await _reset_schema(engine)
    await standings_cache.clear()
    yield db
    await engine.dispose()
    db.engine = None
    db.AsyncSessionLocal = None


@pytest.fixture
def app():
    from golf_league.main import app as league_app

    yield league_app
    league_app.dependency_overrides.clear()


@pytest.fixture
async def client(league_db, app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
