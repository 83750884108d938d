import os
from typing import AsyncGenerator

import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Optional developer overrides; the database is always a private in-memory one
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()

from libs.db.base import Base  # noqa: E402
from libs.db.config import build_engine, build_session_factory  # noqa: E402

# Import all models so metadata includes every table
from services.catalog_service import models as _catalog_models  # noqa: E402,F401
from services.communications_service import models as _comms_models  # noqa: E402,F401
from services.shipping_service import models as _shipping_models  # noqa: E402,F401
from services.store_service import models as _store_models  # noqa: E402,F401
from services.wallet_service import models as _wallet_models  # noqa: E402,F401


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory SQLite database per test, built from the model metadata.
    """
    engine = build_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return build_session_factory(test_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield the session shared by the test body and the app under test.
    """
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def client(db_session, session_factory, auth) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the gateway app with DB and auth overridden.
    """
    from libs.auth.dependencies import get_current_user
    from libs.db.session import get_async_db, get_session_factory
    from services.gateway_service.app.main import app

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_current_user] = auth.current

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
