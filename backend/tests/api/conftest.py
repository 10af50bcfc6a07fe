"""API-specific test fixtures."""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from content_studio.core.auth import ClerkUser, require_auth
from content_studio.core.config import get_settings
from content_studio.db import create_engine, create_session_factory, create_tables
from content_studio.db.models import Account
from content_studio.main import attach_services, install_exception_handlers
from content_studio.middleware.correlation import setup_correlation_middleware
from content_studio.api.routes import api_router
from content_studio.providers.fake import FakeProvider

# Seeded balances for every API test
SEED_ACCOUNTS = {"user_a": 10, "user_b": 2, "user_broke": 0}


@pytest.fixture
def api_client(tmp_path):
    """FastAPI test client over a throwaway SQLite database and a FakeProvider.

    The engine is created inside the TestClient's own event loop (via the
    test lifespan), so every session is bound to the loop that serves requests.
    """
    db_url = f"sqlite+aiosqlite:///{tmp_path}/api.db"

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        app.state.shutting_down = False
        engine = create_engine(db_url)
        await create_tables(engine)
        session_factory = create_session_factory(engine)

        async with session_factory() as session:
            session.add_all([Account(id=k, credits=v) for k, v in SEED_ACCOUNTS.items()])
            await session.commit()

        attach_services(app, get_settings(), session_factory, FakeProvider(scenario="happy_path"))
        yield
        await engine.dispose()

    app = FastAPI(title="Content Studio - Test Client", lifespan=test_lifespan)
    setup_correlation_middleware(app)
    install_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    with TestClient(app) as client:
        yield client


@pytest.fixture
def user_a():
    return ClerkUser(user_id="user_a", claims={"sub": "user_a"})


@pytest.fixture
def user_b():
    return ClerkUser(user_id="user_b", claims={"sub": "user_b"})


def override_auth(user: ClerkUser):
    """Create auth override for a specific user."""

    async def _override():
        return user

    return _override


@pytest.fixture
def login(api_client):
    """Authenticate subsequent requests as ``user`` (bypasses JWT verification)."""

    def _login(user: ClerkUser) -> None:
        api_client.app.dependency_overrides[require_auth] = override_auth(user)

    return _login
