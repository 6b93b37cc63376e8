"""Pytest fixtures for the auth service.

Loads `.env.test` before any `family_auth` module reads settings, creates a
clean SQLite schema for the session, and swaps Redis for an in-memory cache
so no external services are needed.
"""
import json
import pathlib
import time

import pytest
from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=str(ROOT / ".env.test"), override=True)


class InMemoryCache:
    """CacheBackend double with TTLs and JSON round-tripping like Redis."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    async def get(self, key):
        entry = self.data.get(key)
        if entry is None:
            return None
        raw, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self.data[key]
            return None
        return json.loads(raw)

    async def set(self, key, value, ttl=None):
        expires_at = time.monotonic() + ttl if ttl else None
        self.data[key] = (json.dumps(value, default=str), expires_at)
        self.ttls[key] = ttl

    async def delete(self, key):
        self.data.pop(key, None)
        self.ttls.pop(key, None)

    async def is_healthy(self):
        return True

    def evict(self, key):
        """Simulate the cache dropping a key (TTL lapse, eviction, flush)."""
        self.data.pop(key, None)

    def keys(self, prefix=""):
        return sorted(k for k in self.data if k.startswith(prefix))


@pytest.fixture(scope="session")
def prepare_database():
    """Create clean schema for the test session."""
    from family_auth.core.database import engine, Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    yield

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(prepare_database):
    """Yield a SQLAlchemy session; all rows are removed afterwards."""
    from family_auth.core.database import SessionLocal
    from family_auth.models.refresh_token import RefreshToken
    from family_auth.models.user import User

    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.query(RefreshToken).delete()
        db.query(User).delete()
        db.commit()
        db.close()


@pytest.fixture
def memory_cache():
    return InMemoryCache()


@pytest.fixture
def session_service(memory_cache):
    from family_auth.services.session_service import SessionService

    return SessionService(memory_cache)


@pytest.fixture
def refresh_token_repository(db_session):
    from family_auth.repositories.refresh_token_repository import RefreshTokenRepository

    return RefreshTokenRepository(db_session)


@pytest.fixture
def user_service(db_session):
    from family_auth.services.user_service import UserService

    return UserService(db_session)


@pytest.fixture
def auth_service(user_service, session_service, refresh_token_repository):
    from family_auth.services.auth_service import AuthService

    return AuthService(
        users=user_service,
        sessions=session_service,
        refresh_tokens=refresh_token_repository,
    )


@pytest.fixture
def make_user(user_service):
    """Create a user directly through the store."""
    def _make(email="member@example.com", password="CorrectHorse9!"):
        return user_service.create_user(email=email, password=password)

    return _make


@pytest.fixture
async def async_client(db_session, memory_cache):
    """Provide an httpx AsyncClient bound to a fresh app using the in-memory cache."""
    from httpx import ASGITransport, AsyncClient
    from family_auth.dependencies.rate_limit import reset_rate_limits
    from family_auth.dependencies.services import get_session_cache
    from family_auth.main import create_app

    reset_rate_limits()
    app = create_app()
    app.dependency_overrides[get_session_cache] = lambda: memory_cache

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
