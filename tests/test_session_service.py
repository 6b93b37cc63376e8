"""Cache-backed session index."""
from datetime import datetime, timedelta, timezone

import pytest

from family_auth.core.config import settings
from family_auth.core.security import hash_token
from family_auth.services.session_service import SessionService
from family_auth.utils.errors import SessionStoreUnavailableError


def _expiry(seconds=3600):
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)


class BrokenCache:
    """Every operation fails the way RedisCache(raise_errors=True) does."""

    async def get(self, key):
        raise SessionStoreUnavailableError()

    async def set(self, key, value, ttl=None):
        raise SessionStoreUnavailableError()

    async def delete(self, key):
        raise SessionStoreUnavailableError()

    async def is_healthy(self):
        return False


async def test_store_session_writes_record_and_index(session_service, memory_cache):
    await session_service.store_session("user-a", "token-1", _expiry())

    session_key = f"session:user-a:{hash_token('token-1')}"
    record = await memory_cache.get(session_key)
    assert record["user_id"] == "user-a"
    assert record["refresh_token"] == "token-1"
    assert await memory_cache.get("user_sessions:user-a") == [session_key]
    assert 3500 < memory_cache.ttls[session_key] <= 3600


async def test_store_session_is_idempotent_for_index(session_service, memory_cache):
    expires_at = _expiry()
    await session_service.store_session("user-a", "token-1", expires_at)
    await session_service.store_session("user-a", "token-1", expires_at)

    assert len(await memory_cache.get("user_sessions:user-a")) == 1


async def test_non_positive_ttl_falls_back_to_default(session_service, memory_cache):
    await session_service.store_session("user-a", "token-1", _expiry(-60))

    session_key = SessionService.get_session_key("user-a", "token-1")
    assert memory_cache.ttls[session_key] == settings.SESSION_DEFAULT_TTL_SECONDS


async def test_is_session_valid(session_service):
    await session_service.store_session("user-a", "token-1", _expiry())

    assert await session_service.is_session_valid("user-a", "token-1")
    assert not await session_service.is_session_valid("user-a", "token-2")
    assert not await session_service.is_session_valid("user-b", "token-1")


async def test_revoke_session_removes_key_and_index_entry(session_service, memory_cache):
    await session_service.store_session("user-a", "token-1", _expiry())
    await session_service.store_session("user-a", "token-2", _expiry())

    await session_service.revoke_session("user-a", "token-1")

    assert not await session_service.is_session_valid("user-a", "token-1")
    assert await session_service.is_session_valid("user-a", "token-2")
    assert await memory_cache.get("user_sessions:user-a") == [
        SessionService.get_session_key("user-a", "token-2")
    ]


async def test_revoking_last_session_deletes_index(session_service, memory_cache):
    await session_service.store_session("user-a", "token-1", _expiry())
    await session_service.revoke_session("user-a", "token-1")

    assert memory_cache.keys() == []


async def test_revoke_all_user_sessions(session_service, memory_cache):
    for token in ("token-1", "token-2", "token-3"):
        await session_service.store_session("user-a", token, _expiry())
    await session_service.store_session("user-b", "token-9", _expiry())

    await session_service.revoke_all_user_sessions("user-a")
    await session_service.revoke_all_user_sessions("user-a")

    assert await session_service.get_active_session_count("user-a") == 0
    assert memory_cache.keys("session:user-a") == []
    assert await session_service.is_session_valid("user-b", "token-9")


async def test_count_prunes_stale_keys(session_service, memory_cache):
    for token in ("token-1", "token-2", "token-3"):
        await session_service.store_session("user-a", token, _expiry())
    memory_cache.evict(SessionService.get_session_key("user-a", "token-2"))

    assert await session_service.get_active_session_count("user-a") == 2
    assert await memory_cache.get("user_sessions:user-a") == [
        SessionService.get_session_key("user-a", "token-1"),
        SessionService.get_session_key("user-a", "token-3"),
    ]


async def test_count_deletes_index_when_every_key_is_stale(session_service, memory_cache):
    await session_service.store_session("user-a", "token-1", _expiry())
    memory_cache.evict(SessionService.get_session_key("user-a", "token-1"))

    assert await session_service.get_active_session_count("user-a") == 0
    assert await memory_cache.get("user_sessions:user-a") is None


async def test_validity_check_fails_closed_on_cache_error():
    service = SessionService(BrokenCache())
    assert await service.is_session_valid("user-a", "token-1") is False


async def test_revocation_errors_propagate():
    service = SessionService(BrokenCache())
    with pytest.raises(SessionStoreUnavailableError):
        await service.revoke_session("user-a", "token-1")
    with pytest.raises(SessionStoreUnavailableError):
        await service.revoke_all_user_sessions("user-a")
    with pytest.raises(SessionStoreUnavailableError):
        await service.store_session("user-a", "token-1", _expiry())
