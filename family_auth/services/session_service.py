from datetime import datetime, timezone
from typing import List, Optional
import logging

from family_auth.core.config import settings
from family_auth.core.constants import SESSION_PREFIX, USER_SESSIONS_PREFIX
from family_auth.core.security import hash_token
from family_auth.schemas.session import SessionRecord
from family_auth.services.interfaces import CacheBackend, SessionStore

logger = logging.getLogger(__name__)


class SessionService(SessionStore):
    """
    Cache-backed session index.

    Each live refresh token has a record at ``session:{user_id}:{token_hash}``
    and its key is listed under ``user_sessions:{user_id}``. The list is the
    only way to enumerate a user's sessions; it may hold stale keys, which
    ``get_active_session_count`` prunes.

    Errors from the cache propagate, except in ``is_session_valid`` which
    fails closed.
    """

    def __init__(self, cache: CacheBackend, default_ttl: Optional[int] = None):
        self.cache = cache
        self.default_ttl = default_ttl or settings.SESSION_DEFAULT_TTL_SECONDS

    async def store_session(self, user_id: str, refresh_token: str, expires_at: datetime) -> None:
        session_key = self.get_session_key(user_id, refresh_token)
        user_sessions_key = self.get_user_sessions_key(user_id)

        now = datetime.now(timezone.utc)
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        ttl = int((expires_at - now).total_seconds())
        if ttl <= 0:
            logger.warning(f"Non-positive session TTL for user {user_id}, using default of {self.default_ttl}s")
            ttl = self.default_ttl

        record = SessionRecord(
            user_id=user_id,
            refresh_token=refresh_token,
            created_at=now,
            expires_at=expires_at,
        )
        await self.cache.set(session_key, record.model_dump(mode="json"), ttl)

        user_sessions = await self._get_user_sessions(user_sessions_key)
        if session_key not in user_sessions:
            user_sessions.append(session_key)
            await self.cache.set(user_sessions_key, user_sessions, self._index_ttl(ttl))

        logger.debug(f"Session stored for user {user_id}")

    async def is_session_valid(self, user_id: str, refresh_token: str) -> bool:
        session_key = self.get_session_key(user_id, refresh_token)
        try:
            session = await self.cache.get(session_key)
        except Exception as e:
            logger.error(f"Error validating session for user {user_id}: {e}")
            return False

        if not session:
            logger.debug(f"Session not found for user {user_id}")
            return False
        return True

    async def revoke_session(self, user_id: str, refresh_token: str) -> None:
        session_key = self.get_session_key(user_id, refresh_token)
        user_sessions_key = self.get_user_sessions_key(user_id)

        await self.cache.delete(session_key)

        user_sessions = await self._get_user_sessions(user_sessions_key)
        remaining = [key for key in user_sessions if key != session_key]
        await self._write_user_sessions(user_sessions_key, remaining)

        logger.debug(f"Session revoked for user {user_id}")

    async def revoke_all_user_sessions(self, user_id: str) -> None:
        user_sessions_key = self.get_user_sessions_key(user_id)
        user_sessions = await self._get_user_sessions(user_sessions_key)

        for session_key in user_sessions:
            await self.cache.delete(session_key)
        await self.cache.delete(user_sessions_key)

        logger.debug(f"All {len(user_sessions)} sessions revoked for user {user_id}")

    async def get_active_session_count(self, user_id: str) -> int:
        user_sessions_key = self.get_user_sessions_key(user_id)
        user_sessions = await self._get_user_sessions(user_sessions_key)

        live_sessions = []
        for session_key in user_sessions:
            if await self.cache.get(session_key):
                live_sessions.append(session_key)

        if len(live_sessions) != len(user_sessions):
            logger.debug(
                f"Pruning {len(user_sessions) - len(live_sessions)} stale session keys for user {user_id}"
            )
            await self._write_user_sessions(user_sessions_key, live_sessions)

        return len(live_sessions)

    @staticmethod
    def get_session_key(user_id: str, refresh_token: str) -> str:
        return f"{SESSION_PREFIX}{user_id}:{hash_token(refresh_token)}"

    @staticmethod
    def get_user_sessions_key(user_id: str) -> str:
        return f"{USER_SESSIONS_PREFIX}{user_id}"

    async def _get_user_sessions(self, user_sessions_key: str) -> List[str]:
        return list(await self.cache.get(user_sessions_key) or [])

    async def _write_user_sessions(self, user_sessions_key: str, session_keys: List[str]) -> None:
        if session_keys:
            await self.cache.set(user_sessions_key, session_keys, self._index_ttl())
        else:
            await self.cache.delete(user_sessions_key)

    def _index_ttl(self, ttl: int = 0) -> int:
        # The index must outlive every session it lists
        return max(ttl, settings.JWT_REFRESH_EXPIRATION, self.default_ttl)
