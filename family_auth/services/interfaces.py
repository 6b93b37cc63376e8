"""
Abstract contracts for the stores the auth service is composed from.

Concrete implementations are chosen at startup (see
``family_auth.dependencies.services``) and passed to ``AuthService`` through
its constructor, so tests can swap any of them out.

Example:
    sessions = SessionService(RedisCache(raise_errors=True))
    auth = AuthService(
        users=UserService(db),
        sessions=sessions,
        refresh_tokens=RefreshTokenRepository(db),
    )
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional

from family_auth.models.refresh_token import RefreshToken
from family_auth.models.user import User


class CacheBackend(ABC):
    """Key/value cache with per-key TTL (seconds)."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def is_healthy(self) -> bool:
        pass


class SessionStore(ABC):
    """
    Fast-path session index.

    Tracks which (user, refresh token) pairs are live so revocation takes
    effect immediately. The durable refresh-token store stays authoritative
    for existence and expiry.
    """

    @abstractmethod
    async def store_session(self, user_id: str, refresh_token: str, expires_at: datetime) -> None:
        pass

    @abstractmethod
    async def is_session_valid(self, user_id: str, refresh_token: str) -> bool:
        pass

    @abstractmethod
    async def revoke_session(self, user_id: str, refresh_token: str) -> None:
        pass

    @abstractmethod
    async def revoke_all_user_sessions(self, user_id: str) -> None:
        pass

    @abstractmethod
    async def get_active_session_count(self, user_id: str) -> int:
        pass


class RefreshTokenStore(ABC):
    """Durable refresh-token records keyed by (user_id, token_hash)."""

    @abstractmethod
    def create(
        self,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        device_info: Optional[str] = None,
    ) -> RefreshToken:
        pass

    @abstractmethod
    def find_by_user_id_and_token_hash(self, user_id: str, token_hash: str) -> Optional[RefreshToken]:
        pass

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> List[RefreshToken]:
        pass

    @abstractmethod
    def delete_by_user_id_and_token_hash(self, user_id: str, token_hash: str) -> None:
        pass

    @abstractmethod
    def delete_all_by_user_id(self, user_id: str) -> int:
        pass

    @abstractmethod
    def delete_expired(self, now: Optional[datetime] = None) -> int:
        pass


class UserStore(ABC):
    """The slice of user management the auth flow depends on."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> User:
        """Raises UserNotFoundError when absent."""

    @abstractmethod
    def get_by_email(self, email: str) -> User:
        """Raises UserNotFoundError when absent."""

    @abstractmethod
    def create_user(self, email: str, password: str) -> User:
        """Hashes the password. Raises UserAlreadyExistsError on duplicate email."""

    @abstractmethod
    def update_last_login(self, user_id: str) -> None:
        pass
