"""Wiring of concrete stores into the auth service.

Tests replace ``get_session_cache`` through ``app.dependency_overrides``.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from family_auth.cache.cache_service import session_cache
from family_auth.core.database import get_db
from family_auth.repositories.refresh_token_repository import RefreshTokenRepository
from family_auth.services.auth_service import AuthService
from family_auth.services.interfaces import CacheBackend, SessionStore
from family_auth.services.session_service import SessionService
from family_auth.services.user_service import UserService


def get_session_cache() -> CacheBackend:
    return session_cache


def get_session_store(cache: CacheBackend = Depends(get_session_cache)) -> SessionStore:
    return SessionService(cache)


def get_auth_service(
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthService:
    return AuthService(
        users=UserService(db),
        sessions=sessions,
        refresh_tokens=RefreshTokenRepository(db),
    )
