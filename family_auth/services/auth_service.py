from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional
import logging

from fastapi import Response

from family_auth.core.config import settings
from family_auth.core.constants import AuthCookie
from family_auth.core.security import (
    verify_password, dummy_password_hash, create_access_token, create_refresh_token, hash_token,
)
from family_auth.models.refresh_token import RefreshToken
from family_auth.models.user import User
from family_auth.services.interfaces import RefreshTokenStore, SessionStore, UserStore
from family_auth.utils.errors import (
    InvalidCredentialsError, Unauthorized, UserAlreadyExistsError, UserNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime


def set_auth_cookies(response: Response, tokens: IssuedTokens) -> None:
    response.set_cookie(
        AuthCookie.ACCESS.value,
        tokens.access_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.AUTH_COOKIE_SAMESITE,
        expires=tokens.access_expires_at,
    )
    response.set_cookie(
        AuthCookie.REFRESH.value,
        tokens.refresh_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.AUTH_COOKIE_SAMESITE,
        expires=tokens.refresh_expires_at,
    )


def clear_auth_cookies(response: Response) -> None:
    for cookie in AuthCookie:
        response.delete_cookie(
            cookie.value,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.AUTH_COOKIE_SAMESITE,
        )


class AuthService:
    """
    Session orchestrator.

    Composes the user store, the cache-backed session index and the durable
    refresh-token store. A refresh token is usable only while both its
    session-index entry and its durable record exist. Signin persists the
    durable record before the index entry; verification checks the index
    first and logout revokes it first.
    """

    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        refresh_tokens: RefreshTokenStore,
    ):
        self.users = users
        self.sessions = sessions
        self.refresh_tokens = refresh_tokens

    def verify_user(self, email: str, password: str) -> User:
        """Check credentials without revealing which part was wrong."""
        try:
            user = self.users.get_by_email(email)
        except UserNotFoundError:
            verify_password(password, dummy_password_hash())
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash or ""):
            raise InvalidCredentialsError()
        return user

    def signup(self, email: str, password: str) -> User:
        """
        Register a new user.
        - Reject an email that is already registered
        - Create the user (the store hashes the password)

        The existence check is best-effort; two concurrent signups can both
        pass it, and the loser gets the same 409 from the unique constraint.
        """
        try:
            self.users.get_by_email(email)
        except UserNotFoundError:
            pass
        else:
            raise UserAlreadyExistsError("Email already exists")

        return self.users.create_user(email=email, password=password)

    async def signin(
        self,
        user: User,
        response: Optional[Response] = None,
        device_info: Optional[str] = None,
    ) -> IssuedTokens:
        """
        Issue an access/refresh token pair for an authenticated user.
        - Record last login (best-effort)
        - Sign both tokens with their own secret and lifetime
        - Persist the refresh-token hash, then index the session in cache
        - Set the auth cookies when a response is given
        """
        try:
            self.users.update_last_login(user.id)
        except Exception as e:
            logger.error(f"Failed to update last login for user {user.id}: {e}")

        now = datetime.now(timezone.utc)
        access_expires_at = now + timedelta(seconds=settings.JWT_ACCESS_EXPIRATION)
        refresh_expires_at = now + timedelta(seconds=settings.JWT_REFRESH_EXPIRATION)

        access_token, _ = create_access_token(user.id, expires_at=access_expires_at)
        refresh_token, _ = create_refresh_token(user.id, expires_at=refresh_expires_at)

        self.refresh_tokens.create(
            user_id=user.id,
            token_hash=hash_token(refresh_token),
            expires_at=refresh_expires_at.replace(tzinfo=None),
            device_info=device_info,
        )
        await self.sessions.store_session(user.id, refresh_token, refresh_expires_at)

        tokens = IssuedTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_expires_at,
            refresh_expires_at=refresh_expires_at,
        )
        if response is not None:
            set_auth_cookies(response, tokens)

        logger.info(f"Issued session for user {user.id}")
        return tokens

    async def verify_refresh_token(self, refresh_token: str, user_id: str) -> User:
        """
        Resolve the user owning a refresh token.
        - Session index first, so a logout wins over a racing refresh
        - Durable record must exist and be unexpired (expired rows are deleted)

        Every failure is a 401; the reason is only logged.
        """
        try:
            if not await self.sessions.is_session_valid(user_id, refresh_token):
                raise Unauthorized("Session has been revoked")

            token_hash = hash_token(refresh_token)
            stored = self.refresh_tokens.find_by_user_id_and_token_hash(user_id, token_hash)
            if not stored:
                raise Unauthorized("Refresh token not found")

            if stored.expires_at < datetime.utcnow():
                self.refresh_tokens.delete_by_user_id_and_token_hash(user_id, token_hash)
                raise Unauthorized("Refresh token has expired")

            return self.users.get_by_id(user_id)
        except Unauthorized as e:
            logger.info(f"Refresh rejected for user {user_id}: {e.detail}")
            raise
        except Exception as e:
            logger.warning(f"Refresh token verification failed for user {user_id}: {e!r}")
            raise Unauthorized("Refresh token is invalid")

    async def rotate(
        self,
        user: User,
        refresh_token: str,
        response: Optional[Response] = None,
        device_info: Optional[str] = None,
    ) -> IssuedTokens:
        """Retire a verified refresh token and issue a fresh pair in its place."""
        await self.logout(user.id, refresh_token)
        return await self.signin(user, response=response, device_info=device_info)

    async def logout(self, user_id: str, refresh_token: str) -> None:
        """Revoke one session from both stores. Errors from either propagate."""
        first_error: Optional[Exception] = None

        try:
            await self.sessions.revoke_session(user_id, refresh_token)
        except Exception as e:
            logger.error(f"Failed to revoke cached session for user {user_id}: {e}")
            first_error = e

        try:
            self.refresh_tokens.delete_by_user_id_and_token_hash(user_id, hash_token(refresh_token))
        except Exception as e:
            logger.error(f"Failed to delete refresh token for user {user_id}: {e}")
            first_error = first_error or e

        if first_error is not None:
            raise first_error
        logger.info(f"User {user_id} logged out")

    async def logout_all_devices(self, user_id: str) -> None:
        """Revoke every session of a user. Safe to repeat."""
        first_error: Optional[Exception] = None

        try:
            await self.sessions.revoke_all_user_sessions(user_id)
        except Exception as e:
            logger.error(f"Failed to revoke cached sessions for user {user_id}: {e}")
            first_error = e

        try:
            deleted = self.refresh_tokens.delete_all_by_user_id(user_id)
            logger.info(f"Deleted {deleted} refresh tokens for user {user_id}")
        except Exception as e:
            logger.error(f"Failed to delete refresh tokens for user {user_id}: {e}")
            first_error = first_error or e

        if first_error is not None:
            raise first_error

    async def get_active_session_count(self, user_id: str) -> int:
        return await self.sessions.get_active_session_count(user_id)

    def list_sessions(self, user_id: str) -> List[RefreshToken]:
        """Durable sessions of a user, newest first."""
        return self.refresh_tokens.find_by_user_id(user_id)
