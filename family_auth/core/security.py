from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
import secrets
import hashlib
from functools import lru_cache
from family_auth.core.config import settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)
def hash_password(password: str) -> str:
    if not password or not isinstance(password, str):
        raise ValueError("Password must be a non-empty string")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    if not isinstance(plain_password, str):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked when no user matches, so both credential failures cost the same."""
    return pwd_context.hash(secrets.token_urlsafe(16))

def hash_token(token: str) -> str:
    """One-way digest used as the storage and cache key for refresh tokens."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

def _create_jwt(
    payload: Dict[str, Any],
    secret: str,
    expires_at: datetime,
) -> tuple[str, str]:
    jti = secrets.token_urlsafe(32)

    payload.update({
        "exp": expires_at,
        "iat": datetime.now(timezone.utc),
        "jti": jti,
    })

    token = jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )
    return token, jti


def create_access_token(
    user_id: str,
    expires_at: Optional[datetime] = None,
) -> tuple[str, str]:
    return _create_jwt(
        payload={
            "sub": str(user_id),
            "type": ACCESS_TOKEN_TYPE,
        },
        secret=settings.JWT_ACCESS_SECRET,
        expires_at=expires_at
        or datetime.now(timezone.utc) + timedelta(seconds=settings.JWT_ACCESS_EXPIRATION),
    )


def create_refresh_token(
    user_id: str,
    expires_at: Optional[datetime] = None,
) -> tuple[str, str]:
    return _create_jwt(
        payload={
            "sub": str(user_id),
            "type": REFRESH_TOKEN_TYPE,
        },
        secret=settings.JWT_REFRESH_SECRET,
        expires_at=expires_at
        or datetime.now(timezone.utc) + timedelta(seconds=settings.JWT_REFRESH_EXPIRATION),
    )

def _decode(token: str, secret: str, token_type: str) -> Optional[Dict[str, Any]]:
    if not token or not secret:
        return None
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None
    if payload.get("type") != token_type or not payload.get("sub"):
        return None
    return payload


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    return _decode(token, settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    return _decode(token, settings.JWT_REFRESH_SECRET, REFRESH_TOKEN_TYPE)
