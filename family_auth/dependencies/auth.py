from typing import Optional
import logging

from fastapi import Depends, Request

from family_auth.core.constants import AuthCookie
from family_auth.core.security import decode_access_token, decode_refresh_token
from family_auth.dependencies.services import get_auth_service
from family_auth.models.user import User
from family_auth.schemas.auth import Principal
from family_auth.services.auth_service import AuthService
from family_auth.utils.errors import Unauthorized, UserNotFoundError

logger = logging.getLogger(__name__)


def principal_from_access_token(token: Optional[str]) -> Optional[Principal]:
    """Decode the access cookie; None for a missing or invalid token."""
    payload = decode_access_token(token) if token else None
    if payload is None:
        return None
    return Principal(user_id=payload["sub"], token_id=payload.get("jti"))


def get_principal(request: Request) -> Optional[Principal]:
    if hasattr(request.state, "principal"):
        return request.state.principal
    return principal_from_access_token(request.cookies.get(AuthCookie.ACCESS.value))


async def get_current_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Require a valid access cookie and return its user."""
    principal = get_principal(request)
    if principal is None:
        raise Unauthorized()
    try:
        return auth.users.get_by_id(principal.user_id)
    except UserNotFoundError:
        logger.info(f"Access token for unknown user {principal.user_id}")
        raise Unauthorized()


async def get_refresh_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Require a valid, unrevoked refresh cookie and return its user."""
    refresh_token = request.cookies.get(AuthCookie.REFRESH.value)
    payload = decode_refresh_token(refresh_token) if refresh_token else None
    if payload is None:
        raise Unauthorized("Refresh token is invalid")
    return await auth.verify_refresh_token(refresh_token, payload["sub"])
