import asyncio
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from family_auth.core.constants import AuthCookie
from family_auth.dependencies.auth import get_current_user, get_refresh_user
from family_auth.dependencies.rate_limit import rate_limit
from family_auth.dependencies.services import get_auth_service
from family_auth.models.user import User
from family_auth.schemas.auth import (
    SignupRequest, SigninRequest, MessageResponse, SessionCountResponse, SessionInfo,
)
from family_auth.schemas.user import UserResponse
from family_auth.services.auth_service import AuthService, clear_auth_cookies
from family_auth.utils.helpers import get_device_info

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit),
):
    """
    Register with email/password
    - Reject duplicate emails (409)
    - Sign the new user in (sets both auth cookies)
    """
    user = await asyncio.to_thread(auth.signup, payload.email, payload.password)
    await auth.signin(user, response=response, device_info=get_device_info(request))
    return user


@router.post("/signin", response_model=MessageResponse, status_code=200)
async def signin(
    payload: SigninRequest,
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit),
):
    """Email/password login. Tokens are delivered as httpOnly cookies."""
    user = await asyncio.to_thread(auth.verify_user, payload.email, payload.password)
    await auth.signin(user, response=response, device_info=get_device_info(request))
    return {"message": "Signed in successfully"}


@router.post("/refresh", response_model=MessageResponse, status_code=200)
async def refresh(
    request: Request,
    response: Response,
    user: User = Depends(get_refresh_user),
    auth: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit),
):
    """Exchange the refresh cookie for a new access + refresh pair."""
    await auth.rotate(
        user,
        request.cookies[AuthCookie.REFRESH.value],
        response=response,
        device_info=get_device_info(request),
    )
    return {"message": "Tokens refreshed"}


@router.post("/logout", response_model=MessageResponse, status_code=200)
async def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Logout user (revoke the session behind the refresh cookie)"""
    refresh_token = request.cookies.get(AuthCookie.REFRESH.value)
    if refresh_token:
        await auth.logout(current_user.id, refresh_token)

    clear_auth_cookies(response)
    return {"message": "Logged out successfully"}


@router.post("/logout-all", response_model=MessageResponse, status_code=200)
async def logout_all(
    response: Response,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Revoke every session of the current user."""
    await auth.logout_all_devices(current_user.id)

    clear_auth_cookies(response)
    return {"message": "Logged out from all devices successfully"}


@router.get("/sessions/count", response_model=SessionCountResponse)
async def session_count(
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    count = await auth.get_active_session_count(current_user.id)
    return {"active_session_count": count}


@router.get("/sessions", response_model=List[SessionInfo])
async def list_sessions(
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    return auth.list_sessions(current_user.id)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
