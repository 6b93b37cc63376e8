"""Access-cookie middleware.

Decodes the `authentication` cookie and attaches the resulting `Principal`
(or None) to `request.state.principal`. It never rejects a request: routes
such as signin and refresh must stay reachable with a stale cookie, and the
`get_current_user` dependency enforces auth where it is required.
"""
from starlette.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware
from family_auth.core.constants import AuthCookie
from family_auth.dependencies.auth import principal_from_access_token


class JWTCookieMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.principal = principal_from_access_token(
            request.cookies.get(AuthCookie.ACCESS.value)
        )
        return await call_next(request)
