from fastapi import FastAPI
from fastapi.exceptions import HTTPException as FastAPIHTTPException

from family_auth.core.config import settings
from family_auth.core.logger import setup_logging
from family_auth.middleware.cors import configure_cors
from family_auth.middleware.logging import RequestLoggerMiddleware
from family_auth.middleware.auth import JWTCookieMiddleware
from family_auth.middleware import error_handler

# Routers
from family_auth.routers import auth as auth_router
from family_auth.routers import health as health_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    setup_logging()
    settings.validate()
    description = (
        "Family Auth API.\n\n"
        "Signup, signin, refresh-token rotation and multi-device session management "
        "for the families API. Tokens are delivered as httpOnly cookies."
    )

    openapi_tags = [
        {"name": "authentication", "description": "Signup, signin, refresh, logout and session endpoints."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title="Family Auth API",
        version="0.1.0",
        description=description,
        openapi_tags=openapi_tags,
    )

    # Middleware
    configure_cors(app)
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(JWTCookieMiddleware)

    # Exception handlers
    app.add_exception_handler(FastAPIHTTPException, error_handler.http_exception_handler)
    app.add_exception_handler(Exception, error_handler.unhandled_exception_handler)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(auth_router.router)

    return app


app = create_app()
