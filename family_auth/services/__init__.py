"""Service layer package."""

__all__ = [
    "interfaces",
    "auth_service",
    "session_service",
    "user_service",
]
