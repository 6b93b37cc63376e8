"""Models package placeholder."""

__all__ = [
    "base",
    "user",
    "refresh_token",
]
