"""Application constants such as cookie names and cache key prefixes."""
from enum import Enum


class AuthCookie(str, Enum):
    ACCESS = "authentication"
    REFRESH = "refresh"


SESSION_PREFIX = "session:"
USER_SESSIONS_PREFIX = "user_sessions:"
