"""Request helpers."""
from typing import Optional
from fastapi import Request


def get_device_info(request: Request) -> Optional[str]:
    """User-Agent label stored alongside a refresh token."""
    user_agent = request.headers.get("user-agent", "").strip()
    return user_agent[:255] or None
