"""Lightweight per-IP per-path rate limiter for auth endpoints."""
import time
from collections import defaultdict, deque
from fastapi import HTTPException, Request, status
from family_auth.core.config import settings

# In-memory sliding window buckets: key -> deque[timestamps]
_buckets = defaultdict(deque)


def _prune(window_start: float) -> None:
    """Drop timestamps outside the window and forget idle clients."""
    for key in list(_buckets):
        bucket = _buckets[key]
        while bucket and bucket[0] <= window_start:
            bucket.popleft()
        if not bucket:
            del _buckets[key]


async def rate_limit(request: Request):
    if not settings.RATE_LIMIT_ENABLED:
        return True

    now = time.time()
    window_start = now - settings.RATE_LIMIT_PERIOD_SECONDS
    # Forwarded headers are client-controlled; only the peer address counts
    client_host = request.client.host if request.client else "unknown"
    key = f"{client_host}:{request.url.path}"

    _prune(window_start)
    bucket = _buckets[key]

    if len(bucket) >= settings.RATE_LIMIT_REQUESTS:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please slow down.",
        )

    bucket.append(now)
    return True


def reset_rate_limits() -> None:
    _buckets.clear()
