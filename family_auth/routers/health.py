import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.orm import Session

from family_auth.core.database import get_db
from family_auth.dependencies.services import get_session_cache
from family_auth.schemas.common import HealthResponse
from family_auth.services.interfaces import CacheBackend

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(
    response: Response,
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_session_cache),
):
    """Database and cache liveness. 503 when either is down."""
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        database_ok = False

    cache_ok = await cache.is_healthy()

    healthy = database_ok and cache_ok
    if not healthy:
        response.status_code = 503
    return {
        "status": "ok" if healthy else "degraded",
        "database": database_ok,
        "cache": cache_ok,
    }
