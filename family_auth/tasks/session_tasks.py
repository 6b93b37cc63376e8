# family_auth/tasks/session_tasks.py
from celery import shared_task
import logging

from family_auth.core.database import SessionLocal
from family_auth.repositories.refresh_token_repository import RefreshTokenRepository

logger = logging.getLogger(__name__)


def purge_expired(db) -> int:
    """Delete durable refresh tokens past their expiry."""
    return RefreshTokenRepository(db).delete_expired()


@shared_task(bind=True, max_retries=3)
def purge_expired_refresh_tokens(self):
    """
    Sweep expired refresh-token rows.
    Expiry is also enforced at verification time, so a missed run only
    leaves dead rows behind. Scheduled hourly via Celery Beat.
    """
    db = SessionLocal()
    try:
        deleted = purge_expired(db)
        logger.info(f"Purged {deleted} expired refresh tokens")
        return deleted
    except Exception as e:
        logger.error(f"Error in purge_expired_refresh_tokens: {e}")
        raise self.retry(exc=e, countdown=60)
    finally:
        db.close()
