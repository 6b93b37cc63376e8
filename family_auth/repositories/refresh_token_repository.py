from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from family_auth.models.refresh_token import RefreshToken
from family_auth.services.interfaces import RefreshTokenStore

logger = logging.getLogger(__name__)


class RefreshTokenRepository(RefreshTokenStore):
    """SQLAlchemy-backed refresh-token store. Every write commits."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        device_info: Optional[str] = None,
    ) -> RefreshToken:
        record = RefreshToken(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            device_info=device_info[:255] if device_info else None,
        )
        self.db.add(record)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def find_by_user_id_and_token_hash(self, user_id: str, token_hash: str) -> Optional[RefreshToken]:
        return (
            self.db.query(RefreshToken)
            .filter(
                RefreshToken.user_id == user_id,
                RefreshToken.token_hash == token_hash,
            )
            .first()
        )

    def find_by_user_id(self, user_id: str) -> List[RefreshToken]:
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.created_at.desc())
            .all()
        )

    def delete_by_user_id_and_token_hash(self, user_id: str, token_hash: str) -> None:
        self._delete(
            RefreshToken.user_id == user_id,
            RefreshToken.token_hash == token_hash,
        )

    def delete_all_by_user_id(self, user_id: str) -> int:
        return self._delete(RefreshToken.user_id == user_id)

    def delete_expired(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.utcnow()
        deleted = self._delete(RefreshToken.expires_at < now)
        logger.info(f"Deleted {deleted} expired refresh tokens")
        return deleted

    def _delete(self, *criteria) -> int:
        try:
            deleted = (
                self.db.query(RefreshToken)
                .filter(*criteria)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return deleted
