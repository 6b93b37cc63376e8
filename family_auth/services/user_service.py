from datetime import datetime
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from family_auth.core.security import hash_password
from family_auth.models.user import User
from family_auth.services.interfaces import UserStore
from family_auth.utils.errors import UserAlreadyExistsError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserService(UserStore):
    """Minimal user-record store backing authentication."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFoundError("User not found")
        return user

    def get_by_email(self, email: str) -> User:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user:
            raise UserNotFoundError("User not found")
        return user

    def create_user(self, email: str, password: str) -> User:
        user = User(
            email=email.lower(),
            password_hash=hash_password(password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a signup race; the unique constraint on email is the real guard
            self.db.rollback()
            logger.info("Duplicate signup rejected by unique constraint")
            raise UserAlreadyExistsError()
        self.db.refresh(user)
        return user

    def update_last_login(self, user_id: str) -> None:
        try:
            updated = (
                self.db.query(User)
                .filter(User.id == user_id)
                .update({User.last_login: datetime.utcnow()}, synchronize_session="fetch")
            )
            if not updated:
                raise UserNotFoundError("User not found")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
