"""User record storage."""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gatekeeper.clock import Clock, get_clock
from gatekeeper.errors import AlreadyExistsError, StoreError
from gatekeeper.models.user import User

logger = logging.getLogger("gatekeeper")


class UserRepository:
    """CRUD over user records, keyed by id and by unique email.

    Database failures are logged here and re-raised as StoreError.
    """

    def __init__(self, db: Session, clock: Clock | None = None) -> None:
        self.db = db
        self.clock = clock or get_clock()

    def create(self, email: str, password_hash: str, first_name: str, last_name: str) -> User:
        """Insert an active user. Raises AlreadyExistsError if the email is taken."""
        user = User(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            is_active=True,
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyExistsError("email already registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to create user")
            raise StoreError("failed to create user") from e
        self.db.refresh(user)
        return user

    def find_by_email(self, email: str) -> User | None:
        try:
            return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.exception("Failed to look up user by email")
            raise StoreError("failed to look up user") from e

    def find_by_id(self, user_id: str) -> User | None:
        try:
            return self.db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.exception("Failed to look up user %s", user_id)
            raise StoreError("failed to look up user") from e

    def update_password(self, user_id: str, password_hash: str) -> bool:
        """Overwrite the stored hash. Returns False if no such user exists."""
        return self._update(user_id, password_hash=password_hash, updated_at=self.clock.now())

    def update_last_login(self, user_id: str, when: datetime | None = None) -> bool:
        return self._update(user_id, last_login_at=when or self.clock.now())

    def _update(self, user_id: str, **values) -> bool:
        try:
            result = self.db.execute(update(User).where(User.id == user_id).values(**values))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to update user %s (%s)", user_id, ", ".join(values))
            raise StoreError("failed to update user") from e
        # Drop identity-map copies so later reads see the new row.
        self.db.expire_all()
        return result.rowcount > 0
