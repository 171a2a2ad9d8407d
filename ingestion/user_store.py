"""SQLAlchemy-backed user profiles."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.practice.errors import NotFoundError
from db.models import User
from ingestion.sql_errors import persistence_guard

PROFILE_FIELDS: tuple[str, ...] = (
    "full_name",
    "email",
    "gender",
    "country_code",
    "phone_number",
    "age",
)


class SqlUserStore:
    """CRUD for ``User`` rows over one request-scoped session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, **profile: Any) -> User:
        """Create a user from profile fields (unknown keys are rejected).

        Raises:
            ValueError: If ``profile`` contains a field not in ``PROFILE_FIELDS``.
        """
        unknown = set(profile) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"unknown profile fields: {sorted(unknown)}")
        user = User(**profile)
        with persistence_guard(self._session, "create user"):
            self._session.add(user)
            self._session.commit()
        return user

    def get(self, user_id: str) -> User:
        """
        Raises:
            NotFoundError: If the user does not exist.
        """
        with persistence_guard(self._session, "get user"):
            user = self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def exists(self, user_id: str) -> bool:
        with persistence_guard(self._session, "check user"):
            return self._session.scalars(select(User.id).where(User.id == user_id)).first() is not None

    def update(self, user_id: str, **changes: Any) -> User:
        """Apply non-None profile changes.

        Raises:
            NotFoundError: If the user does not exist.
            ValueError: On unknown fields.
        """
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"unknown profile fields: {sorted(unknown)}")
        user = self.get(user_id)
        with persistence_guard(self._session, "update user"):
            for key, value in changes.items():
                if value is not None:
                    setattr(user, key, value)
            self._session.commit()
        return user

    def delete(self, user_id: str) -> bool:
        """Delete a user profile. Practice history is kept.

        Returns:
            True if a user was deleted, False if not found.
        """
        with persistence_guard(self._session, "delete user"):
            user = self._session.get(User, user_id)
            if user is None:
                return False
            self._session.delete(user)
            self._session.commit()
        return True
