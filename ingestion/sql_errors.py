"""Translate SQLAlchemy failures into ``PersistenceError``.

Every store method runs its database work inside ``persistence_guard`` so
callers only ever see the engine's own exception hierarchy.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.practice.errors import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def persistence_guard(session: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise database errors as ``PersistenceError``.

    Args:
        session: Session the guarded block uses.
        action: Short description for logs and the error message.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Store operation failed (%s): %s", action, exc)
        raise PersistenceError(f"{action} failed") from exc
