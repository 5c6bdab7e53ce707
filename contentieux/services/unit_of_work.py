"""Transaction boundary shared by the application services."""

from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.orm import Session

from domain.errors import ContentieuxError

logger = logging.getLogger(__name__)


@contextmanager
def transaction(session: Session, operation: str):
    """Commit everything written inside the block, or roll all of it back.

    Business errors are logged at WARNING, anything else with its traceback;
    both are re-raised to the caller.
    """
    try:
        yield session
        session.commit()
    except ContentieuxError as exc:
        session.rollback()
        logger.warning("%s annulé : %s", operation, exc)
        raise
    except Exception:
        session.rollback()
        logger.exception("%s annulé : erreur lors de l'écriture", operation)
        raise
