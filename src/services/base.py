"""Transaction scaffold shared by the write services."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from domain.errors import ConcurrentUpdateError, ConsistencyError, RatingEngineError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(session: Session, operation: str) -> Iterator[Session]:
    """Run one operation in a single transaction; any failure rolls back every write."""
    try:
        with session.begin():
            yield session
    except ConcurrentUpdateError:
        logger.warning("%s lost a concurrent update race and was rolled back", operation)
        raise
    except RatingEngineError as exc:
        logger.info("%s rejected: %s", operation, exc)
        raise
    except IntegrityError as exc:
        logger.warning("%s violated a constraint and was rolled back: %s", operation, exc.orig)
        if "rating_events" in str(exc.orig):
            raise ConcurrentUpdateError(
                f"{operation} conflicted with another rating update; please retry"
            ) from exc
        raise ConsistencyError(f"{operation} failed and was rolled back; please retry") from exc
