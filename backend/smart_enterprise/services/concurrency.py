# Overview: Retry helpers for database writes that can race with other requests.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

logger = logging.getLogger(__name__)

DEFAULT_RETRY_ON = (OperationalError, StaleDataError)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, retry_on: tuple = DEFAULT_RETRY_ON):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (database locked, deadlocks) and
    StaleDataError by default. Callers that upsert by a unique key pass
    IntegrityError in `retry_on` so a lost insert race turns into an update
    on the next attempt.

    The session is rolled back before every retry. The last error is
    re-raised once attempts are exhausted.
    """
    for attempt in range(attempts):
        try:
            return func()
        except retry_on as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            logger.warning(
                "Retrying after %s (attempt %d/%d)", type(exc).__name__, attempt + 1, attempts
            )
            time.sleep(backoff_base * (2 ** attempt))
    return None
