"""Retry utilities with exponential backoff.

Upstream retailer fetches are single-attempt; retries are only used for
local writes that can fail transiently (a locked SQLite file or a dropped
Postgres connection).
"""

import logging

import structlog
from sqlalchemy.exc import DBAPIError, OperationalError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
    before_sleep_log,
)


logger = structlog.get_logger(__name__)


def is_transient_db_error(exc: BaseException) -> bool:
    """Lost connections and lock timeouts; constraint and data errors are not retried."""
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


# Reusable retry decorator for database writes
db_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception(is_transient_db_error),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
