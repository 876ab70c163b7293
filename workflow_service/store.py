"""
Store link — Workflow Service
Read helpers with bounded retry, and the single-shot commit that turns
concurrent-write failures into Conflict.
"""

import functools
import logging
import time
from datetime import timezone

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from workflow_service.errors import Conflict, StoreUnavailable
from workflow_service.extensions import db

logger = logging.getLogger(__name__)


def with_read_retry(fn):
    """
    Retry an idempotent read on OperationalError with exponential backoff.
    Gives up with StoreUnavailable after STORE_READ_RETRIES attempts.
    """

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        max_retries = max(1, current_app.config.get("STORE_READ_RETRIES", 3))
        retry_delay = current_app.config.get("STORE_RETRY_DELAY", 0.2)

        for attempt in range(1, max_retries + 1):
            try:
                return fn(*args, **kwargs)
            except OperationalError as e:
                db.session.rollback()
                logger.warning(f"Store read {fn.__name__} failed on attempt {attempt}/{max_retries}: {e}")
                if attempt == max_retries:
                    logger.error(f"All {max_retries} attempts of {fn.__name__} failed")
                    raise StoreUnavailable("Store temporarily unavailable") from e
                time.sleep(retry_delay * (2 ** (attempt - 1)))

    return wrapper


@with_read_retry
def fetch(model, **criteria):
    return model.query.filter_by(**criteria).first()


@with_read_retry
def fetch_for_update(model, **criteria):
    """
    SELECT ... FOR UPDATE on a single row. Holds the row until the
    surrounding transaction commits or rolls back.
    """
    return (
        model.query.with_for_update()
        .populate_existing()
        .filter_by(**criteria)
        .first()
    )


@with_read_retry
def fetch_all(query):
    return query.all()


def commit_or_conflict(conflict_message="Record was modified concurrently"):
    """Commit once. Writes are never retried."""
    try:
        db.session.commit()
    except (StaleDataError, IntegrityError) as e:
        db.session.rollback()
        logger.info(f"Conditional write rejected: {e}")
        raise Conflict(conflict_message) from e
    except OperationalError as e:
        db.session.rollback()
        logger.error(f"Store write failed: {e}")
        raise StoreUnavailable("Store temporarily unavailable") from e


def as_utc(value):
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def isoformat(value):
    value = as_utc(value)
    return value.isoformat() if value else None
