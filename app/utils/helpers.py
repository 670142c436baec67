"""
Helper utilities
"""
import logging
import math
from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.errors import UpstreamError

logger = logging.getLogger(__name__)


def paginate_query(query, page=1, per_page=6, max_per_page=100):
    """
    Paginate a SQLAlchemy query

    Args:
        query: Flask-SQLAlchemy query
        page (int): 1-based page number
        per_page (int): Items per page
        max_per_page (int): Upper bound on per_page

    Returns:
        dict: items plus totalItems / totalPages / currentPage
    """
    page = max(1, page)
    per_page = min(max_per_page, max(1, per_page))

    paginated = query.paginate(page=page, per_page=per_page, error_out=False)

    return {
        'items': paginated.items,
        'totalItems': paginated.total,
        'totalPages': math.ceil(paginated.total / per_page) if paginated.total else 0,
        'currentPage': page,
    }


def parse_datetime(value):
    """
    Parse an ISO-8601 timestamp into a naive UTC datetime

    Accepts a trailing 'Z'. Naive input is taken to be UTC already.

    Args:
        value (str): Timestamp string

    Returns:
        datetime: Naive UTC datetime or None if invalid
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(date_string, format='%Y-%m-%d'):
    """
    Parse date string to date object

    Returns:
        date: Date object or None if invalid
    """
    try:
        return datetime.strptime(date_string, format).date()
    except (ValueError, TypeError):
        return None


def add_months(value, months):
    """Shift a date by whole months, clamping to the last day of the target month"""
    return value + relativedelta(months=months)


def commit_or_raise(action):
    """
    Commit the session, rolling back on failure

    Args:
        action (str): What was being saved, used in the log and error message

    Raises:
        UpstreamError: if the database rejects the commit
    """
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Failed to %s', action)
        raise UpstreamError('Failed to {}'.format(action))
