"""
Logging configuration.

Every record carries the id assigned by ``RequestIdMiddleware`` so log lines
from one request can be correlated.
"""
import logging

from app.middleware.request_id import current_request_id

LOG_FORMAT = '%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s'


class RequestIdFilter(logging.Filter):
    """Attach the current request id (or '-') to log records"""

    def filter(self, record):
        record.request_id = current_request_id()
        return True


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger('app')
    root.setLevel(level)
    if not any(isinstance(f, RequestIdFilter) for h in root.handlers for f in h.filters):
        root.addHandler(handler)
    app.logger.setLevel(level)
