"""
Booking engine exceptions and their JSON rendering.

Services raise these before mutating anything; the handlers registered in
``create_app`` turn them into ``{"error": message}`` responses.
"""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class CabLinkError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self):
        data = {'error': self.message}
        if self.details:
            data['details'] = self.details
        return data


class NotFoundError(CabLinkError):
    """Referenced booking, route, car, user or plan does not exist"""
    status_code = 404


class InvalidInputError(CabLinkError):
    """Missing or malformed request field"""
    status_code = 400


class ConflictError(CabLinkError):
    """Request is well-formed but clashes with the current state"""
    status_code = 409


class UpstreamError(CabLinkError):
    """Persistence failure during the primary write"""
    status_code = 500


def register_error_handlers(app):
    from app import db

    @app.errorhandler(CabLinkError)
    def handle_cablink_error(error):
        if error.status_code >= 500:
            logger.error('%s: %s', type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception('Unhandled database error')
        return jsonify({'error': 'Database error'}), 500
