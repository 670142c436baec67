"""
Request ID middleware for request tracing and logging
"""
import uuid

from flask import has_request_context, request

REQUEST_ID_HEADER = 'X-Request-ID'
ENVIRON_KEY = 'cablink.request_id'


def current_request_id(default='-'):
    """Id of the request being handled, or ``default`` outside a request"""
    if not has_request_context():
        return default
    return request.environ.get(ENVIRON_KEY, default)


class RequestIdMiddleware:
    """
    WSGI middleware to tag each request with an id.

    An incoming X-Request-ID is reused so ids survive a proxy hop; otherwise
    a fresh one is generated. The id is echoed back on the response.
    """

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        request_id = environ.get('HTTP_X_REQUEST_ID') or uuid.uuid4().hex
        environ[ENVIRON_KEY] = request_id

        def start_response_with_id(status, headers, exc_info=None):
            headers.append((REQUEST_ID_HEADER, request_id))
            return start_response(status, headers, exc_info)

        return self.app(environ, start_response_with_id)
