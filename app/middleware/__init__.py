"""Middleware package"""
from .request_id import RequestIdMiddleware, current_request_id

__all__ = ['RequestIdMiddleware', 'current_request_id']
