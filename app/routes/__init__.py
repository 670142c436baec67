"""API route blueprints"""
from .bookings import bookings_bp
from .settings import settings_bp
from .subscriptions import subscriptions_bp
from .notifications import notifications_bp

__all__ = [
    'bookings_bp',
    'settings_bp',
    'subscriptions_bp',
    'notifications_bp',
]
