"""SQLAlchemy models package"""
from .user import User
from .subscription_plan import SubscriptionPlan
from .car import Car
from .route import Route
from .booking import Booking
from .notification import Notification
from .system_setting import SystemSetting

__all__ = [
    'User',
    'SubscriptionPlan',
    'Car',
    'Route',
    'Booking',
    'Notification',
    'SystemSetting',
]
