"""Booking engine services"""
from flask import current_app


def get_booking_service():
    """Build a BookingService wired to the current app's collaborators"""
    from app.services.bookings import BookingService

    return BookingService(
        settings=current_app.extensions['cablink.settings'],
        dispatcher=current_app.extensions['cablink.dispatcher'],
        km_per_day=current_app.config.get('PRIVATE_ESTIMATE_KM_PER_DAY', 150.0),
        trust_client_price=current_app.config.get('TRUST_CLIENT_PRIVATE_PRICE', False),
    )


def get_dispatcher():
    return current_app.extensions['cablink.dispatcher']


def get_settings():
    return current_app.extensions['cablink.settings']
