from flask import Blueprint, request, jsonify

from app.errors import InvalidInputError, NotFoundError
from app.models import Booking
from app.services import get_dispatcher

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('/reminders', methods=['POST'])
def send_payment_reminders():
    """
    Queue payment reminders for bookings whose payment is still pending
    POST /api/notifications/reminders
    Body: {"bookingIds": [1, 2, 3]}
    """
    data = request.get_json(silent=True) or {}
    booking_ids = data.get('bookingIds')

    if not booking_ids or not isinstance(booking_ids, list):
        raise InvalidInputError('bookingIds array is required.')

    bookings = Booking.query.filter(
        Booking.id.in_(booking_ids),
        Booking.payment_status == 'Pending',
    ).all()

    if not bookings:
        raise NotFoundError('No pending bookings found for the given IDs.')

    dispatcher = get_dispatcher()
    queued = sum(len(dispatcher.notify(booking, 'PaymentReminder')) for booking in bookings)

    return jsonify({'message': f'{queued} payment reminders have been queued.'}), 201
