from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import or_, func

from app.errors import InvalidInputError
from app.extensions import limiter
from app.models import Booking, Route
from app.services import get_booking_service
from app.utils import (
    paginate_query, parse_datetime, parse_date,
    require_fields, optional_non_negative_number,
)

bookings_bp = Blueprint('bookings', __name__)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError('Request body must be a JSON object')
    return data


@bookings_bp.route('/', methods=['GET'])
def list_bookings():
    """
    List bookings with user, car and route details
    GET /api/bookings/?page=1&limit=6&carId=1&type=Route&date=2024-01-15&routeId=3
    """
    query = Booking.query.outerjoin(Route, Booking.route_id == Route.id)

    car_id = request.args.get('carId', type=int)
    if car_id:
        query = query.filter(or_(Booking.car_id == car_id, Route.car_id == car_id))

    booking_type = request.args.get('type') or request.args.get('bookingType')
    if booking_type and booking_type != 'All':
        query = query.filter(Booking.booking_type == booking_type)

    route_id = request.args.get('routeId', type=int)
    if route_id:
        query = query.filter(Booking.route_id == route_id)

    date = request.args.get('date')
    if date:
        date_obj = parse_date(date)
        if date_obj is None:
            return jsonify({'error': 'Invalid date format. Use YYYY-MM-DD'}), 400
        query = query.filter(or_(Route.date == date_obj, func.date(Booking.start_date) == date))

    query = query.order_by(Booking.id.desc())

    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', current_app.config['ITEMS_PER_PAGE'], type=int)

    result = paginate_query(query, page, limit, current_app.config['MAX_ITEMS_PER_PAGE'])
    result['items'] = [booking.to_dict(include_related=True) for booking in result['items']]

    return jsonify(result), 200


@bookings_bp.route('/<int:booking_id>', methods=['GET'])
def get_booking(booking_id):
    """Get a specific booking by ID"""
    booking = get_booking_service().get_booking(booking_id)
    return jsonify(booking.to_dict(include_related=True)), 200


@bookings_bp.route('/route', methods=['POST'])
@limiter.limit('30 per minute')
def create_route_booking():
    """
    Book seats on a scheduled route
    POST /api/bookings/route
    Body: {
        "routeId": 1,
        "userId": 7,
        "seatsToBook": 2,
        "paymentStatus": "Pending",
        "paymentDetails": {"method": "UPI"}
    }
    """
    data = _json_body()
    require_fields(data, ['routeId', 'userId', 'seatsToBook'])

    booking = get_booking_service().create_route_booking(
        route_id=data['routeId'],
        user_id=data['userId'],
        seats_to_book=data['seatsToBook'],
        payment_status=data.get('paymentStatus'),
        payment_details=data.get('paymentDetails'),
    )
    return jsonify(booking.to_dict()), 201


@bookings_bp.route('/private', methods=['POST'])
@limiter.limit('30 per minute')
def create_private_booking():
    """
    Hire a car exclusively for a time window
    POST /api/bookings/private
    Body: {
        "userId": 7,
        "carId": 2,
        "pickupLocation": "Pune Station",
        "dropoffLocation": "Mumbai Airport",
        "startDate": "2024-01-15T06:00:00.000Z",
        "endDate": "2024-01-17T06:00:00.000Z",
        "estimatedDistanceKm": 320,
        "totalPrice": 5400
    }
    """
    data = _json_body()
    require_fields(data, ['userId', 'carId', 'pickupLocation', 'dropoffLocation', 'startDate', 'endDate'])

    booking = get_booking_service().create_private_booking(
        user_id=data['userId'],
        car_id=data['carId'],
        pickup_location=data['pickupLocation'],
        dropoff_location=data['dropoffLocation'],
        start_date=parse_datetime(data['startDate']),
        end_date=parse_datetime(data['endDate']),
        seats_booked=data.get('seatsBooked'),
        payment_status=data.get('paymentStatus'),
        total_price=optional_non_negative_number(data.get('totalPrice'), 'totalPrice'),
        estimated_distance_km=optional_non_negative_number(
            data.get('estimatedDistanceKm'), 'estimatedDistanceKm'
        ),
        payment_details=data.get('paymentDetails'),
    )
    return jsonify(booking.to_dict()), 201


@bookings_bp.route('/<int:booking_id>/seats', methods=['PUT'])
def update_seats(booking_id):
    """
    Change the number of seats on a route booking
    PUT /api/bookings/:id/seats
    Body: {"newSeatCount": 3, "routeId": 1}
    """
    data = _json_body()
    require_fields(data, ['newSeatCount'])

    booking = get_booking_service().update_seats(
        booking_id, data['newSeatCount'], route_id=data.get('routeId')
    )
    return jsonify({'message': 'Booking updated successfully', 'booking': booking.to_dict()}), 200


@bookings_bp.route('/<int:booking_id>/cancel', methods=['PUT'])
def cancel_booking(booking_id):
    """Cancel a booking"""
    booking = get_booking_service().cancel(booking_id)
    return jsonify({'message': 'Booking cancelled', 'booking': booking.to_dict()}), 200


@bookings_bp.route('/<int:booking_id>/payment', methods=['PUT'])
def update_payment_status(booking_id):
    """
    Update payment status
    PUT /api/bookings/:id/payment
    Body: {"status": "Paid"}
    """
    data = request.get_json(silent=True) or {}
    booking = get_booking_service().update_payment_status(booking_id, data.get('status'))
    return jsonify({'message': 'Payment status updated', 'booking': booking.to_dict()}), 200


@bookings_bp.route('/<int:booking_id>/status', methods=['PUT'])
def update_status(booking_id):
    """
    Update booking status
    PUT /api/bookings/:id/status
    Body: {"status": "Completed"}
    """
    data = request.get_json(silent=True) or {}
    booking = get_booking_service().update_status(booking_id, data.get('status'))
    return jsonify({'message': 'Booking status updated', 'booking': booking.to_dict()}), 200


@bookings_bp.route('/<int:booking_id>/finalize', methods=['PUT'])
def finalize_booking(booking_id):
    """
    Replace a private hire's estimate with the actual price and complete it
    PUT /api/bookings/:id/finalize
    Body: {"actualDistanceKm": 250} or {"finalPrice": 3200}
    """
    data = request.get_json(silent=True) or {}
    booking = get_booking_service().finalize(
        booking_id,
        actual_distance_km=optional_non_negative_number(data.get('actualDistanceKm'), 'actualDistanceKm'),
        final_price=optional_non_negative_number(data.get('finalPrice'), 'finalPrice'),
    )
    return jsonify({'message': 'Booking finalized', 'booking': booking.to_dict()}), 200
