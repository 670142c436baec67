"""
Booking lifecycle: creation, seat changes, cancellation, payment status,
completion and private-hire finalization.

Bookings start Confirmed and end Cancelled or Completed. Payment status
moves independently. Every state change is a conditional UPDATE on the
current status, so repeated or racing requests cannot apply a transition
(or its referral side effects) twice.

Each operation validates and looks everything up before writing, commits
once, and only then notifies. Notification failures never undo a booking.
"""

import logging

from sqlalchemy import func

from app import db
from app.errors import NotFoundError, InvalidInputError, ConflictError
from app.models import Booking, Car, Route, User
from app.models.booking import BOOKING_STATUSES, PAYMENT_STATUSES
from app.services import discounts, pricing
from app.utils import commit_or_raise
from app.utils.validators import require_choice, require_positive_int

logger = logging.getLogger(__name__)


class BookingService:
    """
    Prices bookings and moves them through their lifecycle.

    Args:
        settings: object with ``get_setting(key) -> Optional[str]``
        dispatcher: object with ``notify(booking, event_type)``
        km_per_day (float): distance assumed per rental day for private estimates
        trust_client_price (bool): use a caller-supplied private-hire price
            as the estimate instead of recomputing it
    """

    def __init__(self, settings, dispatcher, km_per_day=150.0, trust_client_price=False):
        self.settings = settings
        self.dispatcher = dispatcher
        self.km_per_day = km_per_day
        self.trust_client_price = trust_client_price

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get_booking(self, booking_id):
        booking = db.session.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError('Booking not found')
        return booking

    @staticmethod
    def _get_user(user_id):
        user = db.session.get(User, user_id) if user_id is not None else None
        if user is None:
            raise NotFoundError('User not found')
        return user

    @staticmethod
    def _lock_route(route_id):
        """Load the route with a row lock so capacity checks serialize"""
        route = Route.query.filter_by(id=route_id).with_for_update().first()
        if route is None:
            raise NotFoundError('Route not found')
        return route

    @staticmethod
    def _check_capacity(route, seats, exclude_booking_id=None):
        capacity = route.seat_capacity
        if capacity is None:
            return

        query = db.session.query(func.coalesce(func.sum(Booking.seats_booked), 0)).filter(
            Booking.route_id == route.id,
            Booking.status != 'Cancelled',
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        taken = int(query.scalar() or 0)

        if taken + seats > capacity:
            raise ConflictError(
                'Not enough seats available',
                details={'seatsAvailable': max(capacity - taken, 0), 'seatsRequested': seats},
            )

    def _apply_referral_discount(self, user, subtotal):
        """Take the user's referral reward off ``subtotal`` if one is available.

        The reward is consumed in the caller's transaction. Returns the
        discount amount actually applied.
        """
        discount, should_consume = discounts.resolve_referral_discount(user, subtotal, self.settings)
        if not should_consume:
            return 0.0
        if not discounts.consume_referral_reward(user.id):
            logger.info('Referral reward for user %s already consumed by another booking', user.id)
            return 0.0
        return discount

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def create_route_booking(self, route_id, user_id, seats_to_book,
                             payment_status=None, payment_details=None):
        seats = require_positive_int(seats_to_book, 'seatsToBook')
        if payment_status is not None:
            require_choice(payment_status, PAYMENT_STATUSES, 'payment status')

        user = self._get_user(user_id)
        route = self._lock_route(route_id)
        self._check_capacity(route, seats)

        driver_id = route.car.driver_id if route.car else None
        subscription_percent = discounts.resolve_subscription_discount(driver_id)
        subtotal = pricing.route_subtotal(route.price, seats, subscription_percent)
        referral_discount = self._apply_referral_discount(user, subtotal)

        booking = Booking(
            user_id=user.id,
            booking_type='Route',
            status='Confirmed',
            payment_status=payment_status or 'Pending',
            payment_details=payment_details,
            route_id=route.id,
            seats_booked=seats,
            total_price=pricing.net_of_discount(subtotal, referral_discount),
            discount_applied=referral_discount,
        )
        db.session.add(booking)
        commit_or_raise('create route booking')

        logger.info(
            'Route booking %s created: route=%s user=%s seats=%s total=%.2f referral_discount=%.2f',
            booking.id, route.id, user.id, seats, booking.total_price, referral_discount,
        )
        self.dispatcher.notify(booking, 'BookingConfirmation')
        return booking

    def create_private_booking(self, user_id, car_id, pickup_location, dropoff_location,
                               start_date, end_date, seats_booked=None, payment_status=None,
                               total_price=None, estimated_distance_km=None, payment_details=None):
        """Create a private hire priced from the car's rate and the rental window.

        ``start_date`` / ``end_date`` are naive UTC datetimes.
        """
        if start_date is None or end_date is None:
            raise InvalidInputError('startDate and endDate must be ISO-8601 timestamps')
        if end_date <= start_date:
            raise InvalidInputError('endDate must be after startDate')
        if seats_booked is not None:
            seats_booked = require_positive_int(seats_booked, 'seatsBooked')
        if payment_status is not None:
            require_choice(payment_status, PAYMENT_STATUSES, 'payment status')

        user = self._get_user(user_id)
        car = db.session.get(Car, car_id) if car_id is not None else None
        if car is None or car.status == 'Deleted':
            raise NotFoundError('Car not found')

        subscription_percent = discounts.resolve_subscription_discount(car.driver_id)
        computed = pricing.apply_percent_discount(
            pricing.estimate_private_base(
                car.price_per_km, start_date, end_date, self.km_per_day,
                min_km_per_day=car.min_km_per_day,
                estimated_distance_km=estimated_distance_km,
            ),
            subscription_percent,
        )

        subtotal = computed
        if total_price is not None:
            if self.trust_client_price:
                subtotal = float(total_price)
            elif abs(float(total_price) - computed) > 0.01:
                logger.warning(
                    'Ignoring client price %.2f for private hire of car %s; server estimate is %.2f',
                    float(total_price), car.id, computed,
                )

        referral_discount = self._apply_referral_discount(user, subtotal)

        booking = Booking(
            user_id=user.id,
            booking_type='Private',
            status='Confirmed',
            payment_status=payment_status or 'Pending',
            payment_details=payment_details,
            car_id=car.id,
            seats_booked=seats_booked,
            pickup_location=pickup_location,
            dropoff_location=dropoff_location,
            start_date=start_date,
            end_date=end_date,
            estimated_distance_km=estimated_distance_km,
            total_price=pricing.net_of_discount(subtotal, referral_discount),
            discount_applied=referral_discount,
        )
        db.session.add(booking)
        commit_or_raise('create private booking')

        logger.info(
            'Private booking %s created: car=%s user=%s total=%.2f referral_discount=%.2f',
            booking.id, car.id, user.id, booking.total_price, referral_discount,
        )
        self.dispatcher.notify(booking, 'BookingConfirmation')
        return booking

    # ------------------------------------------------------------------
    # Modifications
    # ------------------------------------------------------------------
    def update_seats(self, booking_id, new_seat_count, route_id=None):
        """Re-price a route booking for a new seat count.

        The referral discount recorded at creation stays subtracted.
        """
        seats = require_positive_int(new_seat_count, 'newSeatCount')

        booking = db.session.get(Booking, booking_id)
        if booking is None or booking.booking_type != 'Route' or booking.route_id is None:
            raise NotFoundError('Booking or related info not found')
        if route_id is not None and str(route_id) != str(booking.route_id):
            raise InvalidInputError('routeId does not match the booking')
        if booking.is_terminal:
            raise ConflictError('Cannot change seats on a {} booking'.format(booking.status.lower()))

        route = self._lock_route(booking.route_id)
        self._check_capacity(route, seats, exclude_booking_id=booking.id)

        driver_id = route.car.driver_id if route.car else None
        subscription_percent = discounts.resolve_subscription_discount(driver_id)
        subtotal = pricing.route_subtotal(route.price, seats, subscription_percent)

        booking.seats_booked = seats
        booking.total_price = pricing.net_of_discount(subtotal, booking.discount_applied)
        commit_or_raise('update booking seats')

        logger.info('Booking %s seats updated to %s (total=%.2f)', booking.id, seats, booking.total_price)
        return booking

    def update_payment_status(self, booking_id, status):
        require_choice(status, PAYMENT_STATUSES, 'payment status')
        booking = self.get_booking(booking_id)

        booking.payment_status = status
        commit_or_raise('update payment status')

        logger.info('Booking %s payment status set to %s', booking.id, status)
        return booking

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _transition(self, booking, new_status, **values):
        """Move ``booking`` out of Confirmed. Returns False if it had already left."""
        values['status'] = new_status
        moved = Booking.query.filter(
            Booking.id == booking.id,
            Booking.status == 'Confirmed',
        ).update(values, synchronize_session='fetch')
        return moved == 1

    def cancel(self, booking_id):
        """Cancel a confirmed booking, handing back any referral reward it used.

        Cancelling an already-cancelled booking returns it unchanged.
        """
        booking = self.get_booking(booking_id)
        if booking.status == 'Cancelled':
            logger.debug('Booking %s already cancelled', booking.id)
            return booking
        if booking.status == 'Completed':
            raise ConflictError('Completed bookings cannot be cancelled')

        if not self._transition(booking, 'Cancelled'):
            db.session.rollback()
            booking = self.get_booking(booking_id)
            if booking.status == 'Cancelled':
                return booking
            raise ConflictError('Booking is no longer confirmed')

        if booking.discount_applied and booking.discount_applied > 0:
            discounts.restore_referral_reward(booking.user_id)
        commit_or_raise('cancel booking')
        db.session.refresh(booking)

        logger.info('Booking %s cancelled', booking.id)
        self.dispatcher.notify(booking, 'BookingCancellation')
        return booking

    def _complete(self, booking, **values):
        """Mark a confirmed booking Completed and run the referral grant check"""
        if booking.status == 'Completed':
            raise ConflictError('Booking is already completed')
        if booking.status == 'Cancelled':
            raise ConflictError('Cancelled bookings cannot be completed')
        if not self._transition(booking, 'Completed', **values):
            db.session.rollback()
            raise ConflictError('Booking is no longer confirmed')

        discounts.grant_referral_reward(booking.user_id)
        commit_or_raise('complete booking')
        db.session.refresh(booking)

        logger.info('Booking %s completed (total=%.2f)', booking.id, booking.total_price)
        return booking

    def update_status(self, booking_id, status):
        require_choice(status, BOOKING_STATUSES, 'booking status')
        booking = self.get_booking(booking_id)

        if booking.status == status:
            return booking
        if status == 'Cancelled':
            return self.cancel(booking_id)
        if status == 'Completed':
            return self._complete(booking)
        raise ConflictError('Cannot move a {} booking back to Confirmed'.format(booking.status.lower()))

    def finalize(self, booking_id, actual_distance_km=None, final_price=None):
        """Replace a private hire's estimate with its actual price and complete it.

        An explicit ``final_price`` overrides the distance calculation. The
        referral discount recorded at creation is subtracted either way.
        """
        if actual_distance_km is None and final_price is None:
            raise InvalidInputError('actualDistanceKm or finalPrice is required')

        booking = db.session.get(Booking, booking_id)
        if booking is None or booking.booking_type != 'Private':
            raise NotFoundError('Private booking not found')

        if final_price is not None:
            gross = float(final_price)
        else:
            car = booking.car
            if car is None:
                raise NotFoundError('Car not found')
            gross = pricing.final_private_price(
                car.price_per_km, actual_distance_km,
                booking.start_date, booking.end_date, car.min_km_per_day,
            )

        values = {'total_price': pricing.net_of_discount(gross, booking.discount_applied)}
        if actual_distance_km is not None:
            values['actual_distance_km'] = float(actual_distance_km)
        return self._complete(booking, **values)
