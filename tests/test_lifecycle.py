"""
Booking lifecycle tests for CabLink
Tests status transitions and the referral reward they consume, restore and grant
"""
import pytest
from datetime import datetime

from app import db
from app.errors import ConflictError, InvalidInputError, NotFoundError
from app.models import Booking
from app.services import discounts


@pytest.fixture
def referrer(user_factory):
    return user_factory(name='Meera Referrer')


@pytest.fixture
def referee(user_factory, referrer):
    return user_factory(name='Karan Referee', referred_by=referrer.id)


class TestReferralGrant:
    """Completing a referee's first booking rewards the referrer once"""

    def test_first_completion_grants_reward(self, service, route, referrer, referee):
        booking = service.create_route_booking(route.id, referee.id, 1)

        service.update_status(booking.id, 'Completed')

        assert referrer.referral_reward_available is True

    def test_second_completion_does_not_grant(self, service, route, referrer, referee):
        first = service.create_route_booking(route.id, referee.id, 1)
        second = service.create_route_booking(route.id, referee.id, 1)
        service.update_status(first.id, 'Completed')

        referrer.referral_reward_available = False
        db.session.commit()

        service.update_status(second.id, 'Completed')

        assert referrer.referral_reward_available is False

    def test_finalize_counts_as_completion(self, service, referrer, referee, hire_car):
        booking = service.create_private_booking(
            referee.id, hire_car.id, 'Pune Station', 'Goa',
            datetime(2024, 1, 1, 6, 0), datetime(2024, 1, 2, 6, 0),
        )

        service.finalize(booking.id, actual_distance_km=80)

        assert referrer.referral_reward_available is True

    def test_user_without_referrer(self, service, route, customer):
        booking = service.create_route_booking(route.id, customer.id, 1)
        service.update_status(booking.id, 'Completed')

        assert discounts.grant_referral_reward(customer.id) is None

    def test_cancelled_booking_does_not_count(self, service, route, referrer, referee):
        cancelled = service.create_route_booking(route.id, referee.id, 1)
        service.cancel(cancelled.id)
        assert referrer.referral_reward_available is False

        completed = service.create_route_booking(route.id, referee.id, 1)
        service.update_status(completed.id, 'Completed')

        assert referrer.referral_reward_available is True


class TestReferralConsumption:
    """The reward flag is cleared by exactly one booking"""

    def test_consume_only_once(self, customer):
        customer.referral_reward_available = True
        db.session.commit()

        assert discounts.consume_referral_reward(customer.id) is True
        assert discounts.consume_referral_reward(customer.id) is False

    def test_second_booking_pays_full_price(self, service, route, customer, set_setting):
        set_setting('referral_discount_percent', '10')
        customer.referral_reward_available = True
        db.session.commit()

        first = service.create_route_booking(route.id, customer.id, 1)
        second = service.create_route_booking(route.id, customer.id, 1)

        assert first.discount_applied == 10
        assert second.discount_applied == 0
        assert second.total_price == 100

    def test_garbage_percent_treated_as_zero(self, service, route, customer, set_setting):
        set_setting('referral_discount_percent', 'ten')
        customer.referral_reward_available = True
        db.session.commit()

        booking = service.create_route_booking(route.id, customer.id, 1)

        assert booking.discount_applied == 0
        assert customer.referral_reward_available is True

    def test_discount_never_makes_price_negative(self, service, route, customer, set_setting):
        set_setting('referral_discount_percent', '100')
        customer.referral_reward_available = True
        db.session.commit()

        booking = service.create_route_booking(route.id, customer.id, 2)

        assert booking.discount_applied == 200
        assert booking.total_price == 0


class TestTransitions:
    """Bookings leave Confirmed once and never come back"""

    def test_cancel_then_complete_rejected(self, service, private_booking):
        service.cancel(private_booking.id)

        with pytest.raises(ConflictError):
            service.update_status(private_booking.id, 'Completed')

    def test_complete_twice_rejected(self, service, private_booking):
        service.update_status(private_booking.id, 'Completed')

        # same-status request is a no-op
        assert service.update_status(private_booking.id, 'Completed').status == 'Completed'
        with pytest.raises(ConflictError):
            service.finalize(private_booking.id, final_price=10)

    def test_cancel_without_discount_leaves_flag(self, service, route, customer):
        booking = service.create_route_booking(route.id, customer.id, 1)

        service.cancel(booking.id)

        assert customer.referral_reward_available is False

    def test_cancelled_seats_are_released(self, service, route, customer):
        booking = service.create_route_booking(route.id, customer.id, 4)
        service.cancel(booking.id)

        again = service.create_route_booking(route.id, customer.id, 4)

        assert again.status == 'Confirmed'

    def test_seats_offered_caps_route(self, service, route_factory, customer):
        route = route_factory(seats_offered=2)
        service.create_route_booking(route.id, customer.id, 2)

        with pytest.raises(ConflictError):
            service.create_route_booking(route.id, customer.id, 1)

    def test_unknown_booking(self, service):
        with pytest.raises(NotFoundError):
            service.cancel(12345)

    def test_unknown_status(self, service, private_booking):
        with pytest.raises(InvalidInputError):
            service.update_status(private_booking.id, 'Pending')

    def test_finalize_validates_before_lookup(self, service):
        with pytest.raises(InvalidInputError):
            service.finalize(12345)

    def test_invalid_payment_status_on_create(self, service, route, customer):
        with pytest.raises(InvalidInputError):
            service.create_route_booking(route.id, customer.id, 1, payment_status='Foo')

        assert Booking.query.count() == 0

    def test_infinite_seat_count_rejected(self, service, route, customer):
        with pytest.raises(InvalidInputError):
            service.create_route_booking(route.id, customer.id, float('inf'))

        assert Booking.query.count() == 0
