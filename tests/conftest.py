"""
Pytest configuration and fixtures for CabLink backend tests
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from app import create_app, db
from app.models import User, SubscriptionPlan, Car, Route
from app.services import get_booking_service
from app.services.settings import DatabaseSettings


@pytest.fixture
def app():
    """Create application instance with a fresh in-memory database"""
    app = create_app('testing')

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def service(app):
    """BookingService wired to the test app's settings and dispatcher"""
    return get_booking_service()


@pytest.fixture
def outbox(app):
    """Capture every delivered notification instead of calling providers"""
    sent = []

    def recorder(channel):
        def _send(address, subject, message):
            sent.append({
                'channel': channel,
                'address': address,
                'subject': subject,
                'message': message,
            })
            return 'msg-{}'.format(len(sent))
        return _send

    dispatcher = app.extensions['cablink.dispatcher']
    dispatcher.senders = {channel: recorder(channel) for channel in ('Email', 'SMS', 'WhatsApp')}
    return sent


@pytest.fixture
def set_setting(app):
    """Write a system setting"""
    def _set(key, value):
        DatabaseSettings().set_setting(key, value)
        db.session.commit()
    return _set


@pytest.fixture
def user_factory(app):
    """Factory for creating users"""
    counter = {'n': 0}

    def _create_user(**kwargs):
        counter['n'] += 1
        defaults = {
            'name': 'Test User {}'.format(counter['n']),
            'email': 'user{}@example.com'.format(counter['n']),
            'phone': '98765{:05d}'.format(counter['n']),
            'role': 'Customer',
        }
        defaults.update(kwargs)

        user = User(**defaults)
        db.session.add(user)
        db.session.commit()
        return user

    return _create_user


@pytest.fixture
def customer(user_factory):
    return user_factory(name='Asha Customer')


@pytest.fixture
def driver(user_factory):
    return user_factory(name='Ravi Driver', role='Driver')


@pytest.fixture
def subscribed_driver(user_factory):
    """Driver holding an active plan with a 10% customer discount"""
    plan = SubscriptionPlan(
        name='Gold', duration_months=3, price=999.0,
        customer_discount_percent=10.0, provider_role='Admin',
    )
    db.session.add(plan)
    db.session.commit()
    return user_factory(
        name='Sunil Subscribed', role='Driver',
        subscription_plan_id=plan.id,
        subscription_expiry_date=datetime.now(timezone.utc) + timedelta(days=30),
    )


@pytest.fixture
def car_factory(app, driver):
    def _create_car(**kwargs):
        defaults = {
            'driver_id': driver.id,
            'model': 'Toyota Innova',
            'car_number': 'MH12AB1234',
            'price_per_km': 12.0,
            'min_km_per_day': None,
            'capacity': 4,
            'status': 'Active',
        }
        defaults.update(kwargs)

        car = Car(**defaults)
        db.session.add(car)
        db.session.commit()
        return car

    return _create_car


@pytest.fixture
def car(car_factory):
    return car_factory()


@pytest.fixture
def route_factory(app, car):
    def _create_route(**kwargs):
        defaults = {
            'car_id': car.id,
            'origin': 'Pune',
            'destination': 'Mumbai',
            'date': date(2024, 1, 15),
            'time': '08:30',
            'price': 100.0,
        }
        defaults.update(kwargs)

        route = Route(**defaults)
        db.session.add(route)
        db.session.commit()
        return route

    return _create_route


@pytest.fixture
def route(route_factory):
    return route_factory()


@pytest.fixture
def hire_car(car_factory):
    """Car rented privately at 12/km with a 100 km/day minimum"""
    return car_factory(model='Maruti Dzire', car_number='MH14CD5678', min_km_per_day=100.0)


@pytest.fixture
def private_booking(service, customer, hire_car):
    """Three-day private hire, 1 to 4 January"""
    return service.create_private_booking(
        user_id=customer.id,
        car_id=hire_car.id,
        pickup_location='Pune Station',
        dropoff_location='Goa',
        start_date=datetime(2024, 1, 1, 6, 0),
        end_date=datetime(2024, 1, 4, 6, 0),
    )
