"""Booking model"""
from app import db
from .base import BaseModel, utcnow

BOOKING_TYPES = ('Route', 'Private')
BOOKING_STATUSES = ('Confirmed', 'Cancelled', 'Completed')
TERMINAL_STATUSES = ('Cancelled', 'Completed')
PAYMENT_STATUSES = ('Pending', 'Paid', 'Failed', 'Refunded')


class Booking(BaseModel):
    """
    Booking model - a seat reservation on a route or a private hire of a car

    ``total_price`` holds the estimate until a private booking is finalized.
    ``discount_applied`` is the absolute referral discount taken off the
    price; it stays subtracted through seat changes and finalization and is
    handed back as a reward if the booking is cancelled.
    """
    __tablename__ = 'bookings'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    booking_date = db.Column(db.Date, nullable=False, default=lambda: utcnow().date())
    booking_type = db.Column(db.String(10), nullable=False)

    status = db.Column(db.String(20), nullable=False, default='Confirmed')
    payment_status = db.Column(db.String(20), nullable=False, default='Pending')
    payment_details = db.Column(db.JSON, nullable=True)

    # Route bookings
    route_id = db.Column(db.Integer, db.ForeignKey('routes.id', ondelete='CASCADE'), nullable=True)
    seats_booked = db.Column(db.Integer, nullable=True)

    # Private-hire bookings
    car_id = db.Column(db.Integer, db.ForeignKey('cars.id', ondelete='SET NULL'), nullable=True)
    pickup_location = db.Column(db.String(255))
    dropoff_location = db.Column(db.String(255))
    start_date = db.Column(db.DateTime)
    end_date = db.Column(db.DateTime)
    estimated_distance_km = db.Column(db.Float, nullable=True)
    actual_distance_km = db.Column(db.Float, nullable=True)

    total_price = db.Column(db.Float, nullable=False, default=0.0)
    discount_applied = db.Column(db.Float, nullable=False, default=0.0)

    __table_args__ = (
        db.CheckConstraint("booking_type IN ('Route', 'Private')", name='ck_booking_type'),
        db.CheckConstraint(
            "status IN ('Confirmed', 'Cancelled', 'Completed')",
            name='ck_booking_status',
        ),
        db.CheckConstraint(
            "payment_status IN ('Pending', 'Paid', 'Failed', 'Refunded')",
            name='ck_booking_payment_status',
        ),
        db.Index('idx_bookings_user_status', 'user_id', 'status'),
        db.Index('idx_bookings_route', 'route_id'),
    )

    user = db.relationship('User', foreign_keys=[user_id])
    route = db.relationship('Route')
    car = db.relationship('Car')

    def __repr__(self):
        return f'<Booking {self.id} {self.booking_type} {self.status}>'

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    @property
    def resolved_car(self):
        """The private-hire car, or the car running the booked route"""
        if self.car is not None:
            return self.car
        return self.route.car if self.route else None

    def to_dict(self, include_related=False):
        data = super().to_dict(exclude=['created_at', 'updated_at'])
        if not include_related:
            return data

        user = self.user
        car = self.resolved_car
        data['user'] = {'id': user.id, 'name': user.name, 'phone': user.phone} if user else None
        data['car'] = car.to_summary() if car else None
        data['route'] = self.route.to_summary() if self.route else None
        return data
