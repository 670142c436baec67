"""Route model"""
from app import db
from .base import BaseModel


class Route(BaseModel):
    """
    Route model - a scheduled shared trip whose seats are sold individually
    """
    __tablename__ = 'routes'

    car_id = db.Column(db.Integer, db.ForeignKey('cars.id', ondelete='CASCADE'), nullable=False)

    origin = db.Column(db.String(255))
    destination = db.Column(db.String(255))
    date = db.Column(db.Date)
    time = db.Column(db.String(10))

    price = db.Column(db.Float, nullable=False)  # per seat
    seats_offered = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='Active')

    car = db.relationship('Car')

    __table_args__ = (
        db.Index('idx_routes_date', 'date'),
    )

    def __repr__(self):
        return f'<Route {self.origin} -> {self.destination} on {self.date}>'

    @property
    def seat_capacity(self):
        """Seats offered on the route, falling back to the car's capacity"""
        if self.seats_offered is not None:
            return self.seats_offered
        return self.car.capacity if self.car else None

    def to_summary(self):
        return {
            'id': self.id,
            'from': self.origin,
            'to': self.destination,
            'date': self.date.isoformat() if self.date else None,
            'time': self.time,
            'price': self.price,
        }
