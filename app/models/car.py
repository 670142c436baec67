"""Car model"""
from app import db
from .base import BaseModel

CAR_STATUSES = ('Active', 'PendingApproval', 'PendingPayment', 'Deleted')


class Car(BaseModel):
    """
    Car model - a vehicle operated by a driver or car owner
    """
    __tablename__ = 'cars'

    driver_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    model = db.Column(db.String(255))
    car_number = db.Column(db.String(50))

    price_per_km = db.Column(db.Float, nullable=False, default=0.0)
    # Floor on billable distance per rental day for private hire
    min_km_per_day = db.Column(db.Float, nullable=True)
    capacity = db.Column(db.Integer, nullable=False, default=4)

    status = db.Column(db.String(20), nullable=False, default='Active')

    driver = db.relationship('User', foreign_keys=[driver_id])

    def __repr__(self):
        return f'<Car {self.car_number} ({self.status})>'

    def to_summary(self):
        driver = self.driver
        return {
            'id': self.id,
            'model': self.model,
            'carNumber': self.car_number,
            'driver': {
                'id': driver.id,
                'name': driver.name,
                'phone': driver.phone,
            } if driver else None,
        }
