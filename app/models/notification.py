"""Notification model"""
from app import db
from .base import BaseModel

NOTIFICATION_TYPES = ('BookingConfirmation', 'BookingCancellation', 'PaymentReminder')
CHANNELS = ('Email', 'SMS', 'WhatsApp')


class Notification(BaseModel):
    """
    Notification model - audit row for one channel of one booking event
    """
    __tablename__ = 'notifications'

    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    type = db.Column(db.String(50), nullable=False)
    channel = db.Column(db.String(20), nullable=False)
    message = db.Column(db.Text, nullable=False)

    # Queued, Sent, Failed, Skipped
    status = db.Column(db.String(20), nullable=False, default='Queued')

    __table_args__ = (
        db.Index('idx_notifications_booking', 'booking_id', 'type'),
        db.Index('idx_notifications_user', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f'<Notification {self.type}/{self.channel} - booking={self.booking_id}>'
