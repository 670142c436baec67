"""
Notification dispatcher for booking events.

One event (confirmation, cancellation, payment reminder) fans out to every
configured channel. Each channel gets its own ``notifications`` row for
audit, then delivery is attempted per channel.

IMPORTANT: ``notify`` never raises. A failed audit write or a provider
error on one channel is logged and must not affect the other channels or
the booking operation that triggered it.
"""

import logging
import threading
from collections import namedtuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import Notification, User
from app.models.notification import CHANNELS
from app.services.mailer import EmailSender
from app.services.settings import is_flag_enabled, EMAIL_NOTIFICATIONS_ENABLED
from app.services.sms import TwilioMessenger

logger = logging.getLogger(__name__)

SUBJECTS = {
    "BookingConfirmation": "Booking confirmed",
    "BookingCancellation": "Booking cancelled",
    "PaymentReminder": "Payment reminder",
}

Delivery = namedtuple("Delivery", "notification_id channel address subject message")


def render_message(event_type, booking):
    if event_type == "BookingConfirmation":
        return "Your booking #{} is confirmed.".format(booking.id)
    if event_type == "BookingCancellation":
        return "Your booking #{} has been cancelled.".format(booking.id)
    if event_type == "PaymentReminder":
        return "Reminder: Payment for booking #{} of INR {} is pending.".format(
            booking.id, booking.total_price
        )
    raise ValueError("Unknown notification type: {}".format(event_type))


class NotificationDispatcher:
    """
    Fans booking events out to Email, SMS and WhatsApp.

    ``senders`` maps a channel name to ``callable(address, subject, message)``
    returning a provider id on delivery or None when nothing was sent.
    """

    def __init__(self, senders, channels=CHANNELS, settings=None, run_async=True):
        self.senders = senders
        self.channels = [c for c in channels if c in CHANNELS]
        self.settings = settings
        self.run_async = run_async

    @classmethod
    def from_config(cls, config, settings=None):
        email = EmailSender.from_config(config)
        twilio = TwilioMessenger.from_config(config)
        senders = {
            "Email": email.send,
            "SMS": lambda address, subject, message: twilio.send_sms(address, message),
            "WhatsApp": lambda address, subject, message: twilio.send_whatsapp(address, message),
        }
        return cls(
            senders,
            channels=config.get("NOTIFICATION_CHANNELS", CHANNELS),
            settings=settings,
            run_async=config.get("NOTIFICATION_ASYNC", True),
        )

    def active_channels(self):
        channels = list(self.channels)
        if "Email" in channels and self.settings is not None:
            try:
                if not is_flag_enabled(self.settings, EMAIL_NOTIFICATIONS_ENABLED):
                    channels.remove("Email")
            except SQLAlchemyError:
                logger.exception("Could not read %s; keeping email enabled", EMAIL_NOTIFICATIONS_ENABLED)
        return channels

    def notify(self, booking, event_type):
        """Record and send ``event_type`` for ``booking`` to its user. Never raises."""
        try:
            message = render_message(event_type, booking)
            return self.notify_user(booking.user_id, booking.id, event_type, message)
        except Exception:
            logger.exception("Failed to dispatch %s for booking %s", event_type, getattr(booking, "id", None))
            return []

    def notify_user(self, user_id, booking_id, event_type, message):
        """Record one row per channel, then deliver. Returns the rows. Never raises."""
        try:
            user = db.session.get(User, user_id)
            rows = [
                Notification(
                    booking_id=booking_id,
                    user_id=user_id,
                    type=event_type,
                    channel=channel,
                    message=message,
                )
                for channel in self.active_channels()
            ]
            db.session.add_all(rows)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception("Failed to record %s notifications for user %s", event_type, user_id)
            return []

        subject = SUBJECTS.get(event_type, event_type)
        deliveries = [
            Delivery(row.id, row.channel, self._address_for(user, row.channel), subject, message)
            for row in rows
        ]
        self._dispatch(deliveries)
        return rows

    @staticmethod
    def _address_for(user, channel):
        if user is None:
            return None
        return user.email if channel == "Email" else user.phone

    def _dispatch(self, deliveries):
        if not self.run_async:
            for delivery in deliveries:
                self._deliver(delivery)
            return

        app = current_app._get_current_object()
        for delivery in deliveries:
            try:
                threading.Thread(
                    target=self._deliver_in_context,
                    args=(app, delivery),
                    daemon=True,
                ).start()
            except Exception:
                logger.exception("Failed to start %s delivery thread", delivery.channel)

    def _deliver_in_context(self, app, delivery):
        with app.app_context():
            self._deliver(delivery)

    def _deliver(self, delivery):
        status = self._send(delivery)
        try:
            Notification.query.filter_by(id=delivery.notification_id).update({"status": status})
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to record delivery status for notification %s", delivery.notification_id)

    def _send(self, delivery):
        sender = self.senders.get(delivery.channel)
        if sender is None or not delivery.address:
            logger.info(
                "Skipping %s notification %s: no sender or address",
                delivery.channel, delivery.notification_id,
            )
            return "Skipped"
        try:
            result = sender(delivery.address, delivery.subject, delivery.message)
        except Exception:
            logger.exception("%s delivery failed for notification %s", delivery.channel, delivery.notification_id)
            return "Failed"
        return "Sent" if result else "Skipped"
