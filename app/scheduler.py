"""
CabLink Background Scheduler

Runs periodic tasks:
- Send payment reminders for confirmed bookings still unpaid a day after
  they were made (every PAYMENT_REMINDER_INTERVAL_HOURS)

Only starts when ENABLE_SCHEDULER=true to prevent running on multiple instances.
"""

import logging
from datetime import timedelta

logger = logging.getLogger(__name__)


def send_payment_reminders(app):
    """Remind users about confirmed bookings whose payment is still pending.

    A booking is reminded at most once per interval.
    """
    with app.app_context():
        from app.models import Booking, Notification
        from app.models.base import utcnow
        from app.services import get_dispatcher

        now = utcnow()
        interval = timedelta(hours=app.config.get('PAYMENT_REMINDER_INTERVAL_HOURS', 24))
        cutoff_date = (now - timedelta(days=1)).date()

        bookings = Booking.query.filter(
            Booking.status == 'Confirmed',
            Booking.payment_status == 'Pending',
            Booking.booking_date <= cutoff_date,
        ).all()

        dispatcher = get_dispatcher()
        sent = 0
        for booking in bookings:
            recent = Notification.query.filter(
                Notification.booking_id == booking.id,
                Notification.type == 'PaymentReminder',
                Notification.created_at >= now - interval,
            ).first()
            if recent:
                continue
            if dispatcher.notify(booking, 'PaymentReminder'):
                sent += 1

        if sent:
            logger.info("Scheduler: sent payment reminders for %d bookings", sent)
        return sent


def init_scheduler(app):
    """Initialize and start the background scheduler."""
    try:
        from apscheduler.schedulers.background import BackgroundScheduler

        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            send_payment_reminders,
            "interval",
            hours=app.config.get('PAYMENT_REMINDER_INTERVAL_HOURS', 24),
            args=[app],
            id="send_payment_reminders",
            name="Send payment reminders for unpaid bookings",
        )
        scheduler.start()
        logger.info("Background scheduler started")
        return scheduler
    except Exception:
        logger.exception("Failed to start scheduler")
        return None
