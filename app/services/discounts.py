"""
Discount resolution for bookings.

Two discounts stack on a booking price:

* the subscription discount, a percentage the car's driver passes on to
  customers while the driver's plan is active;
* the referral discount, a one-off percentage (``referral_discount_percent``
  setting) a user earns when someone they referred completes a first ride.

Resolving is side-effect free. Consuming, restoring and granting the
referral reward are single conditional UPDATEs; the caller commits.
"""
import logging

from app import db
from app.models import User, SubscriptionPlan, Booking
from app.models.base import utcnow
from app.services.pricing import round_money
from app.services.settings import get_percent_setting, REFERRAL_DISCOUNT_PERCENT

logger = logging.getLogger(__name__)


def resolve_subscription_discount(driver_id, now=None):
    """Return the driver's customer discount percent, or 0 if none applies.

    The plan counts only while the driver's subscription expiry is strictly
    later than ``now``.
    """
    if driver_id is None:
        return 0.0

    driver = db.session.get(User, driver_id)
    if driver is None or not driver.has_active_subscription(now or utcnow()):
        return 0.0

    plan = db.session.get(SubscriptionPlan, driver.subscription_plan_id)
    if plan is None:
        return 0.0
    return min(max(float(plan.customer_discount_percent or 0), 0.0), 100.0)


def resolve_referral_discount(user, base_price, settings):
    """Work out the referral discount ``user`` would get on ``base_price``.

    Returns
    -------
    (discount_amount, should_consume_reward)
    """
    if user is None or not user.referral_reward_available:
        return 0.0, False

    percent = get_percent_setting(settings, REFERRAL_DISCOUNT_PERCENT)
    if percent <= 0:
        return 0.0, False

    return round_money(float(base_price) * percent / 100.0), True


def consume_referral_reward(user_id):
    """Clear the reward flag only if it is currently set.

    Returns True when this call cleared it. Two bookings racing for the
    same reward cannot both get True.
    """
    cleared = User.query.filter(
        User.id == user_id,
        User.referral_reward_available.is_(True),
    ).update({User.referral_reward_available: False}, synchronize_session='fetch')
    return cleared == 1


def restore_referral_reward(user_id):
    """Hand an unspent reward back to the user"""
    User.query.filter(User.id == user_id).update(
        {User.referral_reward_available: True}, synchronize_session='fetch'
    )
    logger.info('Referral reward restored to user %s', user_id)


def grant_referral_reward(user_id):
    """Reward the referrer of ``user_id`` if this was the user's first completed ride.

    Must run after the booking's transition to Completed has been flushed.
    Returns the referrer's id when a reward was granted, else None.
    """
    user = db.session.get(User, user_id)
    if user is None or not user.referred_by:
        return None

    completed = Booking.query.filter_by(user_id=user_id, status='Completed').count()
    if completed != 1:
        return None

    User.query.filter(User.id == user.referred_by).update(
        {User.referral_reward_available: True}, synchronize_session='fetch'
    )
    logger.info(
        'Referral reward granted to user %s: referee %s completed a first booking',
        user.referred_by, user_id,
    )
    return user.referred_by
