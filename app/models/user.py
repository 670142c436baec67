"""User model"""
import random
import string

from app import db
from .base import BaseModel, as_utc, utcnow

ROLES = ('Customer', 'Driver', 'CarOwner', 'Admin')


def generate_referral_code():
    """Generate an 8-character alphanumeric referral code."""
    chars = string.ascii_uppercase + string.digits
    return ''.join(random.choices(chars, k=8))


class User(BaseModel):
    """
    User model - customers, drivers, car owners and admins

    Drivers and car owners may hold a subscription plan whose discount is
    passed on to their customers. Customers carry referral linkage and a
    single-use referral reward flag.
    """
    __tablename__ = 'users'

    name = db.Column(db.String(255))
    email = db.Column(db.String(255), index=True)
    phone = db.Column(db.String(20), index=True)
    role = db.Column(db.String(20), nullable=False, default='Customer')

    subscription_plan_id = db.Column(
        db.Integer, db.ForeignKey('subscription_plans.id', ondelete='SET NULL'), nullable=True
    )
    subscription_expiry_date = db.Column(db.DateTime(timezone=True), nullable=True)

    referral_code = db.Column(db.String(8), unique=True, index=True, default=generate_referral_code)
    referred_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    referral_reward_available = db.Column(db.Boolean, nullable=False, default=False)

    __table_args__ = (
        db.CheckConstraint(
            "role IN ('Customer', 'Driver', 'CarOwner', 'Admin')",
            name='ck_users_role',
        ),
    )

    subscription_plan = db.relationship('SubscriptionPlan', foreign_keys=[subscription_plan_id])
    referrer = db.relationship('User', remote_side='User.id', foreign_keys=[referred_by])

    def __repr__(self):
        return f'<User {self.id} ({self.role})>'

    def has_active_subscription(self, now=None):
        """True while the plan's expiry is strictly in the future"""
        if not self.subscription_plan_id or not self.subscription_expiry_date:
            return False
        now = now or utcnow()
        return as_utc(self.subscription_expiry_date) > now
