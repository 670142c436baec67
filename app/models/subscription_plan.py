"""Subscription plan model"""
from app import db
from .base import BaseModel


class SubscriptionPlan(BaseModel):
    """
    Subscription plan offered by a driver, car owner or admin.

    While a provider's subscription is active, their customers get
    ``customer_discount_percent`` off route and private-hire prices.
    """
    __tablename__ = 'subscription_plans'

    name = db.Column(db.String(255), nullable=False)
    duration_months = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Float, nullable=False, default=0.0)
    customer_discount_percent = db.Column(db.Float, nullable=False, default=0.0)

    # users.subscription_plan_id already points here; no FK back to avoid a table cycle
    provider_id = db.Column(db.Integer, nullable=True, index=True)
    provider_role = db.Column(db.String(20))

    __table_args__ = (
        db.CheckConstraint(
            'customer_discount_percent >= 0 AND customer_discount_percent <= 100',
            name='ck_plan_discount_range',
        ),
    )

    provider = db.relationship(
        'User', primaryjoin='foreign(SubscriptionPlan.provider_id) == User.id', viewonly=True
    )

    def __repr__(self):
        return f'<SubscriptionPlan {self.name} ({self.customer_discount_percent}%)>'

    def to_dict(self):
        data = super().to_dict()
        data['providerName'] = self.provider.name if self.provider else None
        return data
