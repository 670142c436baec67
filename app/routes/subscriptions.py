"""
Subscription plan routes.

Drivers, car owners and admins publish plans; assigning a plan to a user
starts it today and runs for the plan's duration in months.
"""
import logging

from flask import Blueprint, request, jsonify, current_app

from app import db
from app.errors import InvalidInputError, NotFoundError
from app.models import SubscriptionPlan, User
from app.models.base import utcnow
from app.models.user import ROLES
from app.utils import (
    add_months, commit_or_raise, paginate_query, require_fields, require_choice,
    require_positive_int, require_non_negative_number,
)

logger = logging.getLogger(__name__)

subscriptions_bp = Blueprint('subscriptions', __name__)


def _discount_percent(value):
    percent = require_non_negative_number(value, 'customerDiscountPercent')
    if percent > 100:
        raise InvalidInputError('customerDiscountPercent must be between 0 and 100')
    return percent


def _get_plan(plan_id):
    plan = db.session.get(SubscriptionPlan, plan_id)
    if plan is None:
        raise NotFoundError('Subscription plan not found.')
    return plan


@subscriptions_bp.route('/plans', methods=['GET'])
def list_plans():
    """
    List subscription plans
    GET /api/subscriptions/plans?page=1&limit=10
    """
    query = SubscriptionPlan.query.order_by(
        SubscriptionPlan.provider_role.asc(), SubscriptionPlan.duration_months.asc()
    )
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', 10, type=int)

    result = paginate_query(query, page, limit, current_app.config['MAX_ITEMS_PER_PAGE'])
    result['items'] = [plan.to_dict() for plan in result['items']]
    return jsonify(result), 200


@subscriptions_bp.route('/plans', methods=['POST'])
def create_plan():
    """
    Create a subscription plan
    POST /api/subscriptions/plans
    Body: {
        "name": "Gold",
        "durationMonths": 3,
        "price": 999,
        "customerDiscountPercent": 10,
        "providerId": 4,
        "providerRole": "Driver"
    }
    """
    data = request.get_json(silent=True) or {}
    require_fields(data, ['name', 'durationMonths', 'price', 'customerDiscountPercent'])
    if data.get('providerRole') is not None:
        require_choice(data['providerRole'], ROLES, 'providerRole')

    plan = SubscriptionPlan(
        name=data['name'],
        duration_months=require_positive_int(data['durationMonths'], 'durationMonths'),
        price=require_non_negative_number(data['price'], 'price'),
        customer_discount_percent=_discount_percent(data['customerDiscountPercent']),
        provider_id=data.get('providerId'),
        provider_role=data.get('providerRole'),
    )
    db.session.add(plan)
    commit_or_raise('create subscription plan')

    logger.info('Subscription plan %s created (%s%% customer discount)', plan.id, plan.customer_discount_percent)
    return jsonify(plan.to_dict()), 201


@subscriptions_bp.route('/plans/<int:plan_id>', methods=['PUT'])
def update_plan(plan_id):
    """
    Update a plan's name, price or customer discount
    PUT /api/subscriptions/plans/:id
    """
    data = request.get_json(silent=True) or {}
    plan = _get_plan(plan_id)

    if data.get('name'):
        plan.name = data['name']
    if data.get('price') is not None:
        plan.price = require_non_negative_number(data['price'], 'price')
    if data.get('customerDiscountPercent') is not None:
        plan.customer_discount_percent = _discount_percent(data['customerDiscountPercent'])
    commit_or_raise('update subscription plan')

    return jsonify({'message': 'Plan updated successfully', 'plan': plan.to_dict()}), 200


@subscriptions_bp.route('/plans/<int:plan_id>', methods=['DELETE'])
def delete_plan(plan_id):
    """Delete a plan; subscribers lose it"""
    plan = _get_plan(plan_id)

    User.query.filter(User.subscription_plan_id == plan.id).update(
        {User.subscription_plan_id: None, User.subscription_expiry_date: None},
        synchronize_session='fetch',
    )
    db.session.delete(plan)
    commit_or_raise('delete subscription plan')

    return jsonify({'message': 'Plan deleted successfully'}), 200


@subscriptions_bp.route('/assign', methods=['POST'])
def assign_plan():
    """
    Subscribe a user to a plan starting today
    POST /api/subscriptions/assign
    Body: {"userId": 4, "planId": 2}
    """
    data = request.get_json(silent=True) or {}
    require_fields(data, ['userId', 'planId'])

    plan = _get_plan(data['planId'])
    user = db.session.get(User, data['userId'])
    if user is None:
        raise NotFoundError('User not found.')

    start = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    user.subscription_plan_id = plan.id
    user.subscription_expiry_date = add_months(start, plan.duration_months)
    commit_or_raise('assign subscription')

    logger.info('User %s subscribed to plan %s until %s', user.id, plan.id, user.subscription_expiry_date)
    return jsonify({
        'message': 'Subscription assigned successfully.',
        'subscriptionExpiryDate': user.subscription_expiry_date.isoformat(),
    }), 200
