import logging

from flask import Blueprint, request, jsonify

from app.errors import InvalidInputError, NotFoundError
from app.services import get_settings
from app.utils import commit_or_raise

logger = logging.getLogger(__name__)

settings_bp = Blueprint('settings', __name__)


@settings_bp.route('/<key>', methods=['GET'])
def get_setting(key):
    """
    Read a system setting
    GET /api/settings/referral_discount_percent
    """
    value = get_settings().get_setting(key)
    if value is None:
        raise NotFoundError('Setting not found')
    return jsonify({'value': value}), 200


@settings_bp.route('/<key>', methods=['POST'])
def set_setting(key):
    """
    Create or update a system setting
    POST /api/settings/referral_discount_percent
    Body: {"value": "10"}
    """
    data = request.get_json(silent=True) or {}
    if 'value' not in data or data['value'] is None:
        raise InvalidInputError('Value is required')

    get_settings().set_setting(key, str(data['value']))
    commit_or_raise('save setting {}'.format(key))

    logger.info('Setting %s updated', key)
    return jsonify({'message': 'Setting updated successfully'}), 200
