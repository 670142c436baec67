"""
Settings reader backed by the ``system_settings`` table.

The booking engine receives a reader instead of querying settings itself,
so pricing can be exercised with fixed values.
"""
import logging

from app import db
from app.models import SystemSetting

logger = logging.getLogger(__name__)

REFERRAL_DISCOUNT_PERCENT = 'referral_discount_percent'
EMAIL_NOTIFICATIONS_ENABLED = 'email_notifications_enabled'


class DatabaseSettings:
    """Reads and writes admin-editable settings"""

    def get_setting(self, key):
        row = SystemSetting.query.filter_by(key_name=key).first()
        return row.value if row else None

    def set_setting(self, key, value):
        """Insert or update ``key``. The caller commits."""
        row = SystemSetting.query.filter_by(key_name=key).first()
        if row is None:
            row = SystemSetting(key_name=key, value=value)
            db.session.add(row)
        else:
            row.value = value
        return row


def get_percent_setting(settings, key):
    """Read a percentage setting, treating absent or garbage values as 0"""
    raw = settings.get_setting(key)
    if raw in (None, ''):
        return 0.0
    try:
        percent = float(raw)
    except (TypeError, ValueError):
        logger.warning('Setting %s has non-numeric value %r; treating as 0', key, raw)
        return 0.0
    return min(max(percent, 0.0), 100.0)


def is_flag_enabled(settings, key, default=True):
    raw = settings.get_setting(key)
    if raw is None:
        return default
    return str(raw).strip().lower() not in ('false', '0', 'off', 'no')
