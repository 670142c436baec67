"""
Validation utilities

Each ``require_*`` helper returns the cleaned value or raises
InvalidInputError naming the offending field.
"""
import math

from app.errors import InvalidInputError


def require_fields(data, fields):
    """Raise if any of ``fields`` is missing or None in ``data``"""
    missing = [field for field in fields if data.get(field) in (None, '')]
    if missing:
        raise InvalidInputError(
            'Missing required fields: {}'.format(', '.join(missing)),
            details={'missing': missing},
        )


def require_choice(value, choices, field):
    if value not in choices:
        raise InvalidInputError(
            'Invalid {}'.format(field),
            details={'allowed': list(choices)},
        )
    return value


def require_positive_int(value, field):
    """Accept ints and integral numeric strings greater than zero"""
    if isinstance(value, bool):
        raise InvalidInputError('{} must be a positive integer'.format(field))
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInputError('{} must be a positive integer'.format(field))
    if number <= 0 or (isinstance(value, float) and not value.is_integer()):
        raise InvalidInputError('{} must be a positive integer'.format(field))
    return number


def require_non_negative_number(value, field):
    if isinstance(value, bool):
        raise InvalidInputError('{} must be a number'.format(field))
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError('{} must be a number'.format(field))
    if not math.isfinite(number):
        raise InvalidInputError('{} must be a finite number'.format(field))
    if number < 0:
        raise InvalidInputError('{} must not be negative'.format(field))
    return number


def optional_non_negative_number(value, field):
    if value is None or value == '':
        return None
    return require_non_negative_number(value, field)
