"""Utilities package"""
from .helpers import paginate_query, parse_datetime, parse_date, add_months, commit_or_raise
from .validators import (
    require_fields,
    require_choice,
    require_positive_int,
    require_non_negative_number,
    optional_non_negative_number,
)

__all__ = [
    'paginate_query',
    'parse_datetime',
    'parse_date',
    'add_months',
    'commit_or_raise',
    'require_fields',
    'require_choice',
    'require_positive_int',
    'require_non_negative_number',
    'optional_non_negative_number',
]
