"""Credential schemes layered on the cipher."""

from .base import MIN_ADMIN_SECRET_LENGTH, SchemeGenerator
from .duration import DURATION_TAG, DurationScheme, to_half_hours
from .period import PERIOD_TAG, PeriodScheme
from .temporary import TemporaryScheme
from .use_count import USE_COUNT_TAG, UseCountScheme

__all__ = [
    "DURATION_TAG",
    "DurationScheme",
    "MIN_ADMIN_SECRET_LENGTH",
    "PERIOD_TAG",
    "PeriodScheme",
    "SchemeGenerator",
    "TemporaryScheme",
    "USE_COUNT_TAG",
    "UseCountScheme",
    "to_half_hours",
]
