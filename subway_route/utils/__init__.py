"""Utility modules"""

from .geo import haversine_km
from .normalize import (
    as_finite_number,
    safe_minutes,
    default_minutes,
    minutes_or_default,
    whole_minutes,
)

__all__ = [
    # geo
    "haversine_km",
    # normalize
    "as_finite_number",
    "safe_minutes",
    "default_minutes",
    "minutes_or_default",
    "whole_minutes",
]
