"""
Shared utilities (geo math, retry) for Health Pulse.
"""

from .geo import distance_km, haversine_distance, polygon_centroid, validate_coordinates
from .retry import retry_with_backoff

__all__ = [
    "distance_km",
    "haversine_distance",
    "polygon_centroid",
    "validate_coordinates",
    "retry_with_backoff",
]
