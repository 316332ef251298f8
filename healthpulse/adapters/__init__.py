"""
Adapters for Health Pulse hexagonal architecture.

This module contains the provider-side implementations of the
hazard source ports: the TTL cache wrapper and payload converters.
"""

from .cache import CachedProvider
from .sources import (
    StaticSource,
    dengue_clusters_from_geojson,
    hospital_clusters_from_admissions,
    psi_snapshot_from_readings,
)

__all__ = [
    "CachedProvider",
    "StaticSource",
    "dengue_clusters_from_geojson",
    "hospital_clusters_from_admissions",
    "psi_snapshot_from_readings",
]
