"""
Core domain models and pure functions for Health Pulse.

This module contains the domain models and pure risk logic
(scoring, classification, aggregation, forecasting) that are
independent of data providers and infrastructure concerns.
"""

from .models import (
    Coordinate,
    HazardAssessment,
    HazardCluster,
    HazardForecast,
    LocationAnalysis,
    NamedLocation,
    Prediction,
    PsiSnapshot,
)
from .errors import HealthPulseError, InvalidHorizon, LocationUnresolved, ProviderUnavailable
from .gazetteer import Gazetteer, default_gazetteer, load_gazetteer
from .clusters import score_clusters
from .aggregate import aggregate, analyze
from .forecast import build_baseline, forecast, validate_horizon
from .intent import classify_intent

__all__ = [
    "Coordinate", "HazardAssessment", "HazardCluster", "HazardForecast",
    "LocationAnalysis", "NamedLocation", "Prediction", "PsiSnapshot",
    "HealthPulseError", "InvalidHorizon", "LocationUnresolved", "ProviderUnavailable",
    "Gazetteer", "default_gazetteer", "load_gazetteer",
    "score_clusters", "aggregate", "analyze",
    "build_baseline", "forecast", "validate_horizon", "classify_intent",
]
