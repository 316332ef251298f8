"""
Metrics definitions for Health Pulse.

This module defines Prometheus metrics for monitoring
assessments, forecasts and provider health.
"""

from prometheus_client import Counter, Histogram

# 카운터 메트릭
assessments_total = Counter(
    "healthpulse_assessments_total",
    "Number of location assessments produced",
    ["overall"]
)

forecasts_total = Counter(
    "healthpulse_forecasts_total",
    "Number of forecasts produced",
    ["overall"]
)

location_unresolved_total = Counter(
    "healthpulse_location_unresolved_total",
    "Number of requests whose place name could not be resolved"
)

provider_failures_total = Counter(
    "healthpulse_provider_failures_total",
    "Hazard data provider fetch failures",
    ["provider"]
)

provider_cache_hits_total = Counter(
    "healthpulse_provider_cache_hits_total",
    "Hazard data served from provider cache",
    ["provider"]
)

# 히스토그램 메트릭
assessment_seconds = Histogram(
    "healthpulse_assessment_duration_seconds",
    "Time spent producing a location assessment",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

forecast_seconds = Histogram(
    "healthpulse_forecast_duration_seconds",
    "Time spent producing a forecast",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)
