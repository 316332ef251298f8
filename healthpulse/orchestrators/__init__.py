"""
Orchestrators for Health Pulse.

This module contains the engine that coordinates the flow between
the hazard source ports and the pure core.
"""
from .engine import HealthRiskEngine

__all__ = ["HealthRiskEngine"]
