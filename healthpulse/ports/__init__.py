"""
Port interfaces for Health Pulse hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and hazard data adapters.
"""

from .providers import AirQualityPort, DengueClusterPort, HazardSourcePort, HospitalAdmissionPort

__all__ = ["HazardSourcePort", "DengueClusterPort", "AirQualityPort", "HospitalAdmissionPort"]
