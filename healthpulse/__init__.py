"""
Health Pulse: hyperlocal health-risk assessment and forecasting for Singapore.
"""

__version__ = "0.1.0"
