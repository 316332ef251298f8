"""
Observability for Health Pulse: loguru logging and Prometheus metrics.
"""

from .logging_setup import get_logger, setup_logging, with_context

__all__ = ["get_logger", "setup_logging", "with_context"]
