"""
Observability for WebSift: structlog configuration and Prometheus collectors.
"""

from .logging import configure_logging
from .metrics import METRICS

__all__ = ["configure_logging", "METRICS"]
