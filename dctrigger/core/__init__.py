"""Core services for the trigger bot."""

from .health_server import HealthCheckServer
from .logging import setup_logging

__all__ = [
    # Services
    "HealthCheckServer",
    # Logging
    "setup_logging",
]
