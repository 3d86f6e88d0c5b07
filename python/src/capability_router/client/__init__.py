"""
Capability Client Module

HTTP client for health-checking and invoking external capability servers.
"""

from .capability_client import (
    DEFAULT_REQUEST_TIMEOUT,
    HEALTH_CHECK_TIMEOUT,
    CapabilityClient,
)

__all__ = [
    "CapabilityClient",
    "DEFAULT_REQUEST_TIMEOUT",
    "HEALTH_CHECK_TIMEOUT"
]
