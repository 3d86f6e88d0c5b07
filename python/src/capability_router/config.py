"""
Capability Router Configuration

Logging setup and environment-driven settings for the capability router.
"""

import logging
import os

import structlog
from pydantic import BaseModel, Field

# Configure simple structured logging for the router
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Create router logger
router_logger = structlog.get_logger("capability_router")


class RouterSettings(BaseModel):
    """Runtime settings for the capability router."""

    host: str = Field(default="0.0.0.0", description="Interface the HTTP API binds to")
    port: int = Field(default=8060, description="Port the HTTP API listens on")
    health_check_timeout: float = Field(default=5.0, description="Health check timeout in seconds")
    request_timeout: float = Field(default=30.0, description="Routed capability call timeout in seconds")
    log_level: str = Field(default="INFO", description="Root log level")


def load_settings() -> RouterSettings:
    """Build settings from the environment."""
    return RouterSettings(
        host=os.getenv("CAPABILITY_ROUTER_HOST", "0.0.0.0"),
        port=int(os.getenv("CAPABILITY_ROUTER_PORT", "8060")),
        health_check_timeout=float(os.getenv("CAPABILITY_ROUTER_HEALTH_TIMEOUT", "5.0")),
        request_timeout=float(os.getenv("CAPABILITY_ROUTER_REQUEST_TIMEOUT", "30.0")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
