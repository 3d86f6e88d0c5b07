"""
Capability Registry Module

Provides server registration, capability indexing, health tracking, and request routing.

This module handles:
- Registration and removal of external capability servers
- Reverse lookup from capability name to the servers offering it
- Routing capability calls to a connected server
- Export and import of the registry configuration
- The catalog of built-in servers

Components:
- capability_registry: Main registry class
- catalog: Built-in server templates
- errors: Routing error types
- models: Registry data models
"""

from .capability_registry import CapabilityRegistry, get_capability_registry
from .catalog import ServerCatalog, create_builtin_templates
from .errors import (
    CapabilityRouterError,
    NoServerAvailable,
    RoutingError,
    RoutingFailure,
    ServerUnavailable,
)
from .models import Capability, ConfigField, ServerConfig, ServerStatus, ServerTemplate

__all__ = [
    "Capability",
    "CapabilityRegistry",
    "CapabilityRouterError",
    "ConfigField",
    "NoServerAvailable",
    "RoutingError",
    "RoutingFailure",
    "ServerCatalog",
    "ServerConfig",
    "ServerStatus",
    "ServerTemplate",
    "ServerUnavailable",
    "create_builtin_templates",
    "get_capability_registry"
]
