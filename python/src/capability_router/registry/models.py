"""
Capability Registry Models

This module defines the data models used by the capability registry and the
built-in server catalog.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ServerStatus(str, Enum):
    """Connection state of a registered server, set only by health checks and routing."""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


@dataclass
class Capability:
    """Represents a named operation advertised by a capability server."""
    name: str
    description: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> "Capability":
        """Build a capability from a wire mapping or a bare capability name."""
        if isinstance(value, Capability):
            return value
        if isinstance(value, str):
            return cls(name=value)
        return cls(
            name=value["name"],
            description=value.get("description"),
            parameters=dict(value.get("parameters") or {})
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            data["description"] = self.description
        if self.parameters:
            data["parameters"] = dict(self.parameters)
        return data


@dataclass
class ServerConfig:
    """A registered external capability provider."""
    id: str
    name: str
    endpoint: str
    capabilities: list[Capability] = field(default_factory=list)
    is_external: bool = True
    package: str | None = None
    version: str | None = None
    config_data: dict[str, str] = field(default_factory=dict)
    status: ServerStatus = ServerStatus.DISCONNECTED

    @property
    def capability_names(self) -> list[str]:
        return [capability.name for capability in self.capabilities]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServerConfig":
        """Create a server config from its wire form. Incoming status values are ignored."""
        return cls(
            id=data["id"],
            name=data["name"],
            endpoint=data["endpoint"],
            capabilities=[Capability.from_value(cap) for cap in data["capabilities"]],
            is_external=bool(data.get("isExternal", data.get("is_external", True))),
            package=data.get("package"),
            version=data.get("version"),
            config_data=dict(data.get("configData") or data.get("config_data") or {})
        )

    def to_dict(self, include_config_data: bool = False) -> dict[str, Any]:
        """Convert to the wire form. configData is only emitted on explicit request."""
        data = {
            "id": self.id,
            "name": self.name,
            "endpoint": self.endpoint,
            "capabilities": [cap.to_dict() for cap in self.capabilities],
            "isExternal": self.is_external,
            "package": self.package,
            "version": self.version,
            "status": self.status.value
        }
        if include_config_data:
            data["configData"] = dict(self.config_data)
        return data


@dataclass
class ConfigField:
    """A configuration value a catalog server needs before it can be enabled."""
    name: str
    field_type: str = "text"  # "text", "password", "url", "select"
    required: bool = False
    options: list[str] = field(default_factory=list)


@dataclass
class ServerTemplate:
    """Catalog entry describing a well-known capability server."""
    template_id: str
    name: str
    package: str
    description: str
    category: str  # "content", "data", "media", "productivity", "communication", "analytics"
    capabilities: list[str] = field(default_factory=list)
    version: str | None = None
    author: str | None = None
    is_official: bool = False
    requires_auth: bool = False
    config_fields: list[ConfigField] = field(default_factory=list)
    documentation_url: str | None = None
    repository_url: str | None = None

    def validate_config_data(self, config_data: Mapping[str, str] | None) -> list[str]:
        """Return an error for every required config field that is missing or empty."""
        config_data = config_data or {}
        return [
            f"{config_field.name} is required"
            for config_field in self.config_fields
            if config_field.required and not config_data.get(config_field.name)
        ]

    def to_server_config(self, endpoint: str,
                         config_data: Mapping[str, str] | None = None) -> ServerConfig:
        """Convert the template into a registrable built-in server config."""
        return ServerConfig(
            id=self.template_id,
            name=self.name,
            endpoint=endpoint,
            capabilities=[Capability(name=cap) for cap in self.capabilities],
            is_external=False,
            package=self.package,
            version=self.version,
            config_data=dict(config_data or {})
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.template_id,
            "name": self.name,
            "package": self.package,
            "description": self.description,
            "category": self.category,
            "capabilities": list(self.capabilities),
            "version": self.version,
            "author": self.author,
            "isOfficial": self.is_official,
            "requiresAuth": self.requires_auth,
            "configFields": [
                {
                    "name": f.name,
                    "type": f.field_type,
                    "required": f.required,
                    "options": list(f.options)
                }
                for f in self.config_fields
            ],
            "documentation": self.documentation_url,
            "repository": self.repository_url
        }
