"""
Capability Registry

This module provides the registry of external capability servers. It keeps a reverse
index from capability name to the servers advertising it, health-checks servers, and
routes capability invocations to a connected provider.
"""

import asyncio
import json
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

import httpx

from ..client.capability_client import CapabilityClient
from ..config import load_settings, router_logger
from .errors import NoServerAvailable, RoutingFailure, ServerUnavailable
from .models import ServerConfig, ServerStatus

SNAPSHOT_VERSION = "1.0"


def _is_absolute_url(value: Any) -> bool:
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError):
        return False
    return url.is_absolute_url


class CapabilityRegistry:
    """Registry for managing capability servers and routing capability requests."""

    def __init__(self, client: CapabilityClient | None = None):
        self.client = client or CapabilityClient()
        self.servers: dict[str, ServerConfig] = {}
        self.capability_index: dict[str, list[str]] = {}

    def _index_server(self, server_id: str, capability_names: list[str]):
        """Add a server id under each of its capability names."""
        for name in capability_names:
            server_ids = self.capability_index.setdefault(name, [])
            if server_id not in server_ids:
                server_ids.append(server_id)

    def _unindex_server(self, server: ServerConfig):
        """Remove a server id from the index, dropping capabilities left with no servers."""
        for name in server.capability_names:
            server_ids = self.capability_index.get(name)
            if server_ids is None:
                continue
            remaining = [sid for sid in server_ids if sid != server.id]
            if remaining:
                self.capability_index[name] = remaining
            else:
                del self.capability_index[name]

    def validate_server_config(self, config: Mapping[str, Any] | ServerConfig) -> list[str]:
        """Validate a server configuration and return any errors."""
        if isinstance(config, ServerConfig):
            config = config.to_dict()
        elif not isinstance(config, Mapping):
            config = {}

        errors = []

        if not config.get("id"):
            errors.append("Server ID is required")
        if not config.get("name"):
            errors.append("Server name is required")
        if not config.get("endpoint"):
            errors.append("Server endpoint is required")
        if not config.get("capabilities"):
            errors.append("At least one capability must be specified")

        endpoint = config.get("endpoint")
        if endpoint and not _is_absolute_url(endpoint):
            errors.append("Invalid endpoint URL format")

        return errors

    async def register_server(self, config: Mapping[str, Any] | ServerConfig) -> bool:
        """
        Register a capability server, replacing any server with the same id.

        The server is stored even when its health check fails; it is then marked
        as errored and skipped by routing until a later check succeeds.
        """
        try:
            if isinstance(config, ServerConfig):
                server = replace(config, capabilities=list(config.capabilities),
                                 config_data=dict(config.config_data))
            else:
                server = ServerConfig.from_dict(config)
            capability_names = list(dict.fromkeys(server.capability_names))

            is_connected = await self.client.check_health(server.endpoint)
            server.status = ServerStatus.CONNECTED if is_connected else ServerStatus.ERROR

            previous = self.servers.get(server.id)
            if previous is not None:
                self._unindex_server(previous)
            self.servers[server.id] = server
            self._index_server(server.id, capability_names)

            router_logger.info(
                f"Capability server registered: {server.name} ({server.id}) status={server.status.value}"
            )
            return True

        except Exception as e:
            name = config.get("name") if isinstance(config, Mapping) else getattr(config, "name", None)
            router_logger.error(f"Failed to register capability server {name}: {e}")
            return False

    def unregister_server(self, server_id: str) -> bool:
        """Remove a server and its capability index entries."""
        server = self.servers.get(server_id)
        if server is None:
            return False

        self._unindex_server(server)
        del self.servers[server_id]
        router_logger.info(f"Capability server unregistered: {server_id}")
        return True

    def get_servers(self) -> list[ServerConfig]:
        """Get all registered servers."""
        return list(self.servers.values())

    def get_server(self, server_id: str) -> ServerConfig | None:
        """Get a server by ID."""
        return self.servers.get(server_id)

    def get_servers_by_capability(self, capability_name: str) -> list[ServerConfig]:
        """Find registered servers that advertise a specific capability."""
        results = []
        for server_id in self.capability_index.get(capability_name, []):
            server = self.servers.get(server_id)
            if server is not None:
                results.append(server)
        return results

    def get_available_capabilities(self) -> list[str]:
        """Get the names of all capabilities advertised by at least one server."""
        return list(self.capability_index.keys())

    async def update_server_status(self, server_id: str) -> None:
        """Re-run the health check for a server and record the result."""
        server = self.servers.get(server_id)
        if server is None:
            return

        is_connected = await self.client.check_health(server.endpoint)
        server.status = ServerStatus.CONNECTED if is_connected else ServerStatus.ERROR

    async def refresh_all_statuses(self) -> dict[str, ServerStatus]:
        """Health-check every registered server concurrently."""
        server_ids = list(self.servers)
        await asyncio.gather(*(self.update_server_status(sid) for sid in server_ids))
        return {
            sid: self.servers[sid].status
            for sid in server_ids
            if sid in self.servers
        }

    async def route_capability_request(self,
                                       capability_name: str,
                                       payload: Any,
                                       preferred_server_id: str | None = None) -> Any:
        """
        Route a capability call to a server and return its JSON response.

        A registered preferred server is always targeted, whatever it advertises.
        Otherwise the first connected server indexed under the capability is used.

        Raises:
            NoServerAvailable: no connected server offers the capability
            ServerUnavailable: the preferred server is not connected
            RoutingFailure: the HTTP call failed; the server is marked as errored
        """
        target: ServerConfig | None = None

        if preferred_server_id:
            target = self.servers.get(preferred_server_id)

        if target is None:
            connected = [
                server for server in self.get_servers_by_capability(capability_name)
                if server.status == ServerStatus.CONNECTED
            ]
            if not connected:
                raise NoServerAvailable(capability_name)
            target = connected[0]

        if target.status != ServerStatus.CONNECTED:
            raise ServerUnavailable(capability_name, target.id)

        try:
            return await self.client.invoke(target.endpoint, capability_name, target.id, payload)

        except (httpx.HTTPError, httpx.InvalidURL, json.JSONDecodeError) as e:
            router_logger.error(f"Error routing to server {target.id}: {e}")
            target.status = ServerStatus.ERROR
            raise RoutingFailure(capability_name, target.id, e) from e

    def export_configuration(self) -> dict[str, Any]:
        """Export servers and the capability index. configData is never exported."""
        return {
            "version": SNAPSHOT_VERSION,
            "servers": [server.to_dict() for server in self.servers.values()],
            "capabilities": [
                [name, list(server_ids)]
                for name, server_ids in self.capability_index.items()
            ],
            "exportDate": datetime.now(timezone.utc).isoformat()
        }

    async def import_configuration(self, snapshot: Mapping[str, Any] | str) -> bool:
        """
        Register every valid server in a snapshot. Invalid entries are skipped.

        Each imported server gets a fresh health check; exported status values are
        not reused.
        """
        try:
            if isinstance(snapshot, str):
                snapshot = json.loads(snapshot)

            for server_data in snapshot.get("servers") or []:
                errors = self.validate_server_config(server_data)
                if errors:
                    server_id = server_data.get("id") if isinstance(server_data, Mapping) else None
                    router_logger.warning(f"Skipping invalid server {server_id}: {errors}")
                    continue
                await self.register_server(server_data)

            return True

        except json.JSONDecodeError as e:
            router_logger.error(f"Invalid JSON in configuration import: {e}")
            return False
        except Exception as e:
            router_logger.error(f"Failed to import configuration: {e}")
            return False

    def get_registry_stats(self) -> dict[str, Any]:
        """Get statistics about the registry."""
        status_counts = {}
        external_count = 0

        for server in self.servers.values():
            status = server.status.value
            status_counts[status] = status_counts.get(status, 0) + 1
            if server.is_external:
                external_count += 1

        return {
            "total_servers": len(self.servers),
            "external_servers": external_count,
            "builtin_servers": len(self.servers) - external_count,
            "status_breakdown": status_counts,
            "total_capabilities": len(self.capability_index),
            "capability_breakdown": {
                name: len(server_ids) for name, server_ids in self.capability_index.items()
            }
        }


# Global registry instance
_registry: CapabilityRegistry | None = None


def get_capability_registry() -> CapabilityRegistry:
    """Get the global capability registry instance."""
    global _registry
    if _registry is None:
        settings = load_settings()
        _registry = CapabilityRegistry(CapabilityClient(
            health_check_timeout=settings.health_check_timeout,
            request_timeout=settings.request_timeout
        ))
    return _registry
