"""
Pytest Configuration and Fixtures
===================================
Fake capability servers behind an httpx.MockTransport, and registries wired to them
"""

import json

import httpx
import pytest

from capability_router.client.capability_client import CapabilityClient
from capability_router.registry.capability_registry import CapabilityRegistry


class FakeCapabilityServers:
    """Programmable capability servers keyed by host name."""

    def __init__(self):
        self.unhealthy: set[str] = set()
        self.health_timeouts: set[str] = set()
        self.network_down: set[str] = set()
        self.route_timeouts: set[str] = set()
        self.invalid_json: set[str] = set()
        self.error_status: dict[str, int] = {}
        self.results: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    def capability_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/capability/" in r.url.path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if request.method == "GET" and request.url.path.endswith("/health"):
            if host in self.health_timeouts:
                raise httpx.ConnectTimeout("timed out", request=request)
            if host in self.unhealthy:
                return httpx.Response(503, json={"status": "down"})
            return httpx.Response(200, json={"status": "healthy"})

        if request.method == "POST" and "/capability/" in request.url.path:
            if host in self.network_down:
                raise httpx.ConnectError("connection refused", request=request)
            if host in self.route_timeouts:
                raise httpx.ReadTimeout("read timed out", request=request)
            if host in self.invalid_json:
                return httpx.Response(200, content=b"not json")
            if host in self.error_status:
                return httpx.Response(self.error_status[host], json={"error": "boom"})
            capability = request.url.path.rsplit("/", 1)[-1]
            default = {
                "server": request.headers.get("X-MCP-Server-ID"),
                "capability": capability,
                "echo": json.loads(request.content or b"null")
            }
            return httpx.Response(200, json=self.results.get(host, default))

        return httpx.Response(404, json={"detail": "not found"})


@pytest.fixture
def fake_servers():
    return FakeCapabilityServers()


@pytest.fixture
def capability_client(fake_servers):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_servers.handler))
    return CapabilityClient(http_client=http_client)


@pytest.fixture
def registry(capability_client):
    return CapabilityRegistry(client=capability_client)


def server_config(server_id, capabilities, host=None, **extra):
    """Build a wire-form server config pointing at a fake host."""
    config = {
        "id": server_id,
        "name": f"Server {server_id}",
        "endpoint": f"http://{host or server_id}.test/mcp",
        "capabilities": [{"name": cap} for cap in capabilities],
        "isExternal": True
    }
    config.update(extra)
    return config


def assert_index_consistent(registry):
    """Every index entry matches a server's capabilities, and vice versa."""
    for name, server_ids in registry.capability_index.items():
        assert server_ids, f"empty index entry for {name}"
        assert len(server_ids) == len(set(server_ids))
        for server_id in server_ids:
            assert name in registry.servers[server_id].capability_names

    for server_id, server in registry.servers.items():
        for name in server.capability_names:
            assert server_id in registry.capability_index[name]
