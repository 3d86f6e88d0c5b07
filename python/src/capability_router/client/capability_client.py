"""
Capability Server Client

This module provides the HTTP client used to probe and invoke external capability servers.
"""

from typing import Any

import httpx

from ..config import router_logger

HEALTH_CHECK_TIMEOUT = 5.0
DEFAULT_REQUEST_TIMEOUT = 30.0
SERVER_ID_HEADER = "X-MCP-Server-ID"


class CapabilityClient:
    """Client for communicating with external capability servers."""

    def __init__(self,
                 health_check_timeout: float = HEALTH_CHECK_TIMEOUT,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 http_client: httpx.AsyncClient | None = None):
        """
        Initialize the capability client.

        Args:
            health_check_timeout: Timeout for health probes in seconds
            request_timeout: Timeout for routed capability calls in seconds
            http_client: Pre-built HTTP client (created lazily if not provided)
        """
        self.health_check_timeout = health_check_timeout
        self.request_timeout = request_timeout
        self.session: httpx.AsyncClient | None = http_client

    async def _get_session(self) -> httpx.AsyncClient:
        """Get or create HTTP session."""
        if self.session is None:
            self.session = httpx.AsyncClient(timeout=self.request_timeout)
        return self.session

    async def close(self):
        """Close the HTTP session."""
        if self.session:
            await self.session.aclose()
            self.session = None

    async def check_health(self, endpoint: str) -> bool:
        """Probe {endpoint}/health. Any 2xx is healthy, everything else is not."""
        url = f"{endpoint.rstrip('/')}/health"
        try:
            session = await self._get_session()
            response = await session.get(
                url,
                headers={"Content-Type": "application/json"},
                timeout=self.health_check_timeout
            )
            return response.is_success

        except httpx.TimeoutException:
            router_logger.warning(f"Connection test timed out for {endpoint}")
            return False
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            router_logger.warning(f"Connection test failed for {endpoint}: {e}")
            return False

    async def invoke(self, endpoint: str, capability_name: str, server_id: str,
                     payload: Any) -> Any:
        """
        POST a capability call to a server and return its decoded JSON body.

        Raises httpx.HTTPStatusError for non-2xx responses; transport and JSON
        decoding errors propagate unchanged.
        """
        session = await self._get_session()
        response = await session.post(
            f"{endpoint.rstrip('/')}/capability/{capability_name}",
            json=payload,
            headers={SERVER_ID_HEADER: server_id},
            timeout=self.request_timeout
        )
        response.raise_for_status()
        return response.json()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
