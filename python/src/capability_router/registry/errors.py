"""
Routing errors raised by the capability registry.
"""


class CapabilityRouterError(Exception):
    """Base class for capability router errors."""


class RoutingError(CapabilityRouterError):
    """A capability invocation could not be completed."""

    def __init__(self, capability_name: str, message: str):
        super().__init__(message)
        self.capability_name = capability_name


class NoServerAvailable(RoutingError):
    """No connected server advertises the requested capability."""

    def __init__(self, capability_name: str):
        super().__init__(
            capability_name,
            f"No connected servers available for capability: {capability_name}"
        )


class ServerUnavailable(RoutingError):
    """The explicitly requested server is registered but not connected."""

    def __init__(self, capability_name: str, server_id: str):
        super().__init__(
            capability_name,
            f"Server {server_id} is not available for capability: {capability_name}"
        )
        self.server_id = server_id


class RoutingFailure(RoutingError):
    """The routed HTTP call to the selected server failed."""

    def __init__(self, capability_name: str, server_id: str, cause: Exception):
        super().__init__(
            capability_name,
            f"Error routing {capability_name} to server {server_id}: {cause}"
        )
        self.server_id = server_id
        self.cause = cause
