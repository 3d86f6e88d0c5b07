"""
Capability Router Service

A FastAPI service exposing the capability registry: server registration, capability
lookup, request routing, configuration export/import, and the built-in catalog.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .config import load_settings
from .registry.capability_registry import CapabilityRegistry, get_capability_registry
from .registry.catalog import ServerCatalog
from .registry.errors import NoServerAvailable, RoutingError, RoutingFailure, ServerUnavailable

logger = logging.getLogger(__name__)

ROUTING_ERROR_STATUS = {
    NoServerAvailable: 404,
    ServerUnavailable: 503,
    RoutingFailure: 502,
}


class RegisterServerRequest(BaseModel):
    """Request model for registering a server. Fields are checked by the registry."""
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str | None = None
    endpoint: str | None = None
    capabilities: list[dict[str, Any] | str] | None = None
    is_external: bool = Field(default=True, alias="isExternal")
    package: str | None = None
    version: str | None = None
    config_data: dict[str, str] | None = Field(default=None, alias="configData")


class RouteRequest(BaseModel):
    """Request model for routing a capability call."""
    model_config = ConfigDict(populate_by_name=True)

    payload: Any = None
    preferred_server_id: str | None = Field(default=None, alias="preferredServerId")


class EnableTemplateRequest(BaseModel):
    """Request model for enabling a catalog server."""
    model_config = ConfigDict(populate_by_name=True)

    endpoint: str
    config_data: dict[str, str] = Field(default_factory=dict, alias="configData")


router = APIRouter()


def get_registry(request: Request) -> CapabilityRegistry:
    return request.app.state.registry


def get_catalog(request: Request) -> ServerCatalog:
    return request.app.state.catalog


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "capability-router", "version": __version__}


@router.get("/servers")
async def list_servers(registry: CapabilityRegistry = Depends(get_registry)):
    """List all registered servers."""
    return {"servers": [server.to_dict() for server in registry.get_servers()]}


@router.post("/servers", status_code=201)
async def register_server(body: RegisterServerRequest,
                          registry: CapabilityRegistry = Depends(get_registry)):
    """Validate and register a server."""
    config = body.model_dump(by_alias=True, exclude_none=True)

    errors = registry.validate_server_config(config)
    if errors:
        raise HTTPException(status_code=400, detail={"errors": errors})

    if not await registry.register_server(config):
        raise HTTPException(status_code=500, detail="Failed to register server")

    server = registry.get_server(config["id"])
    if server is None:
        raise HTTPException(status_code=404, detail=f"Server {config['id']} was removed during registration")
    return server.to_dict()


@router.get("/servers/{server_id}")
async def get_server(server_id: str, registry: CapabilityRegistry = Depends(get_registry)):
    """Get a registered server."""
    server = registry.get_server(server_id)
    if server is None:
        raise HTTPException(status_code=404, detail=f"Unknown server: {server_id}")
    return server.to_dict()


@router.delete("/servers/{server_id}")
async def unregister_server(server_id: str, registry: CapabilityRegistry = Depends(get_registry)):
    """Unregister a server."""
    if not registry.unregister_server(server_id):
        raise HTTPException(status_code=404, detail=f"Unknown server: {server_id}")
    return {"success": True, "message": f"Server {server_id} unregistered"}


@router.post("/servers/{server_id}/status")
async def update_server_status(server_id: str,
                               registry: CapabilityRegistry = Depends(get_registry)):
    """Re-run the health check for a server."""
    if registry.get_server(server_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown server: {server_id}")

    await registry.update_server_status(server_id)
    server = registry.get_server(server_id)
    return {"id": server_id, "status": server.status.value if server else None}


@router.get("/capabilities")
async def list_capabilities(registry: CapabilityRegistry = Depends(get_registry)):
    """List capability names advertised by registered servers."""
    return {"capabilities": registry.get_available_capabilities()}


@router.get("/capabilities/{capability_name}/servers")
async def list_capability_servers(capability_name: str,
                                  registry: CapabilityRegistry = Depends(get_registry)):
    """List the servers advertising a capability."""
    servers = registry.get_servers_by_capability(capability_name)
    return {"servers": [server.to_dict() for server in servers]}


@router.post("/capabilities/{capability_name}")
async def route_capability(capability_name: str, body: RouteRequest,
                           registry: CapabilityRegistry = Depends(get_registry)):
    """Route a capability call and return the server's response body."""
    result = await registry.route_capability_request(
        capability_name, body.payload, body.preferred_server_id
    )
    return JSONResponse(content=result)


@router.get("/configuration")
async def export_configuration(registry: CapabilityRegistry = Depends(get_registry)):
    """Export the registry configuration."""
    return registry.export_configuration()


@router.post("/configuration")
async def import_configuration(snapshot: dict[str, Any],
                               registry: CapabilityRegistry = Depends(get_registry)):
    """Import servers from an exported configuration."""
    success = await registry.import_configuration(snapshot)
    if not success:
        raise HTTPException(status_code=400, detail="Failed to import configuration")
    return {"success": True, "servers": len(registry.get_servers())}


@router.get("/catalog")
async def list_catalog(category: str | None = None, q: str | None = None,
                       catalog: ServerCatalog = Depends(get_catalog),
                       registry: CapabilityRegistry = Depends(get_registry)):
    """List catalog servers with optional category filter and search term."""
    if q:
        templates = catalog.search_templates(q, category)
    else:
        templates = catalog.list_templates(category)

    return {
        "categories": catalog.get_categories(),
        "templates": [
            {**template.to_dict(), "isEnabled": registry.get_server(template.template_id) is not None}
            for template in templates
        ]
    }


@router.post("/catalog/{template_id}/enable", status_code=201)
async def enable_catalog_server(template_id: str, body: EnableTemplateRequest,
                                catalog: ServerCatalog = Depends(get_catalog),
                                registry: CapabilityRegistry = Depends(get_registry)):
    """Register a catalog server at the given endpoint."""
    template = catalog.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Unknown catalog server: {template_id}")

    server = template.to_server_config(body.endpoint, body.config_data)
    errors = template.validate_config_data(body.config_data) + registry.validate_server_config(server)
    if errors:
        raise HTTPException(status_code=400, detail={"errors": errors})

    if not await registry.register_server(server):
        raise HTTPException(status_code=500, detail="Failed to register server")

    registered = registry.get_server(template_id)
    if registered is None:
        raise HTTPException(status_code=404, detail=f"Server {template_id} was removed during registration")
    return registered.to_dict()


@router.get("/stats")
async def registry_stats(registry: CapabilityRegistry = Depends(get_registry)):
    """Get registry statistics."""
    return registry.get_registry_stats()


async def routing_error_handler(request: Request, exc: RoutingError):
    """Translate routing errors into HTTP responses."""
    status_code = ROUTING_ERROR_STATUS.get(type(exc), 500)
    content = {"detail": str(exc), "capability": exc.capability_name}
    server_id = getattr(exc, "server_id", None)
    if server_id:
        content["server_id"] = server_id
    return JSONResponse(status_code=status_code, content=content)


def create_app(registry: CapabilityRegistry | None = None,
               catalog: ServerCatalog | None = None) -> FastAPI:
    """Create the FastAPI application around a registry instance."""
    if registry is None:
        registry = get_capability_registry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Capability router started")

        yield

        # Shutdown
        try:
            await app.state.registry.client.close()
            logger.info("Capability router shutdown complete")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")

    app = FastAPI(
        title="Capability Router Service",
        description="Registry and router for external capability servers",
        version=__version__,
        lifespan=lifespan
    )
    app.state.registry = registry
    app.state.catalog = catalog or ServerCatalog()
    app.add_exception_handler(RoutingError, routing_error_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    logger.info(f"Starting Capability Router on {settings.host}:{settings.port}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
