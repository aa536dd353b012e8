"""
FastAPI server for a resource application.

Provides REST API endpoints for:
- Listing resource definitions
- Executing create/read/update/delete operations, list and actions
- Per-type health checks

Usage:
    from api.main import create_app

    app = create_app(ResourceApp.from_definitions("databases", postgres_definition))
    # uvicorn module:app --host 0.0.0.0 --port 8000
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from resource_runtime.app import ResourceApp
from shared.config import config
from shared.logger import get_logger
from api.router import build_router

logger = get_logger("api.main")


def create_app(resource_app: ResourceApp, *, api_prefix: Optional[str] = None) -> FastAPI:
    """Build the FastAPI application serving `resource_app`."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting resource API '%s' with %d resource type(s)",
            resource_app.name,
            len(resource_app.registry),
        )
        yield
        logger.info("Resource API '%s' shutting down", resource_app.name)

    app = FastAPI(
        title=f"{resource_app.name} resource API",
        description="REST API for resource definitions, operations, actions and health checks",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.resource_app = resource_app
    app.include_router(build_router(config.api_prefix if api_prefix is None else api_prefix))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        get_logger("api.main.errors").error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health", tags=["System"])
    async def health_check():
        return {
            "status": "ok",
            "server": resource_app.name,
            "version": "1.0.0",
        }

    return app
