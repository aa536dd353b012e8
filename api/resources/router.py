from __future__ import annotations

from fastapi import APIRouter, Request

from api.resources import models as api_models
from api.resources import services
from resource_runtime.app import ResourceApp
from resource_runtime.context import ExecutionContext
from resource_runtime.schema.messages import HealthCheckMessage


router = APIRouter(tags=["resources"])


def _resource_app(request: Request) -> ResourceApp:
    return request.app.state.resource_app


def _context(request: Request) -> ExecutionContext:
    request_id = request.headers.get("x-request-id")
    if request_id:
        return ExecutionContext(request_id=request_id)
    return ExecutionContext()


@router.get("/resource-definitions", response_model=api_models.ResourceDefinitionsResponse)
async def get_resource_definitions(request: Request):
    return await services.list_definitions(_resource_app(request))


@router.post("/resources/operations", response_model=api_models.ExecuteOperationResponse)
async def execute_operation(request: Request, payload: api_models.ExecuteOperationRequest):
    return await services.execute_operation(_resource_app(request), _context(request), payload)


@router.post("/resources/list", response_model=api_models.ListResourcesResponse)
async def list_resources(request: Request, payload: api_models.ListResourcesRequest):
    return await services.list_resources(_resource_app(request), _context(request), payload)


@router.post("/resources/actions", response_model=api_models.ExecuteActionResponse)
async def execute_action(request: Request, payload: api_models.ExecuteActionRequest):
    return await services.execute_action(_resource_app(request), _context(request), payload)


@router.get("/resources/{resource_type}/health", response_model=HealthCheckMessage)
async def get_resource_health(request: Request, resource_type: str):
    return await services.health_check(_resource_app(request), _context(request), resource_type)
