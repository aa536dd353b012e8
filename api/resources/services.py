from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from fastapi import HTTPException, status

from api.resources import models as api_models
from resource_runtime.app import ResourceApp
from resource_runtime.context import ExecutionContext
from resource_runtime.errors import ErrorCategory, RequestError
from resource_runtime.schema.messages import EnvironmentVariableMessage, MetadataMessage, ResourceMessage
from resource_runtime.schema.models import EnvironmentVariable, Metadata, Resource
from shared.config import config

_STATUS_BY_CATEGORY = {
    ErrorCategory.invalid_argument: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.not_found: status.HTTP_404_NOT_FOUND,
    ErrorCategory.internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_TITLE_BY_CATEGORY = {
    ErrorCategory.invalid_argument: "Invalid argument",
    ErrorCategory.not_found: "Not found",
    ErrorCategory.internal: "Internal error",
}


def _raise_problem(exc: RequestError) -> None:
    category = exc.category
    detail = exc.message
    if category == ErrorCategory.internal and config.redact_internal_errors:
        detail = "internal error"

    problem = api_models.ProblemDetails(
        type=f"urn:resource-runtime:error:{category.value}",
        title=_TITLE_BY_CATEGORY[category],
        status=_STATUS_BY_CATEGORY[category],
        detail=detail,
        category=category,
    )
    raise HTTPException(status_code=problem.status, detail=problem.model_dump(mode="json")) from exc


def _resource(message: Optional[ResourceMessage]) -> Optional[Resource]:
    return message.to_resource() if message is not None else None


def _metadata(message: Optional[MetadataMessage]) -> Metadata:
    return message.to_metadata() if message is not None else Metadata()


def _environment(variables: Sequence[EnvironmentVariableMessage]) -> Dict[str, EnvironmentVariable]:
    return {variable.key: variable.to_variable() for variable in variables}


async def list_definitions(app: ResourceApp) -> api_models.ResourceDefinitionsResponse:
    return api_models.ResourceDefinitionsResponse(definitions=app.describe())


async def execute_operation(
    app: ResourceApp,
    context: ExecutionContext,
    payload: api_models.ExecuteOperationRequest,
) -> api_models.ExecuteOperationResponse:
    try:
        resource = await app.execute_operation(
            context,
            payload.operation,
            _resource(payload.resource),
            payload.input,
            _metadata(payload.metadata),
            _environment(payload.environment),
        )
    except RequestError as exc:
        _raise_problem(exc)
    return api_models.ExecuteOperationResponse(resource=resource)


async def list_resources(
    app: ResourceApp,
    context: ExecutionContext,
    payload: api_models.ListResourcesRequest,
) -> api_models.ListResourcesResponse:
    try:
        result = await app.list_resources(
            context,
            _resource(payload.resource),
            payload.next,
            _metadata(payload.metadata),
        )
    except RequestError as exc:
        _raise_problem(exc)
    return api_models.ListResourcesResponse(resources=result.resources, next=result.next)


async def execute_action(
    app: ResourceApp,
    context: ExecutionContext,
    payload: api_models.ExecuteActionRequest,
) -> api_models.ExecuteActionResponse:
    try:
        output = await app.execute_action(
            context,
            _resource(payload.resource),
            payload.action,
            payload.input,
            _metadata(payload.metadata),
            _environment(payload.environment),
        )
    except RequestError as exc:
        _raise_problem(exc)
    return api_models.ExecuteActionResponse(output=output)


async def health_check(app: ResourceApp, context: ExecutionContext, resource_type: str):
    try:
        return await app.health_check(context, resource_type)
    except RequestError as exc:
        _raise_problem(exc)


__all__: List[str] = [
    "execute_action",
    "execute_operation",
    "health_check",
    "list_definitions",
    "list_resources",
]
