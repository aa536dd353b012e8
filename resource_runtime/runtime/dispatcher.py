"""
Operation dispatcher.

Resolves a resource definition, validates and defaults the caller's input,
runs the registered hooks and handler, validates what the handler returned
and converts it into the external representation. Every failure leaves as a
RequestError carrying one of the three caller-visible categories.

Step order: pre hook, handler, output validation, conversion, post hook. A
post hook only runs once the response is known to be deliverable.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

from resource_runtime.context import ExecutionContext
from resource_runtime.errors import (
    ErrorCategory,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    PropertyEncodingError,
    SchemaValidationError,
)
from resource_runtime.registry.resource_definition import (
    RESOURCE_OPERATION_KINDS,
    OperationKind,
    ResourceDefinition,
)
from resource_runtime.registry.resource_registry import ResourceRegistry
from resource_runtime.runtime.error_mapper import coerce_unexpected, wrap
from resource_runtime.runtime.invocation import invoke
from resource_runtime.schema.jsonschema_adapter import Schema
from resource_runtime.schema.messages import ResourceMessage, encode_output
from resource_runtime.schema.models import (
    ActionRequest,
    ActionResponse,
    EnvironmentVariable,
    ListRequest,
    ListResponse,
    Metadata,
    OperationRequest,
    OperationResponse,
    Resource,
)

logger = logging.getLogger(__name__)

# Operations that address an existing instance.
_IDENTIFIED_KINDS = (OperationKind.read, OperationKind.update, OperationKind.delete)


class ListResult(NamedTuple):
    resources: List[ResourceMessage]
    next: str


def _prepare_input(schema: Schema, payload: Optional[Mapping[str, Any]], action: str) -> Dict[str, Any]:
    """Copy the caller's input, fill in defaults and validate the result."""

    if payload is None:
        document: Dict[str, Any] = {}
    elif isinstance(payload, Mapping):
        document = dict(payload)
    else:
        raise InvalidArgumentError(f"{action}: input must be an object")

    schema.inject_defaults(document)
    try:
        schema.validate(document)
    except SchemaValidationError as exc:
        raise wrap(ErrorCategory.invalid_argument, action, exc) from exc
    return document


def _validate_output(schema: Schema, document: Any, action: str) -> None:
    try:
        schema.validate(document)
    except SchemaValidationError as exc:
        raise wrap(ErrorCategory.internal, action, exc) from exc


def _to_message(resource: Resource) -> ResourceMessage:
    try:
        return ResourceMessage.from_resource(resource)
    except PropertyEncodingError as exc:
        raise wrap(ErrorCategory.internal, "convert resource", exc) from exc


class OperationDispatcher:
    """
    Executes create/read/update/delete, list and action requests against a
    frozen registry.

    The dispatcher keeps no per-request state; one instance serves any number
    of concurrent coroutines.
    """

    def __init__(self, registry: ResourceRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ResourceRegistry:
        return self._registry

    def _resolve(self, resource: Optional[Resource]) -> ResourceDefinition:
        if resource is None:
            raise InvalidArgumentError("resource is required")
        definition = self._registry.lookup(resource.type)
        if definition is None:
            raise NotFoundError(f"resource type {resource.type} not found")
        return definition

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    @coerce_unexpected("execute operation")
    async def execute_operation(
        self,
        context: ExecutionContext,
        kind: OperationKind | str,
        resource: Optional[Resource],
        input: Optional[Mapping[str, Any]] = None,
        metadata: Optional[Metadata] = None,
        environment: Optional[Dict[str, EnvironmentVariable]] = None,
    ) -> ResourceMessage:
        definition = self._resolve(resource)

        try:
            kind = OperationKind(kind)
        except ValueError:
            raise InvalidArgumentError(f"unsupported operation {kind}") from None
        if kind not in RESOURCE_OPERATION_KINDS:
            raise InvalidArgumentError(f"unsupported operation {kind.value}")

        operation = definition.operation(kind)
        if operation is None:
            raise InvalidArgumentError(
                f"operation {kind.value} not supported for resource type {definition.type}"
            )

        if kind in _IDENTIFIED_KINDS and not resource.external_id:
            raise InvalidArgumentError(f"external ID is required for {kind.value} operation")

        document = _prepare_input(operation.input_schema, input, f"validate {kind.value} input")

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Executing %s on %s (request_id=%s, external_id=%s)",
                kind.value,
                definition.type,
                context.request_id,
                resource.external_id,
            )

        request = OperationRequest(
            metadata=metadata or Metadata(),
            resource=resource,
            input=document,
            environment=dict(environment or {}),
        )

        if operation.pre is not None:
            await invoke(f"pre {kind.value} hook", operation.pre, context, request)

        response: Optional[OperationResponse] = await invoke(
            f"{kind.value} resource", operation.handler, context, request
        )
        returned = response.resource if response is not None else None

        if returned is None:
            if kind != OperationKind.delete:
                raise InternalError(f"{kind.value} resource: handler returned no resource")
        elif kind != OperationKind.delete:
            _validate_output(operation.output_schema, returned.properties, f"validate {kind.value} output")

        message = _to_message(returned) if returned is not None else ResourceMessage()

        if operation.post is not None:
            await invoke(f"post {kind.value} hook", operation.post, context, request, response)
        return message

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------
    @coerce_unexpected("list resources")
    async def list_resources(
        self,
        context: ExecutionContext,
        resource: Optional[Resource],
        next: str = "",
        metadata: Optional[Metadata] = None,
    ) -> ListResult:
        definition = self._resolve(resource)
        operation = definition.list_operation
        if operation is None:
            raise InvalidArgumentError(
                f"list operation not supported for resource type {definition.type}"
            )

        request = ListRequest(metadata=metadata or Metadata(), resource=resource, next=next or "")

        if operation.pre is not None:
            await invoke("pre list hook", operation.pre, context, request)

        response: Optional[ListResponse] = await invoke(
            "list resources", operation.handler, context, request
        )
        if response is None:
            raise InternalError("list resources: handler returned no response")

        # Every element is checked before any of them is converted.
        for item in response.resources:
            _validate_output(operation.output_schema, item.properties, "validate list output")

        resources = [_to_message(item) for item in response.resources]

        if operation.post is not None:
            await invoke("post list hook", operation.post, context, request, response)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Listed %d %s resources (request_id=%s)",
                len(resources),
                definition.type,
                context.request_id,
            )
        return ListResult(resources=resources, next=response.next or "")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    @coerce_unexpected("execute action")
    async def execute_action(
        self,
        context: ExecutionContext,
        resource: Optional[Resource],
        action: str,
        input: Optional[Mapping[str, Any]] = None,
        metadata: Optional[Metadata] = None,
        environment: Optional[Dict[str, EnvironmentVariable]] = None,
    ) -> Dict[str, Any]:
        definition = self._resolve(resource)
        action_definition = definition.action(action)
        if action_definition is None:
            raise NotFoundError(f"action {action} not found for resource type {definition.type}")

        document = _prepare_input(action_definition.input_schema, input, "validate action input")

        request = ActionRequest(
            metadata=metadata or Metadata(),
            resource=resource,
            action=action,
            input=document,
            environment=dict(environment or {}),
        )

        if action_definition.pre is not None:
            await invoke("pre action hook", action_definition.pre, context, request)

        response: Optional[ActionResponse] = await invoke(
            "execute action", action_definition.handler, context, request
        )
        output = response.output if response is not None else None
        if output is None:
            output = {}

        _validate_output(action_definition.output_schema, output, "validate action output")

        try:
            encoded = encode_output(output)
        except PropertyEncodingError as exc:
            raise wrap(ErrorCategory.internal, "convert action output", exc) from exc

        if action_definition.post is not None:
            await invoke("post action hook", action_definition.post, context, request, response)
        return encoded


__all__ = [
    "ListResult",
    "OperationDispatcher",
]
