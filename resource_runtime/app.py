"""
Application facade tying the registry, dispatcher and health evaluator into
the five boundary operations an adapter exposes.
"""

from __future__ import annotations

from typing import Any, Awaitable, Dict, List, Mapping, Optional, TypeVar

from resource_runtime.context import ExecutionContext
from resource_runtime.errors import ConfigurationError, ErrorCategory, RequestError
from resource_runtime.registry.resource_definition import OperationKind, ResourceDefinition
from resource_runtime.registry.resource_registry import ResourceRegistry, build_registry
from resource_runtime.runtime.describe import describe
from resource_runtime.runtime.dispatcher import ListResult, OperationDispatcher
from resource_runtime.runtime.health import HealthEvaluator
from resource_runtime.schema.messages import (
    HealthCheckMessage,
    ResourceDefinitionDescriptor,
    ResourceMessage,
)
from resource_runtime.schema.models import EnvironmentVariable, Metadata, Resource
from shared.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ResourceApp:
    """
    A named resource application.

    Usage:
        app = ResourceApp.from_definitions("databases", postgres_definition)
        resource = await app.execute_operation(ctx, "create", Resource(type="postgres_database"), {...})
    """

    def __init__(self, name: str, registry: ResourceRegistry) -> None:
        if not name:
            raise ConfigurationError(["app name is required"])
        self.name = name
        self.registry = registry
        self._dispatcher = OperationDispatcher(registry)
        self._health = HealthEvaluator(registry)

    @classmethod
    def from_definitions(cls, name: str, *definitions: ResourceDefinition) -> "ResourceApp":
        return cls(name, build_registry(*definitions))

    async def _observe(self, operation: str, resource_type: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except RequestError as exc:
            if exc.category == ErrorCategory.internal:
                logger.error("[%s] %s %s failed (%s): %s", self.name, operation, resource_type, exc.category.value, exc.message)
            else:
                logger.warning("[%s] %s %s rejected (%s): %s", self.name, operation, resource_type, exc.category.value, exc.message)
            raise

    def describe(self) -> List[ResourceDefinitionDescriptor]:
        return describe(self.registry)

    async def execute_operation(
        self,
        context: ExecutionContext,
        kind: OperationKind | str,
        resource: Optional[Resource],
        input: Optional[Mapping[str, Any]] = None,
        metadata: Optional[Metadata] = None,
        environment: Optional[Dict[str, EnvironmentVariable]] = None,
    ) -> ResourceMessage:
        label = kind.value if isinstance(kind, OperationKind) else str(kind)
        return await self._observe(
            label,
            resource.type if resource else "",
            self._dispatcher.execute_operation(context, kind, resource, input, metadata, environment),
        )

    async def list_resources(
        self,
        context: ExecutionContext,
        resource: Optional[Resource],
        next: str = "",
        metadata: Optional[Metadata] = None,
    ) -> ListResult:
        return await self._observe(
            "list",
            resource.type if resource else "",
            self._dispatcher.list_resources(context, resource, next, metadata),
        )

    async def execute_action(
        self,
        context: ExecutionContext,
        resource: Optional[Resource],
        action: str,
        input: Optional[Mapping[str, Any]] = None,
        metadata: Optional[Metadata] = None,
        environment: Optional[Dict[str, EnvironmentVariable]] = None,
    ) -> Dict[str, Any]:
        return await self._observe(
            f"action {action}",
            resource.type if resource else "",
            self._dispatcher.execute_action(context, resource, action, input, metadata, environment),
        )

    async def health_check(self, context: ExecutionContext, resource_type: str) -> HealthCheckMessage:
        return await self._observe(
            "health check",
            resource_type,
            self._health.check(context, resource_type),
        )


__all__ = ["ResourceApp"]
