from __future__ import annotations

import logging

from resource_runtime.context import ExecutionContext
from resource_runtime.errors import InternalError, InvalidArgumentError, NotFoundError
from resource_runtime.registry.resource_registry import ResourceRegistry
from resource_runtime.runtime.error_mapper import coerce_unexpected, error_message
from resource_runtime.runtime.invocation import call_handler
from resource_runtime.schema.messages import HealthCheckMessage
from resource_runtime.schema.models import HealthCheckResponse, HealthCheckStatus

logger = logging.getLogger(__name__)

_REPORTABLE_STATUSES = (
    HealthCheckStatus.healthy,
    HealthCheckStatus.degraded,
    HealthCheckStatus.disrupted,
)


class HealthEvaluator:
    """Runs the health check registered for a resource type."""

    def __init__(self, registry: ResourceRegistry) -> None:
        self._registry = registry

    @coerce_unexpected("health check")
    async def check(self, context: ExecutionContext, resource_type: str) -> HealthCheckMessage:
        if not resource_type:
            raise InvalidArgumentError("resource type is required")

        definition = self._registry.lookup(resource_type)
        if definition is None:
            raise NotFoundError(f"resource type {resource_type} not found")
        if definition.health_check is None:
            raise InvalidArgumentError(
                f"health check not supported for resource type {resource_type}"
            )

        try:
            response: HealthCheckResponse = await call_handler(definition.health_check, context)
        except Exception as exc:
            # A failing check is itself a health signal.
            logger.warning("Health check for %s raised: %s", resource_type, exc)
            return HealthCheckMessage(
                status=HealthCheckStatus.disrupted,
                message=error_message(exc),
            )

        status = response.status if response is not None else HealthCheckStatus.unknown
        if status not in _REPORTABLE_STATUSES:
            label = status.value if isinstance(status, HealthCheckStatus) else status
            raise InternalError(f"unknown health check status {label}")

        return HealthCheckMessage(status=HealthCheckStatus(status), message=response.message)


__all__ = ["HealthEvaluator"]
