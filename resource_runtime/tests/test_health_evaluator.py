from __future__ import annotations

import pytest

from resource_runtime.context import ExecutionContext
from resource_runtime.errors import ErrorCategory, RequestError
from resource_runtime.registry.resource_definition import ResourceDefinitionBuilder
from resource_runtime.registry.resource_registry import build_registry
from resource_runtime.runtime.health import HealthEvaluator
from resource_runtime.schema.models import HealthCheckResponse, HealthCheckStatus

PROPERTIES = {"type": "object"}


def _evaluator(health_check=None) -> HealthEvaluator:
    builder = ResourceDefinitionBuilder("queue", properties_schema=PROPERTIES)
    if health_check is not None:
        builder.health_check_fn(health_check)
    return HealthEvaluator(build_registry(builder.build()))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status",
    [HealthCheckStatus.healthy, HealthCheckStatus.degraded, HealthCheckStatus.disrupted],
)
async def test_reportable_statuses_pass_through(status: HealthCheckStatus) -> None:
    evaluator = _evaluator(lambda ctx: HealthCheckResponse(status=status, message="checked"))

    result = await evaluator.check(ExecutionContext(), "queue")

    assert result.status == status
    assert result.message == "checked"


@pytest.mark.asyncio
async def test_async_health_check() -> None:
    async def check(ctx):
        return HealthCheckResponse(status=HealthCheckStatus.healthy)

    result = await _evaluator(check).check(ExecutionContext(), "queue")

    assert result.status == HealthCheckStatus.healthy


@pytest.mark.asyncio
async def test_failing_health_check_reports_disrupted() -> None:
    def check(ctx):
        raise ConnectionError("broker unreachable")

    result = await _evaluator(check).check(ExecutionContext(), "queue")

    assert result.status == HealthCheckStatus.disrupted
    assert result.message == "broker unreachable"


@pytest.mark.asyncio
async def test_unknown_status_is_internal() -> None:
    evaluator = _evaluator(lambda ctx: HealthCheckResponse(status=HealthCheckStatus.unknown))

    with pytest.raises(RequestError) as excinfo:
        await evaluator.check(ExecutionContext(), "queue")

    assert excinfo.value.category == ErrorCategory.internal
    assert excinfo.value.message == "unknown health check status unknown"


@pytest.mark.asyncio
async def test_empty_type_is_invalid_argument() -> None:
    with pytest.raises(RequestError) as excinfo:
        await _evaluator().check(ExecutionContext(), "")

    assert excinfo.value.category == ErrorCategory.invalid_argument
    assert excinfo.value.message == "resource type is required"


@pytest.mark.asyncio
async def test_unknown_type_is_not_found() -> None:
    with pytest.raises(RequestError) as excinfo:
        await _evaluator().check(ExecutionContext(), "printer")

    assert excinfo.value.category == ErrorCategory.not_found
    assert excinfo.value.message == "resource type printer not found"


@pytest.mark.asyncio
async def test_missing_health_check_is_invalid_argument() -> None:
    with pytest.raises(RequestError) as excinfo:
        await _evaluator().check(ExecutionContext(), "queue")

    assert excinfo.value.category == ErrorCategory.invalid_argument
    assert excinfo.value.message == "health check not supported for resource type queue"
