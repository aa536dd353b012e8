from __future__ import annotations

import logging

import pytest

from resource_runtime.app import ResourceApp
from resource_runtime.context import ExecutionContext
from resource_runtime.errors import ConfigurationError, NotFoundError
from resource_runtime.registry.resource_definition import ResourceDefinitionBuilder
from resource_runtime.registry.resource_registry import build_registry
from resource_runtime.schema.models import Resource


def _definition():
    return ResourceDefinitionBuilder("queue", properties_schema={"type": "object"}).build()


def test_empty_name_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="app name is required"):
        ResourceApp("", build_registry(_definition()))


def test_from_definitions_builds_registry() -> None:
    app = ResourceApp.from_definitions("queues", _definition())

    assert app.name == "queues"
    assert app.registry.types() == ["queue"]


def test_from_definitions_reports_registry_violations() -> None:
    with pytest.raises(ConfigurationError, match="already exists"):
        ResourceApp.from_definitions("queues", _definition(), _definition())


@pytest.mark.asyncio
async def test_request_failures_are_logged_with_category(caplog) -> None:
    app = ResourceApp.from_definitions("queues", _definition())
    logger = logging.getLogger("resource_runtime.app")
    logger.addHandler(caplog.handler)
    try:
        with pytest.raises(NotFoundError):
            await app.execute_operation(ExecutionContext(), "read", Resource(type="printer", external_id="1"))
    finally:
        logger.removeHandler(caplog.handler)

    assert "not_found" in caplog.text
    assert "resource type printer not found" in caplog.text
