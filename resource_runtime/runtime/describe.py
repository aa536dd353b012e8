"""
Renders registry contents into descriptors a catalogue can display.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from resource_runtime.registry.resource_definition import (
    ActionDefinition,
    OperationKind,
    ResourceDefinition,
)
from resource_runtime.registry.resource_registry import ResourceRegistry
from resource_runtime.schema.jsonschema_adapter import Schema
from resource_runtime.schema.messages import (
    ActionDescriptor,
    LinkMessage,
    ResourceDefinitionDescriptor,
)


def _external(schema: Optional[Schema]) -> Optional[Dict[str, Any]]:
    if schema is None:
        return None
    return schema.to_external()


def describe_action(action: ActionDefinition) -> ActionDescriptor:
    return ActionDescriptor(
        name=action.name,
        display_name=action.display_name,
        description=action.description,
        requires_confirmation=action.requires_confirmation,
        input_schema=_external(action.input_schema) or {},
        output_schema=_external(action.output_schema) or {},
    )


def describe_definition(definition: ResourceDefinition) -> ResourceDefinitionDescriptor:
    create = definition.operation(OperationKind.create)
    update = definition.operation(OperationKind.update)

    return ResourceDefinitionDescriptor(
        type=definition.type,
        display_name=definition.display_name,
        description=definition.description,
        lifecycle_stage=definition.lifecycle_stage,
        links=[LinkMessage.from_link(link) for link in definition.links],
        instructions_markdown=definition.instructions_markdown,
        properties_schema=_external(definition.properties_schema),
        create_supported=create is not None,
        read_supported=definition.supports(OperationKind.read),
        update_supported=update is not None,
        delete_supported=definition.supports(OperationKind.delete),
        list_supported=definition.supports(OperationKind.list),
        healthcheck_supported=definition.health_check is not None,
        create_input_schema=_external(create.input_schema) if create else None,
        update_input_schema=_external(update.input_schema) if update else None,
        actions=[describe_action(action) for action in definition.actions],
    )


def describe(registry: ResourceRegistry) -> List[ResourceDefinitionDescriptor]:
    """Describe every registered definition, in registration order."""

    return [describe_definition(definition) for definition in registry.definitions()]


__all__ = [
    "describe",
    "describe_action",
    "describe_definition",
]
