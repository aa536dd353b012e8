"""
Resource definitions and the builder that assembles them.

A definition is built once at startup and frozen. Builder steps never raise:
every misuse is recorded, and `build()` reports all of them in a single
ConfigurationError.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from resource_runtime.context import ExecutionContext
from resource_runtime.errors import ConfigurationError, SchemaCompileError
from resource_runtime.schema.jsonschema_adapter import RawSchema, Schema, generic_empty_schema
from resource_runtime.schema.models import (
    ActionRequest,
    ActionResponse,
    HealthCheckResponse,
    LifecycleStage,
    Link,
    LinkType,
    ListRequest,
    ListResponse,
    OperationRequest,
    OperationResponse,
)


class OperationKind(str, Enum):
    create = "create"
    read = "read"
    update = "update"
    delete = "delete"
    list = "list"
    action = "action"


RESOURCE_OPERATION_KINDS: Tuple[OperationKind, ...] = (
    OperationKind.create,
    OperationKind.read,
    OperationKind.update,
    OperationKind.delete,
)

# Handlers may be plain functions or coroutines.
OperationFunc = Callable[
    [ExecutionContext, OperationRequest], Union[OperationResponse, Awaitable[OperationResponse]]
]
ListFunc = Callable[[ExecutionContext, ListRequest], Union[ListResponse, Awaitable[ListResponse]]]
ActionFunc = Callable[[ExecutionContext, ActionRequest], Union[ActionResponse, Awaitable[ActionResponse]]]
HealthCheckFunc = Callable[
    [ExecutionContext], Union[HealthCheckResponse, Awaitable[HealthCheckResponse]]
]
# pre(context, request) runs before the handler; post(context, request, response) after it.
PreHook = Callable[[ExecutionContext, Any], Any]
PostHook = Callable[[ExecutionContext, Any, Any], Any]

SchemaLike = Union[Schema, RawSchema]


@dataclass(frozen=True)
class Operation:
    kind: OperationKind
    input_schema: Schema
    output_schema: Schema
    handler: OperationFunc
    pre: Optional[PreHook] = None
    post: Optional[PostHook] = None


@dataclass(frozen=True)
class ListOperation:
    output_schema: Schema
    handler: ListFunc
    pre: Optional[PreHook] = None
    post: Optional[PostHook] = None


@dataclass(frozen=True)
class ActionConfig:
    title: str = ""
    description: str = ""
    requires_confirmation: bool = False


@dataclass(frozen=True)
class ActionDefinition:
    """
    A user-invocable, non-CRUD operation on a resource instance.

    Missing schemas are replaced with the generic empty schema when the
    action is added to a definition.
    """

    name: str
    handler: ActionFunc
    display_name: str = ""
    description: str = ""
    requires_confirmation: bool = False
    input_schema: Optional[Schema] = None
    output_schema: Optional[Schema] = None
    pre: Optional[PreHook] = None
    post: Optional[PostHook] = None


@dataclass(frozen=True, eq=False)
class ResourceDefinition:
    type: str
    display_name: str = ""
    description: str = ""
    lifecycle_stage: Optional[LifecycleStage] = None
    links: Tuple[Link, ...] = ()
    instructions_markdown: str = ""
    properties_schema: Optional[Schema] = None
    operations: Mapping[OperationKind, Operation] = field(default_factory=lambda: MappingProxyType({}))
    list_operation: Optional[ListOperation] = None
    actions: Tuple[ActionDefinition, ...] = ()
    health_check: Optional[HealthCheckFunc] = None

    def operation(self, kind: OperationKind) -> Optional[Operation]:
        return self.operations.get(kind)

    def action(self, name: str) -> Optional[ActionDefinition]:
        for action in self.actions:
            if action.name == name:
                return action
        return None

    def supports(self, kind: OperationKind) -> bool:
        if kind == OperationKind.list:
            return self.list_operation is not None
        if kind == OperationKind.action:
            return bool(self.actions)
        return kind in self.operations


class ResourceDefinitionBuilder:
    """
    Fluent builder for a ResourceDefinition.

    Usage:
        definition = (
            ResourceDefinitionBuilder("printer", display_name="Printer")
            .properties(PRINTER_SCHEMA)
            .create_fn(create_printer, CREATE_INPUT_SCHEMA)
            .read_fn(read_printer)
            .build()
        )
    """

    def __init__(
        self,
        type: str,
        *,
        display_name: str = "",
        description: str = "",
        lifecycle_stage: Optional[LifecycleStage] = None,
        properties_schema: Optional[SchemaLike] = None,
        links: Sequence[Link] = (),
        instructions_markdown: str = "",
    ) -> None:
        self._type = type
        self._display_name = display_name
        self._description = description
        self._lifecycle_stage = lifecycle_stage
        self._links: List[Link] = []
        self._instructions = instructions_markdown
        self._properties: Optional[Schema] = None
        self._operations: Dict[OperationKind, Operation] = {}
        self._list: Optional[ListOperation] = None
        self._actions: List[ActionDefinition] = []
        self._health_check: Optional[HealthCheckFunc] = None
        self._violations: List[str] = []

        if properties_schema is not None:
            self.properties(properties_schema)
        self.links(*links)

    @property
    def violations(self) -> List[str]:
        return list(self._violations)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    def properties(self, schema: SchemaLike) -> "ResourceDefinitionBuilder":
        compiled = self._compile("properties schema", schema)
        if compiled is not None:
            self._properties = compiled
        return self

    def links(self, *links: Link) -> "ResourceDefinitionBuilder":
        for link in links:
            if not link.url or not link.title:
                self._violations.append(
                    f"invalid link {link.url!r}: title and url are required"
                )
                continue
            if link.type is None:
                link = dataclasses.replace(link, type=LinkType.unspecified)
            self._links.append(link)
        return self

    def instructions(self, markdown: str) -> "ResourceDefinitionBuilder":
        self._instructions = markdown
        return self

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def create_fn(
        self,
        handler: OperationFunc,
        input_schema: Optional[SchemaLike],
        *,
        pre: Optional[PreHook] = None,
        post: Optional[PostHook] = None,
    ) -> "ResourceDefinitionBuilder":
        return self._attach(OperationKind.create, handler, input_schema, pre, post)

    def update_fn(
        self,
        handler: OperationFunc,
        input_schema: Optional[SchemaLike],
        *,
        pre: Optional[PreHook] = None,
        post: Optional[PostHook] = None,
    ) -> "ResourceDefinitionBuilder":
        return self._attach(OperationKind.update, handler, input_schema, pre, post)

    def delete_fn(
        self,
        handler: OperationFunc,
        *,
        pre: Optional[PreHook] = None,
        post: Optional[PostHook] = None,
    ) -> "ResourceDefinitionBuilder":
        return self._attach(OperationKind.delete, handler, None, pre, post)

    def read_fn(
        self,
        handler: OperationFunc,
        *,
        pre: Optional[PreHook] = None,
        post: Optional[PostHook] = None,
    ) -> "ResourceDefinitionBuilder":
        return self._attach(OperationKind.read, handler, None, pre, post)

    def list_fn(
        self,
        handler: ListFunc,
        *,
        pre: Optional[PreHook] = None,
        post: Optional[PostHook] = None,
    ) -> "ResourceDefinitionBuilder":
        errors: List[str] = []
        if self._properties is None:
            errors.append("properties schema must be set before adding a list operation")
        if handler is None:
            errors.append("handler must be set for a list operation")
        if self._list is not None:
            errors.append("list operation is already registered")
        if errors:
            self._violations.extend(errors)
            return self

        self._list = ListOperation(output_schema=self._properties, handler=handler, pre=pre, post=post)
        return self

    def health_check_fn(self, handler: HealthCheckFunc) -> "ResourceDefinitionBuilder":
        if handler is None:
            self._violations.append("handler must be set for a health check")
        elif self._health_check is not None:
            self._violations.append("health check is already registered")
        else:
            self._health_check = handler
        return self

    def add_action(self, action: ActionDefinition) -> "ResourceDefinitionBuilder":
        errors: List[str] = []
        if not action.name:
            errors.append("action name is required")
        elif any(existing.name == action.name for existing in self._actions):
            errors.append(f"action with the same name '{action.name}' already exists")
        if action.handler is None:
            errors.append(f"handler must be set for action '{action.name}'")

        input_schema = self._compile(f"action '{action.name}' input schema", action.input_schema)
        output_schema = self._compile(f"action '{action.name}' output schema", action.output_schema)
        if errors:
            self._violations.extend(errors)
            return self

        self._actions.append(
            dataclasses.replace(
                action,
                input_schema=input_schema or generic_empty_schema(),
                output_schema=output_schema or generic_empty_schema(),
            )
        )
        return self

    def register_operation(
        self,
        name: str,
        handler: Callable[..., Any],
        *,
        kind: Optional[OperationKind] = None,
        action: Optional[ActionConfig] = None,
        input_schema: Optional[SchemaLike] = None,
        output_schema: Optional[SchemaLike] = None,
        pre: Optional[PreHook] = None,
        post: Optional[PostHook] = None,
    ) -> "ResourceDefinitionBuilder":
        """
        Register an operation under a single operation kind.

        CRUD and list operations derive their output schema from the
        properties schema. An operation bound to neither a kind nor an action
        configuration would never be invoked and is rejected.
        """

        if kind is None and action is None:
            self._violations.append(
                f"operation '{name}' is neither bound to an operation kind nor enabled as an action"
            )
            return self

        if action is not None and kind not in (None, OperationKind.action):
            self._violations.append(
                f"operation '{name}' cannot be both a {kind.value} operation and an action: "
                f"{kind.value} handlers take an OperationRequest and actions an ActionRequest, "
                "so register the action separately under its own name"
            )
            return self

        if kind is None or kind == OperationKind.action:
            config = action or ActionConfig()
            return self.add_action(
                ActionDefinition(
                    name=name,
                    handler=handler,
                    display_name=config.title,
                    description=config.description,
                    requires_confirmation=config.requires_confirmation,
                    input_schema=input_schema,
                    output_schema=output_schema,
                    pre=pre,
                    post=post,
                )
            )

        if output_schema is not None:
            self._violations.append(
                f"{kind.value} operation: output schema is always the properties schema"
            )
            return self

        if kind == OperationKind.list:
            if input_schema is not None:
                self._violations.append("list operation: input schema is not supported")
                return self
            return self.list_fn(handler, pre=pre, post=post)

        return self._attach(kind, handler, input_schema, pre, post)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------
    def build(self) -> ResourceDefinition:
        if self._violations:
            raise ConfigurationError(
                f"resource definition '{self._type}': {violation}" for violation in self._violations
            )

        return ResourceDefinition(
            type=self._type,
            display_name=self._display_name,
            description=self._description,
            lifecycle_stage=self._lifecycle_stage,
            links=tuple(self._links),
            instructions_markdown=self._instructions,
            properties_schema=self._properties,
            operations=MappingProxyType(dict(self._operations)),
            list_operation=self._list,
            actions=tuple(self._actions),
            health_check=self._health_check,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _attach(
        self,
        kind: OperationKind,
        handler: Optional[OperationFunc],
        input_schema: Optional[SchemaLike],
        pre: Optional[PreHook],
        post: Optional[PostHook],
    ) -> "ResourceDefinitionBuilder":
        errors: List[str] = []
        takes_input = kind in (OperationKind.create, OperationKind.update)

        if takes_input and input_schema is None:
            errors.append(f"input schema is required for a {kind.value} operation")
        if not takes_input and input_schema is not None:
            errors.append(f"{kind.value} operation does not accept an input schema")
        if self._properties is None:
            errors.append(f"properties schema must be set before adding a {kind.value} operation")
        if handler is None:
            errors.append(f"handler must be set for a {kind.value} operation")
        if kind in self._operations:
            errors.append(f"{kind.value} operation is already registered")

        compiled_input = (
            self._compile(f"{kind.value} input schema", input_schema)
            if takes_input and input_schema is not None
            else generic_empty_schema()
        )
        if errors or compiled_input is None:
            self._violations.extend(errors)
            return self

        self._operations[kind] = Operation(
            kind=kind,
            input_schema=compiled_input,
            output_schema=self._properties,
            handler=handler,
            pre=pre,
            post=post,
        )
        return self

    def _compile(self, label: str, schema: Optional[SchemaLike]) -> Optional[Schema]:
        if schema is None or isinstance(schema, Schema):
            return schema
        try:
            return Schema.compile(schema)
        except SchemaCompileError as exc:
            self._violations.append(f"{label}: {exc}")
            return None


__all__ = [
    "ActionConfig",
    "ActionDefinition",
    "ActionFunc",
    "HealthCheckFunc",
    "ListFunc",
    "ListOperation",
    "Operation",
    "OperationFunc",
    "OperationKind",
    "PostHook",
    "PreHook",
    "RESOURCE_OPERATION_KINDS",
    "ResourceDefinition",
    "ResourceDefinitionBuilder",
]
