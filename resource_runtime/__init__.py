"""
Resource runtime: typed resource definitions, guarded by JSON Schema
contracts, served through a create/read/update/delete, list, action and
health check pipeline.
"""

from resource_runtime.app import ResourceApp
from resource_runtime.context import ExecutionContext
from resource_runtime.errors import (
    ConfigurationError,
    ErrorCategory,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    RequestError,
    SchemaCompileError,
)
from resource_runtime.registry.resource_definition import (
    ActionConfig,
    ActionDefinition,
    OperationKind,
    ResourceDefinition,
    ResourceDefinitionBuilder,
)
from resource_runtime.registry.resource_registry import RegistryBuilder, ResourceRegistry, build_registry
from resource_runtime.schema.jsonschema_adapter import Schema, compile_schema, generic_empty_schema
from resource_runtime.schema.models import (
    ActionRequest,
    ActionResponse,
    EnvironmentVariable,
    HealthCheckResponse,
    HealthCheckStatus,
    LifecycleStage,
    Link,
    LinkType,
    ListRequest,
    ListResponse,
    Metadata,
    OperationRequest,
    OperationResponse,
    Owner,
    Resource,
)

__all__ = [
    "ActionConfig",
    "ActionDefinition",
    "ActionRequest",
    "ActionResponse",
    "ConfigurationError",
    "EnvironmentVariable",
    "ErrorCategory",
    "ExecutionContext",
    "HealthCheckResponse",
    "HealthCheckStatus",
    "InternalError",
    "InvalidArgumentError",
    "LifecycleStage",
    "Link",
    "LinkType",
    "ListRequest",
    "ListResponse",
    "Metadata",
    "NotFoundError",
    "OperationKind",
    "OperationRequest",
    "OperationResponse",
    "Owner",
    "RegistryBuilder",
    "RequestError",
    "Resource",
    "ResourceApp",
    "ResourceDefinition",
    "ResourceDefinitionBuilder",
    "ResourceRegistry",
    "Schema",
    "SchemaCompileError",
    "build_registry",
    "compile_schema",
    "generic_empty_schema",
]
