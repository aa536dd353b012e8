"""
Example resource definition: PostgreSQL databases kept in an in-memory store.

Usage:
    store = PostgresStore()
    app = ResourceApp.from_definitions("databases", build_postgres_definition(store))
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from resource_runtime.context import ExecutionContext
from resource_runtime.registry.resource_definition import (
    ActionConfig,
    OperationKind,
    ResourceDefinition,
    ResourceDefinitionBuilder,
)
from resource_runtime.schema.models import (
    ActionRequest,
    ActionResponse,
    HealthCheckResponse,
    HealthCheckStatus,
    LifecycleStage,
    Link,
    LinkType,
    ListRequest,
    ListResponse,
    OperationRequest,
    OperationResponse,
    Resource,
)

RESOURCE_TYPE = "postgres_database"
PAGE_SIZE = 2

PROPERTIES_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "instance_name": {
            "type": "string",
            "pattern": "^[a-z][a-z0-9-]+[a-z0-9]$",
            "minLength": 3,
            "maxLength": 63,
            "description": "Name of the PostgreSQL instance",
        },
        "version": {
            "type": "string",
            "enum": ["11", "12", "13", "14", "15"],
            "description": "PostgreSQL version",
        },
        "storage_gb": {
            "type": "integer",
            "minimum": 10,
            "maximum": 1000,
            "description": "Storage size in GB",
        },
        "region": {"type": "string", "description": "Region where the database is deployed"},
        "status": {"type": "string", "enum": ["creating", "available", "deleting"]},
        "host": {"type": "string"},
        "port": {"type": "integer"},
        "extensions": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["instance_name", "version", "storage_gb", "region"],
}

CREATE_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "instance_name": PROPERTIES_SCHEMA["properties"]["instance_name"],
        "version": {**PROPERTIES_SCHEMA["properties"]["version"], "default": "15"},
        "storage_gb": {**PROPERTIES_SCHEMA["properties"]["storage_gb"], "default": 20},
        "region": {"type": "string", "default": "us-east-1"},
        "extensions": {"type": "array", "items": {"type": "string"}, "default": []},
    },
    "required": ["instance_name"],
    "additionalProperties": False,
}

UPDATE_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "storage_gb": PROPERTIES_SCHEMA["properties"]["storage_gb"],
    },
    "required": ["storage_gb"],
    "additionalProperties": False,
}

BACKUP_OUTPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "backup_id": {"type": "string"},
        "status": {"type": "string", "enum": ["creating", "completed"]},
    },
    "required": ["backup_id", "status"],
}

DESTROY_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "force": {
            "type": "boolean",
            "default": False,
            "description": "Force deletion even if the database is in use",
        },
    },
}

INSTRUCTIONS = """
## PostgreSQL Database
This resource provisions and manages PostgreSQL databases.

### Connection Information
After creation, connect with the `host` and `port` properties of the resource.
"""


@dataclass
class PostgresStore:
    """Stand-in for a cloud provider API."""

    instances: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    backups: Dict[str, List[str]] = field(default_factory=dict)
    notifications: List[str] = field(default_factory=list)
    available: bool = True
    _backup_ids: Any = field(default_factory=lambda: itertools.count(1), repr=False)

    def get(self, external_id: str) -> Dict[str, Any]:
        try:
            return self.instances[external_id]
        except KeyError:
            raise LookupError(f"database '{external_id}' does not exist") from None

    def next_backup_id(self) -> str:
        return f"bkp-{next(self._backup_ids):06d}"


def _to_resource(external_id: str, properties: Dict[str, Any]) -> Resource:
    return Resource(
        external_id=external_id,
        display_name=properties["instance_name"],
        type=RESOURCE_TYPE,
        links=[
            Link(
                url=f"https://console.example.com/postgres/{external_id}",
                title="Console",
                type=LinkType.administration,
            )
        ],
        properties=dict(properties),
    )


def build_postgres_definition(store: Optional[PostgresStore] = None) -> ResourceDefinition:
    store = store if store is not None else PostgresStore()

    async def create_database(ctx: ExecutionContext, request: OperationRequest) -> OperationResponse:
        config = request.input
        name = config["instance_name"]
        if name in store.instances:
            raise ValueError(f"database '{name}' already exists")

        host = f"{name}.postgres.example.com"
        properties = {
            "instance_name": name,
            "version": config["version"],
            "storage_gb": config["storage_gb"],
            "region": config["region"],
            "status": "creating",
            "host": host,
            "port": 5432,
            "extensions": list(config["extensions"]),
        }
        store.instances[name] = properties
        return OperationResponse(resource=_to_resource(name, properties))

    async def read_database(ctx: ExecutionContext, request: OperationRequest) -> OperationResponse:
        external_id = request.resource.external_id
        return OperationResponse(resource=_to_resource(external_id, store.get(external_id)))

    async def update_database(ctx: ExecutionContext, request: OperationRequest) -> OperationResponse:
        external_id = request.resource.external_id
        properties = store.get(external_id)
        if request.input["storage_gb"] < properties["storage_gb"]:
            raise ValueError("storage cannot be reduced")
        properties["storage_gb"] = request.input["storage_gb"]
        return OperationResponse(resource=_to_resource(external_id, properties))

    def delete_database(ctx: ExecutionContext, request: OperationRequest) -> OperationResponse:
        store.instances.pop(request.resource.external_id, None)
        return OperationResponse()

    def list_databases(ctx: ExecutionContext, request: ListRequest) -> ListResponse:
        names = sorted(store.instances)
        start = int(request.next) if request.next else 0
        page = names[start:start + PAGE_SIZE]
        next_token = str(start + PAGE_SIZE) if start + PAGE_SIZE < len(names) else ""
        return ListResponse(
            resources=[_to_resource(name, store.instances[name]) for name in page],
            next=next_token,
        )

    def validate_backup(ctx: ExecutionContext, request: ActionRequest) -> None:
        properties = store.get(request.resource.external_id)
        if properties["status"] == "deleting":
            raise ValueError("database is being deleted")

    async def backup_database(ctx: ExecutionContext, request: ActionRequest) -> ActionResponse:
        backup_id = store.next_backup_id()
        store.backups.setdefault(request.resource.external_id, []).append(backup_id)
        return ActionResponse(output={"backup_id": backup_id, "status": "creating"})

    def notify_backup_complete(ctx: ExecutionContext, request: ActionRequest, response: ActionResponse) -> None:
        store.notifications.append(
            f"backup {response.output['backup_id']} of {request.resource.external_id} started"
        )

    async def destroy_database(ctx: ExecutionContext, request: ActionRequest) -> ActionResponse:
        properties = store.get(request.resource.external_id)
        if properties["status"] == "creating" and not request.input["force"]:
            raise ValueError("database is still being created; use force to destroy it")
        properties["status"] = "deleting"
        return ActionResponse(output={"status": "deleting"})

    def check_health(ctx: ExecutionContext) -> HealthCheckResponse:
        if not store.available:
            return HealthCheckResponse(
                status=HealthCheckStatus.disrupted,
                message="provider API is unreachable",
            )
        pending = sum(1 for properties in store.instances.values() if properties["status"] == "deleting")
        if pending:
            return HealthCheckResponse(
                status=HealthCheckStatus.degraded,
                message=f"{pending} database(s) being deleted",
            )
        return HealthCheckResponse(
            status=HealthCheckStatus.healthy,
            message=f"{len(store.instances)} database(s) managed",
        )

    return (
        ResourceDefinitionBuilder(
            RESOURCE_TYPE,
            display_name="PostgreSQL Database",
            description="Managed PostgreSQL database instances",
            lifecycle_stage=LifecycleStage.operate,
            properties_schema=PROPERTIES_SCHEMA,
        )
        .links(
            Link(url="https://docs.example.com/postgres", title="Documentation", type=LinkType.documentation),
            Link(url="https://support.example.com", title="Support", type=LinkType.support),
        )
        .instructions(INSTRUCTIONS)
        .create_fn(create_database, CREATE_INPUT_SCHEMA)
        .read_fn(read_database)
        .update_fn(update_database, UPDATE_INPUT_SCHEMA)
        .delete_fn(delete_database)
        .list_fn(list_databases)
        .register_operation(
            "backup",
            backup_database,
            action=ActionConfig(title="Create Backup", description="Creates a point-in-time backup"),
            output_schema=BACKUP_OUTPUT_SCHEMA,
            pre=validate_backup,
            post=notify_backup_complete,
        )
        .register_operation(
            "destroy",
            destroy_database,
            kind=OperationKind.action,
            action=ActionConfig(
                title="Delete Database",
                description="Permanently deletes the database instance",
                requires_confirmation=True,
            ),
            input_schema=DESTROY_INPUT_SCHEMA,
        )
        .health_check_fn(check_health)
        .build()
    )


__all__ = [
    "PostgresStore",
    "RESOURCE_TYPE",
    "build_postgres_definition",
]
