from __future__ import annotations

import pytest

from resource_runtime.app import ResourceApp
from resource_runtime.context import ExecutionContext
from resource_runtime.errors import ErrorCategory, RequestError
from resource_runtime.examples.postgres import RESOURCE_TYPE, PostgresStore, build_postgres_definition
from resource_runtime.schema.models import HealthCheckStatus, Resource


@pytest.fixture
def store() -> PostgresStore:
    return PostgresStore()


@pytest.fixture
def app(store: PostgresStore) -> ResourceApp:
    return ResourceApp.from_definitions("databases", build_postgres_definition(store))


async def _create(app: ResourceApp, name: str, **extra):
    return await app.execute_operation(
        ExecutionContext(), "create", Resource(type=RESOURCE_TYPE), {"instance_name": name, **extra}
    )


@pytest.mark.asyncio
async def test_create_applies_defaults(app: ResourceApp) -> None:
    resource = await _create(app, "orders-db")

    assert resource.external_id == "orders-db"
    assert resource.properties["version"] == "15"
    assert resource.properties["storage_gb"] == 20
    assert resource.properties["region"] == "us-east-1"
    assert resource.properties["host"] == "orders-db.postgres.example.com"
    assert resource.links[0].title == "Console"


@pytest.mark.asyncio
async def test_create_rejects_invalid_name(app: ResourceApp) -> None:
    with pytest.raises(RequestError) as excinfo:
        await _create(app, "Orders_DB")

    assert excinfo.value.category == ErrorCategory.invalid_argument


@pytest.mark.asyncio
async def test_read_update_delete(app: ResourceApp, store: PostgresStore) -> None:
    await _create(app, "orders-db")
    target = Resource(type=RESOURCE_TYPE, external_id="orders-db")

    read = await app.execute_operation(ExecutionContext(), "read", target)
    assert read.properties["storage_gb"] == 20

    updated = await app.execute_operation(ExecutionContext(), "update", target, {"storage_gb": 50})
    assert updated.properties["storage_gb"] == 50

    await app.execute_operation(ExecutionContext(), "delete", target)
    assert "orders-db" not in store.instances

    with pytest.raises(RequestError) as excinfo:
        await app.execute_operation(ExecutionContext(), "read", target)
    assert excinfo.value.category == ErrorCategory.internal
    assert excinfo.value.message == "read resource: database 'orders-db' does not exist"


@pytest.mark.asyncio
async def test_shrinking_storage_fails(app: ResourceApp) -> None:
    await _create(app, "orders-db", storage_gb=100)

    with pytest.raises(RequestError) as excinfo:
        await app.execute_operation(
            ExecutionContext(),
            "update",
            Resource(type=RESOURCE_TYPE, external_id="orders-db"),
            {"storage_gb": 50},
        )

    assert excinfo.value.message == "update resource: storage cannot be reduced"


@pytest.mark.asyncio
async def test_list_pages_through_instances(app: ResourceApp) -> None:
    for name in ("alpha-db", "beta-db", "gamma-db"):
        await _create(app, name)

    first = await app.list_resources(ExecutionContext(), Resource(type=RESOURCE_TYPE))
    second = await app.list_resources(ExecutionContext(), Resource(type=RESOURCE_TYPE), first.next)

    assert [resource.external_id for resource in first.resources] == ["alpha-db", "beta-db"]
    assert [resource.external_id for resource in second.resources] == ["gamma-db"]
    assert second.next == ""


@pytest.mark.asyncio
async def test_backup_runs_hooks(app: ResourceApp, store: PostgresStore) -> None:
    await _create(app, "orders-db")

    output = await app.execute_action(
        ExecutionContext(), Resource(type=RESOURCE_TYPE, external_id="orders-db"), "backup"
    )

    assert output == {"backup_id": "bkp-000001", "status": "creating"}
    assert store.backups["orders-db"] == ["bkp-000001"]
    assert store.notifications == ["backup bkp-000001 of orders-db started"]


@pytest.mark.asyncio
async def test_backup_of_missing_database_fails_in_pre_hook(app: ResourceApp, store: PostgresStore) -> None:
    with pytest.raises(RequestError) as excinfo:
        await app.execute_action(
            ExecutionContext(), Resource(type=RESOURCE_TYPE, external_id="ghost-db"), "backup"
        )

    assert excinfo.value.message == "pre action hook: database 'ghost-db' does not exist"
    assert store.backups == {}


@pytest.mark.asyncio
async def test_destroy_requires_force_while_creating(app: ResourceApp) -> None:
    await _create(app, "orders-db")
    target = Resource(type=RESOURCE_TYPE, external_id="orders-db")

    with pytest.raises(RequestError):
        await app.execute_action(ExecutionContext(), target, "destroy")

    output = await app.execute_action(ExecutionContext(), target, "destroy", {"force": True})
    assert output == {"status": "deleting"}

    health = await app.health_check(ExecutionContext(), RESOURCE_TYPE)
    assert health.status == HealthCheckStatus.degraded


@pytest.mark.asyncio
async def test_health_reflects_provider(app: ResourceApp, store: PostgresStore) -> None:
    healthy = await app.health_check(ExecutionContext(), RESOURCE_TYPE)
    store.available = False
    disrupted = await app.health_check(ExecutionContext(), RESOURCE_TYPE)

    assert healthy.status == HealthCheckStatus.healthy
    assert disrupted.status == HealthCheckStatus.disrupted


def test_describe_marks_destroy_as_confirmed(app: ResourceApp) -> None:
    [descriptor] = app.describe()
    actions = {action.name: action for action in descriptor.actions}

    assert descriptor.list_supported and descriptor.healthcheck_supported
    assert actions["destroy"].requires_confirmation is True
    assert actions["backup"].requires_confirmation is False
    assert actions["backup"].display_name == "Create Backup"
