from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from resource_runtime.app import ResourceApp
from resource_runtime.examples.postgres import PostgresStore, build_postgres_definition

API_PREFIX = "/api"


@pytest.fixture
def store() -> PostgresStore:
    return PostgresStore()


@pytest.fixture
def client(store: PostgresStore):
    resource_app = ResourceApp.from_definitions("databases", build_postgres_definition(store))
    with TestClient(create_app(resource_app, api_prefix=API_PREFIX)) as test_client:
        yield test_client
