from __future__ import annotations

import pytest

from resource_runtime.errors import PropertyEncodingError
from resource_runtime.schema.messages import (
    EnvironmentVariableMessage,
    MetadataMessage,
    ResourceMessage,
    encode_output,
    encode_properties,
)
from resource_runtime.schema.models import (
    EnvironmentVariableType,
    Link,
    LinkType,
    Owner,
    OwnerType,
    Resource,
)


@pytest.mark.parametrize(
    "properties",
    [
        {},
        {"key": "value"},
        {"name": "db", "port": 5432, "ratio": 0.5, "enabled": True, "note": None, "tags": ["a", "b"]},
    ],
)
def test_resource_round_trip(properties) -> None:
    resource = Resource(
        external_id="db-1",
        display_name="Database",
        type="postgres_database",
        links=[Link(url="https://console.example.com", title="Console", type=LinkType.administration)],
        properties=properties,
    )

    restored = ResourceMessage.from_resource(resource).to_resource()

    assert restored == resource


def test_round_trip_survives_serialization() -> None:
    resource = Resource(external_id="q", type="queue", properties={"depth": 3, "enabled": False})

    payload = ResourceMessage.from_resource(resource).model_dump_json()
    restored = ResourceMessage.model_validate_json(payload).to_resource()

    assert restored.properties == {"depth": 3, "enabled": False}
    assert isinstance(restored.properties["enabled"], bool)


def test_encode_properties_names_offending_keys() -> None:
    with pytest.raises(PropertyEncodingError) as excinfo:
        encode_properties({"ok": 1, "nested": {"a": 1}, "rows": [{"a": 1}]})

    message = str(excinfo.value)
    assert "'nested'" in message
    assert "'rows'" in message
    assert "'ok'" not in message


def test_encode_output_accepts_nested_json() -> None:
    assert encode_output({"job": {"id": "1", "steps": [1, 2]}}) == {"job": {"id": "1", "steps": [1, 2]}}


def test_encode_output_rejects_non_json_values() -> None:
    with pytest.raises(PropertyEncodingError):
        encode_output({"when": object()})


def test_metadata_message_conversion() -> None:
    message = MetadataMessage.model_validate(
        {
            "project_id": "p1",
            "project_name": "Payments",
            "owners": [{"email": "team@example.com", "name": "Payments", "type": "team"}],
            "author": {"email": "dev@example.com", "type": "user"},
        }
    )

    metadata = message.to_metadata()

    assert metadata.project_id == "p1"
    assert metadata.owners[0].type == OwnerType.team
    assert metadata.author == Owner(email="dev@example.com", type=OwnerType.user)


def test_metadata_without_author_gets_empty_owner() -> None:
    assert MetadataMessage().to_metadata().author == Owner()


def test_environment_variable_message() -> None:
    variable = EnvironmentVariableMessage(key="DB_PASSWORD", value="s3cret", type="secret").to_variable()

    assert variable.type == EnvironmentVariableType.secret


def test_messages_reject_unknown_fields() -> None:
    with pytest.raises(ValueError):
        ResourceMessage.model_validate({"external_id": "1", "unexpected": True})
