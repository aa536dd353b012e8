"""
Pydantic models describing the external representation of resources and
resource definitions.

The pipeline converts handler results into these models before they leave
the process; conversion is where unencodable property values are caught.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from resource_runtime.errors import PropertyEncodingError
from resource_runtime.schema.models import (
    EnvironmentVariable,
    EnvironmentVariableType,
    HealthCheckStatus,
    LifecycleStage,
    Link,
    LinkType,
    Metadata,
    Owner,
    OwnerType,
    Properties,
    PropertyValue,
    Resource,
)

JsonSchema = Dict[str, Any]

_PROPERTIES_ADAPTER: TypeAdapter[Dict[str, PropertyValue]] = TypeAdapter(Dict[str, PropertyValue])
_OUTPUT_ADAPTER: TypeAdapter[Dict[str, JsonValue]] = TypeAdapter(Dict[str, JsonValue])


class MessageModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
    )


def encode_properties(properties: Properties | None) -> Dict[str, PropertyValue]:
    """
    Validate a property bag against the flat property value union.

    Raises PropertyEncodingError naming every offending property.
    """

    try:
        return _PROPERTIES_ADAPTER.validate_python(properties or {}, strict=True)
    except PydanticValidationError as exc:
        offending = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        names = ", ".join(f"'{name}'" for name in offending) or "properties"
        raise PropertyEncodingError(
            f"{names} cannot be represented as a scalar or array of scalars"
        ) from exc


def encode_output(output: Dict[str, Any] | None) -> Dict[str, JsonValue]:
    """Validate that an action output is a JSON-compatible object."""

    try:
        return _OUTPUT_ADAPTER.validate_python(output, strict=True)
    except PydanticValidationError as exc:
        raise PropertyEncodingError(
            f"output is not JSON-compatible: {exc.errors()[0]['msg']}"
        ) from exc


# -----------------------------
# Resources
# -----------------------------
class LinkMessage(MessageModel):
    url: str
    title: str = ""
    type: LinkType = LinkType.unspecified

    @classmethod
    def from_link(cls, link: Link) -> "LinkMessage":
        return cls(url=link.url, title=link.title, type=link.type)

    def to_link(self) -> Link:
        return Link(url=self.url, title=self.title, type=self.type)


class ResourceMessage(MessageModel):
    external_id: str = ""
    display_name: str = ""
    type: str = ""
    links: List[LinkMessage] = Field(default_factory=list)
    properties: Dict[str, PropertyValue] = Field(default_factory=dict)

    @classmethod
    def from_resource(cls, resource: Resource) -> "ResourceMessage":
        return cls(
            external_id=resource.external_id,
            display_name=resource.display_name,
            type=resource.type,
            links=[LinkMessage.from_link(link) for link in resource.links if link is not None],
            properties=encode_properties(resource.properties),
        )

    def to_resource(self) -> Resource:
        return Resource(
            external_id=self.external_id,
            display_name=self.display_name,
            type=self.type,
            links=[link.to_link() for link in self.links],
            properties={
                key: list(value) if isinstance(value, list) else value
                for key, value in self.properties.items()
            },
        )


# -----------------------------
# Request context
# -----------------------------
class OwnerMessage(MessageModel):
    email: str = ""
    name: str = ""
    type: Optional[OwnerType] = None

    def to_owner(self) -> Owner:
        return Owner(email=self.email, name=self.name, type=self.type)


class MetadataMessage(MessageModel):
    project_id: str = ""
    project_name: str = ""
    owners: List[OwnerMessage] = Field(default_factory=list)
    author: Optional[OwnerMessage] = None

    def to_metadata(self) -> Metadata:
        return Metadata(
            project_id=self.project_id,
            project_name=self.project_name,
            owners=[owner.to_owner() for owner in self.owners],
            author=self.author.to_owner() if self.author else Owner(),
        )


class EnvironmentVariableMessage(MessageModel):
    key: str = Field(min_length=1)
    value: str = ""
    type: EnvironmentVariableType = EnvironmentVariableType.variable

    def to_variable(self) -> EnvironmentVariable:
        return EnvironmentVariable(key=self.key, value=self.value, type=self.type)


# -----------------------------
# Describe
# -----------------------------
class ActionDescriptor(MessageModel):
    name: str
    display_name: str = ""
    description: str = ""
    requires_confirmation: bool = False
    input_schema: JsonSchema = Field(default_factory=dict)
    output_schema: JsonSchema = Field(default_factory=dict)


class ResourceDefinitionDescriptor(MessageModel):
    type: str
    display_name: str = ""
    description: str = ""
    lifecycle_stage: Optional[LifecycleStage] = None
    links: List[LinkMessage] = Field(default_factory=list)
    instructions_markdown: str = ""
    properties_schema: Optional[JsonSchema] = None

    create_supported: bool = False
    read_supported: bool = False
    update_supported: bool = False
    delete_supported: bool = False
    list_supported: bool = False
    healthcheck_supported: bool = False

    create_input_schema: Optional[JsonSchema] = None
    update_input_schema: Optional[JsonSchema] = None
    actions: List[ActionDescriptor] = Field(default_factory=list)


class HealthCheckMessage(MessageModel):
    status: HealthCheckStatus
    message: str = ""


__all__ = [
    "ActionDescriptor",
    "EnvironmentVariableMessage",
    "HealthCheckMessage",
    "LinkMessage",
    "MessageModel",
    "MetadataMessage",
    "OwnerMessage",
    "ResourceDefinitionDescriptor",
    "ResourceMessage",
    "encode_output",
    "encode_properties",
]
