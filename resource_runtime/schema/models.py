"""
Domain value objects exchanged between the pipeline and resource handlers.

Handlers receive and return these plain dataclasses; the external
representation lives in `resource_runtime.schema.messages`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# -----------------------------
# Property values
# -----------------------------
# A property is a scalar or a homogeneous array of scalars. Nested objects,
# arrays of objects and references are rejected by the schema lint, so the
# property bag itself is the only object level.
PropertyScalar = Union[str, bool, int, float, None]
PropertyValue = Union[PropertyScalar, List[PropertyScalar]]
Properties = Dict[str, PropertyValue]


class LinkType(str, Enum):
    unspecified = "unspecified"
    documentation = "documentation"
    administration = "administration"
    support = "support"
    endpoint = "endpoint"
    external = "external"


class LifecycleStage(str, Enum):
    """Where a resource fits in the developer journey."""

    code = "code"
    build = "build"
    test = "test"
    release = "release"
    deploy = "deploy"
    operate = "operate"
    monitor = "monitor"
    other = "other"


class OwnerType(str, Enum):
    user = "user"
    team = "team"


class EnvironmentVariableType(str, Enum):
    variable = "variable"
    secret = "secret"
    certificate = "certificate"
    private_key = "private_key"
    public_key = "public_key"


class HealthCheckStatus(str, Enum):
    unknown = "unknown"
    healthy = "healthy"
    degraded = "degraded"
    disrupted = "disrupted"


@dataclass
class Link:
    url: str
    title: str
    type: LinkType = LinkType.unspecified


@dataclass
class Owner:
    email: str = ""
    name: str = ""
    type: Optional[OwnerType] = None


@dataclass
class Metadata:
    """
    Information about the project and user making a request. It does not
    describe the resource being operated on.
    """

    project_id: str = ""
    project_name: str = ""
    owners: List[Owner] = field(default_factory=list)
    author: Owner = field(default_factory=Owner)


@dataclass
class EnvironmentVariable:
    key: str
    value: str
    type: EnvironmentVariableType = EnvironmentVariableType.variable


@dataclass
class Resource:
    """
    An instance of a resource definition.

    `external_id` is the key by which the external system addresses the
    instance; handlers set it on create.
    """

    external_id: str = ""
    display_name: str = ""
    type: str = ""
    links: List[Link] = field(default_factory=list)
    properties: Properties = field(default_factory=dict)


# -----------------------------
# Handler contracts
# -----------------------------
@dataclass
class OperationRequest:
    """
    Input for create/read/update/delete handlers. `input` has already been
    validated against the operation's input schema, with defaults applied.
    """

    metadata: Metadata
    resource: Resource
    input: Dict[str, Any] = field(default_factory=dict)
    environment: Dict[str, EnvironmentVariable] = field(default_factory=dict)


@dataclass
class OperationResponse:
    resource: Optional[Resource] = None


@dataclass
class ListRequest:
    metadata: Metadata
    resource: Resource
    next: str = ""


@dataclass
class ListResponse:
    resources: List[Resource] = field(default_factory=list)
    next: str = ""


@dataclass
class ActionRequest:
    metadata: Metadata
    resource: Resource
    action: str
    input: Dict[str, Any] = field(default_factory=dict)
    environment: Dict[str, EnvironmentVariable] = field(default_factory=dict)


@dataclass
class ActionResponse:
    output: Dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthCheckResponse:
    status: HealthCheckStatus = HealthCheckStatus.unknown
    message: str = ""


__all__ = [
    "ActionRequest",
    "ActionResponse",
    "EnvironmentVariable",
    "EnvironmentVariableType",
    "HealthCheckResponse",
    "HealthCheckStatus",
    "LifecycleStage",
    "Link",
    "LinkType",
    "ListRequest",
    "ListResponse",
    "Metadata",
    "OperationRequest",
    "OperationResponse",
    "Owner",
    "OwnerType",
    "Properties",
    "PropertyScalar",
    "PropertyValue",
    "Resource",
]
