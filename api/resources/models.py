from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from resource_runtime.errors import ErrorCategory
from resource_runtime.schema.messages import (
    EnvironmentVariableMessage,
    MetadataMessage,
    ResourceDefinitionDescriptor,
    ResourceMessage,
)


class ProblemDetails(BaseModel):
    type: str
    title: str
    status: int
    detail: str
    category: ErrorCategory


class ResourceDefinitionsResponse(BaseModel):
    definitions: List[ResourceDefinitionDescriptor] = Field(default_factory=list)


class ExecuteOperationRequest(BaseModel):
    operation: str = Field(..., description="One of create, read, update, delete")
    resource: Optional[ResourceMessage] = None
    input: Dict[str, Any] = Field(default_factory=dict)
    metadata: Optional[MetadataMessage] = None
    environment: List[EnvironmentVariableMessage] = Field(default_factory=list)


class ExecuteOperationResponse(BaseModel):
    resource: ResourceMessage


class ListResourcesRequest(BaseModel):
    resource: Optional[ResourceMessage] = None
    next: str = ""
    metadata: Optional[MetadataMessage] = None


class ListResourcesResponse(BaseModel):
    resources: List[ResourceMessage] = Field(default_factory=list)
    next: str = ""


class ExecuteActionRequest(BaseModel):
    action: str
    resource: Optional[ResourceMessage] = None
    input: Dict[str, Any] = Field(default_factory=dict)
    metadata: Optional[MetadataMessage] = None
    environment: List[EnvironmentVariableMessage] = Field(default_factory=list)


class ExecuteActionResponse(BaseModel):
    output: Dict[str, Any] = Field(default_factory=dict)
