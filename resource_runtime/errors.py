"""
Shared exception hierarchy for the resource runtime.

Two families live here:

- configuration errors (bad builder usage, duplicate registrations, invalid
  schemas) raised while the registry is assembled at startup;
- request errors, raised while serving a call, each carrying one of the three
  caller-visible categories.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Sequence


class ResourceRuntimeError(Exception):
    """Base class for all resource runtime errors."""


# -----------------------------
# Startup / configuration
# -----------------------------
class ConfigurationError(ResourceRuntimeError):
    """Raised when a definition or registry cannot be assembled."""

    def __init__(self, violations: Iterable[str]) -> None:
        self.violations: List[str] = list(violations)
        super().__init__("; ".join(self.violations) or "invalid configuration")


class SchemaCompileError(ResourceRuntimeError):
    """Raised when a schema document cannot be compiled."""


class PropertiesNotObjectError(SchemaCompileError):
    """The `properties` keyword is present but is not an object."""


class ObjectPropertyError(SchemaCompileError):
    """A property is declared with type `object`."""


class ArrayOfObjectsPropertyError(SchemaCompileError):
    """An array property declares `items` of type `object`."""


class ReferencePropertyError(SchemaCompileError):
    """A property is declared through `$ref`."""


class SchemaValidationError(ResourceRuntimeError):
    """Raised when a document does not satisfy a compiled schema."""

    def __init__(self, violations: Sequence[str]) -> None:
        self.violations: List[str] = list(violations)
        super().__init__("; ".join(self.violations))


class PropertyEncodingError(ResourceRuntimeError):
    """Raised when a property bag holds a value with no external representation."""


# -----------------------------
# Request time
# -----------------------------
class ErrorCategory(str, Enum):
    invalid_argument = "invalid_argument"
    not_found = "not_found"
    internal = "internal"


class RequestError(ResourceRuntimeError):
    """Base class for errors returned to a caller."""

    category: ErrorCategory = ErrorCategory.internal

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.category.value}: {self.message}"


class InvalidArgumentError(RequestError):
    """The caller can correct the request (bad type, missing precondition, invalid input)."""

    category = ErrorCategory.invalid_argument


class NotFoundError(RequestError):
    """The resource type or action does not exist."""

    category = ErrorCategory.not_found


class InternalError(RequestError):
    """Handler failure, invalid handler output, encoding failure or unexpected state."""

    category = ErrorCategory.internal


__all__ = [
    "ArrayOfObjectsPropertyError",
    "ConfigurationError",
    "ErrorCategory",
    "InternalError",
    "InvalidArgumentError",
    "NotFoundError",
    "ObjectPropertyError",
    "PropertiesNotObjectError",
    "PropertyEncodingError",
    "ReferencePropertyError",
    "RequestError",
    "ResourceRuntimeError",
    "SchemaCompileError",
    "SchemaValidationError",
]
