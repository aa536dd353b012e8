"""
Immutable registry of resource definitions keyed by type name.

The registry is produced once by a RegistryBuilder and never mutated
afterwards, so any number of concurrent requests may read it without locking.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

from resource_runtime.errors import ConfigurationError
from resource_runtime.registry.resource_definition import ActionDefinition, ResourceDefinition

RESOURCE_TYPE_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"

_resource_type_regex = re.compile(RESOURCE_TYPE_PATTERN)


def is_valid_resource_type(value: str) -> bool:
    return bool(value) and _resource_type_regex.fullmatch(value) is not None


class ResourceRegistry:
    """
    Frozen collection of resource definitions.

    Usage:
        registry = RegistryBuilder().register(printer).register(queue).build()
        definition = registry.lookup("printer")
    """

    def __init__(self, definitions: Iterable[ResourceDefinition] = ()) -> None:
        ordered = tuple(definitions)
        self._ordered: Tuple[ResourceDefinition, ...] = ordered
        self._by_type: Mapping[str, ResourceDefinition] = MappingProxyType(
            {definition.type: definition for definition in ordered}
        )

    def lookup(self, resource_type: str) -> Optional[ResourceDefinition]:
        return self._by_type.get(resource_type)

    def lookup_action(self, resource_type: str, action: str) -> Optional[ActionDefinition]:
        definition = self.lookup(resource_type)
        if definition is None:
            return None
        return definition.action(action)

    def definitions(self) -> Tuple[ResourceDefinition, ...]:
        return self._ordered

    def types(self) -> List[str]:
        return [definition.type for definition in self._ordered]

    def __contains__(self, resource_type: object) -> bool:
        return resource_type in self._by_type

    def __iter__(self) -> Iterator[ResourceDefinition]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)


class RegistryBuilder:
    """
    Collects resource definitions and reports every configuration problem at
    once when the registry is built.
    """

    def __init__(self) -> None:
        self._definitions: List[ResourceDefinition] = []
        self._violations: List[str] = []

    def register(self, definition: ResourceDefinition) -> "RegistryBuilder":
        if not is_valid_resource_type(definition.type):
            self._violations.append(
                f"resource type '{definition.type}' does not match pattern {RESOURCE_TYPE_PATTERN}"
            )
            return self

        for existing in self._definitions:
            if existing.type == definition.type:
                self._violations.append(
                    f"resource definition with the same type '{definition.type}' already exists"
                )
                return self
            if definition.display_name and existing.display_name == definition.display_name:
                self._violations.append(
                    f"resource display name '{definition.display_name}' already exists"
                )
                return self

        self._definitions.append(definition)
        return self

    def register_all(self, definitions: Iterable[ResourceDefinition]) -> "RegistryBuilder":
        for definition in definitions:
            self.register(definition)
        return self

    def build(self) -> ResourceRegistry:
        if self._violations:
            raise ConfigurationError(self._violations)
        return ResourceRegistry(self._definitions)


def build_registry(*definitions: ResourceDefinition) -> ResourceRegistry:
    return RegistryBuilder().register_all(definitions).build()


__all__ = [
    "RESOURCE_TYPE_PATTERN",
    "RegistryBuilder",
    "ResourceRegistry",
    "build_registry",
    "is_valid_resource_type",
]
