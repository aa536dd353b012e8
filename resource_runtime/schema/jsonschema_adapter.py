"""
Schema engine: compiles raw JSON Schema documents into validators with
discoverable defaults.

Compilation runs a structural lint over the `properties` object so that every
property stays representable as a flat scalar or array-of-scalar value in the
external resource representation.
"""

from __future__ import annotations

import copy
import json
from functools import lru_cache
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, Mapping, MutableMapping, Union

from jsonschema import ValidationError
from jsonschema.exceptions import SchemaError
from jsonschema.validators import Draft202012Validator, validator_for
from referencing import Registry
from referencing import Resource as ReferenceResource
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT202012

from resource_runtime.errors import (
    ArrayOfObjectsPropertyError,
    ObjectPropertyError,
    PropertiesNotObjectError,
    ReferencePropertyError,
    SchemaCompileError,
    SchemaValidationError,
)

JsonSchema = Dict[str, Any]
RawSchema = Union[bytes, str, Mapping[str, Any]]
ValidatorType = Draft202012Validator

_validator_cache: Dict[str, ValidatorType] = {}
_cache_lock = Lock()


GENERIC_EMPTY_SCHEMA: bytes = json.dumps(
    {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "$id": "urn:resource-runtime:schema:generic-empty",
        "$comment": (
            "This is a generic empty schema that can be used as a placeholder "
            "for schemas that are still in development."
        ),
        "type": "object",
        "properties": {},
        "required": [],
        "additionalProperties": True,
    },
    indent=2,
).encode("utf-8")


def _cache_key(schema: JsonSchema) -> str:
    return json.dumps(schema, sort_keys=True, separators=(",", ":"))


def get_validator(schema: JsonSchema) -> ValidatorType:
    """
    Compile (and cache) a jsonschema validator for the provided schema.
    """

    key = _cache_key(schema)
    with _cache_lock:
        validator = _validator_cache.get(key)
        if validator is None:
            validator_cls = validator_for(schema, default=Draft202012Validator)
            validator = validator_cls(schema)
            _validator_cache[key] = validator
    return validator


def format_validation_error(error: ValidationError, *, prefix: str = "$") -> str:
    """
    Convert a jsonschema.ValidationError into a human-friendly error string.
    """

    path = prefix
    for token in error.absolute_path:
        if isinstance(token, int):
            path += f"[{token}]"
        else:
            path += f".{token}"
    return f"{path}: {error.message}"


def _declares_type(subschema: Mapping[str, Any], expected: str) -> bool:
    declared = subschema.get("type")
    if isinstance(declared, list):
        return expected in declared
    return declared == expected


def lint_properties(document: Mapping[str, Any]) -> None:
    """
    Reject property shapes that have no flat representation.

    Only the top-level `properties` object is inspected; the rest of the
    document is left to the JSON Schema meta-validation.
    """

    if "properties" not in document:
        return

    properties = document["properties"]
    if not isinstance(properties, dict):
        raise PropertiesNotObjectError("properties should be an object")

    for name, subschema in properties.items():
        if not isinstance(subschema, dict):
            continue
        if "$ref" in subschema:
            raise ReferencePropertyError(f"property '{name}' should not be a reference")
        if _declares_type(subschema, "object"):
            raise ObjectPropertyError(f"property '{name}' should not be of type object")
        if _declares_type(subschema, "array"):
            items = subschema.get("items")
            candidates = items if isinstance(items, list) else [items]
            for item in candidates:
                if isinstance(item, dict) and _declares_type(item, "object"):
                    raise ArrayOfObjectsPropertyError(
                        f"property '{name}' should not be an array of objects"
                    )


# Keywords whose values are instance data, not subschemas.
_DATA_KEYWORDS = frozenset({"const", "default", "enum", "examples"})


def _iter_references(node: Any):
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str):
                yield value
            elif key not in _DATA_KEYWORDS:
                yield from _iter_references(value)
    elif isinstance(node, list):
        for item in node:
            yield from _iter_references(item)


def resolve_references(document: JsonSchema) -> None:
    """
    Resolve every `$ref` in the document against the document itself.

    Raises SchemaCompileError for a reference that points nowhere, so a broken
    schema fails at startup instead of on its first request.
    """

    resource = ReferenceResource.from_contents(document, default_specification=DRAFT202012)
    base_uri = resource.id() or ""
    resolver = Registry().with_resource(base_uri, resource).resolver(base_uri=base_uri)
    for reference in _iter_references(document):
        try:
            resolver.lookup(reference)
        except Unresolvable as exc:
            raise SchemaCompileError(f"compile schema: unresolvable reference {reference!r}: {exc}") from exc


def _load_document(raw: RawSchema) -> tuple[bytes, JsonSchema]:
    if isinstance(raw, Mapping):
        try:
            raw_bytes = json.dumps(dict(raw)).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SchemaCompileError(f"load schema: {exc}") from exc
        return raw_bytes, json.loads(raw_bytes)

    if raw is None or len(raw) == 0:
        raise SchemaCompileError("schema is empty")

    raw_bytes = raw.encode("utf-8") if isinstance(raw, str) else bytes(raw)
    try:
        document = json.loads(raw_bytes)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SchemaCompileError(f"load schema: {exc}") from exc

    if not isinstance(document, dict):
        raise SchemaCompileError(
            f"load schema: expected a JSON object, got {type(document).__name__}"
        )
    return raw_bytes, document


@dataclass(frozen=True)
class Schema:
    """
    A compiled schema together with the raw document it was built from.

    Instances are immutable and shared by every invocation of the operation
    that owns them.
    """

    raw: bytes
    document: JsonSchema = field(repr=False, compare=False)
    validator: ValidatorType = field(repr=False, compare=False)

    @classmethod
    def compile(cls, raw: RawSchema) -> "Schema":
        raw_bytes, document = _load_document(raw)
        lint_properties(document)

        validator_cls = validator_for(document, default=Draft202012Validator)
        try:
            validator_cls.check_schema(document)
        except SchemaError as exc:
            raise SchemaCompileError(f"compile schema: {exc.message}") from exc
        resolve_references(document)

        return cls(raw=raw_bytes, document=document, validator=get_validator(document))

    @property
    def defaults(self) -> Dict[str, Any]:
        properties = self.document.get("properties") or {}
        return {
            name: subschema["default"]
            for name, subschema in properties.items()
            if isinstance(subschema, dict) and "default" in subschema
        }

    def validate(self, document: Any) -> None:
        errors = sorted(
            self.validator.iter_errors(document),
            key=lambda error: [str(token) for token in error.absolute_path],
        )
        if errors:
            raise SchemaValidationError([format_validation_error(error) for error in errors])

    def inject_defaults(self, document: MutableMapping[str, Any]) -> None:
        """Set every absent, defaulted top-level property. Existing keys are never touched."""

        for name, default in self.defaults.items():
            if name in document:
                continue
            document[name] = copy.deepcopy(default)

    def to_external(self) -> Dict[str, Any]:
        if not self.raw:
            return {}
        return json.loads(self.raw)


def compile_schema(raw: RawSchema) -> Schema:
    return Schema.compile(raw)


@lru_cache(maxsize=None)
def generic_empty_schema() -> Schema:
    """The shared "accept anything, require nothing" schema."""

    return Schema.compile(GENERIC_EMPTY_SCHEMA)


__all__ = [
    "GENERIC_EMPTY_SCHEMA",
    "JsonSchema",
    "RawSchema",
    "Schema",
    "SchemaCompileError",
    "SchemaValidationError",
    "compile_schema",
    "format_validation_error",
    "generic_empty_schema",
    "get_validator",
    "lint_properties",
    "resolve_references",
]
