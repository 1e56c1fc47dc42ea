"""Typed view of JSON input schemas."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

PRIMITIVE_TYPES = ("string", "number", "integer", "boolean", "null")


@dataclass(frozen=True)
class UnknownSchema:
    """Absent, malformed, or unsupported schema."""


@dataclass(frozen=True)
class EnumSchema:
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class ArraySchema:
    items: Optional["SchemaNode"] = None


@dataclass(frozen=True)
class ObjectSchema:
    # None when the object declares no properties
    properties: Optional[Dict[str, "SchemaNode"]] = None
    required: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PrimitiveSchema:
    type_name: str


SchemaNode = Union[UnknownSchema, EnumSchema, ArraySchema, ObjectSchema, PrimitiveSchema]


def parse_schema(raw: Any) -> SchemaNode:
    """Convert a raw JSON schema value into a schema node.

    Total over all inputs: anything that does not match a known shape
    becomes ``UnknownSchema``.
    """
    if not isinstance(raw, dict):
        return UnknownSchema()

    if isinstance(raw.get("enum"), list):
        return EnumSchema(tuple(raw["enum"]))

    schema_type = raw.get("type")

    if schema_type == "array":
        items = raw.get("items")
        return ArraySchema(parse_schema(items) if items is not None else None)

    if schema_type == "object":
        properties = raw.get("properties")
        if not isinstance(properties, dict) or not properties:
            return ObjectSchema()
        required = raw.get("required")
        if not isinstance(required, list):
            required = []
        return ObjectSchema(
            properties={str(key): parse_schema(value) for key, value in properties.items()},
            required=tuple(name for name in required if isinstance(name, str)),
        )

    if isinstance(schema_type, str) and schema_type in PRIMITIVE_TYPES:
        return PrimitiveSchema(schema_type)

    return UnknownSchema()
