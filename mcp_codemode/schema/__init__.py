"""Schema parsing and signature synthesis."""

from .nodes import (
    ArraySchema,
    EnumSchema,
    ObjectSchema,
    PrimitiveSchema,
    SchemaNode,
    UnknownSchema,
    parse_schema,
)
from .signature import render_interfaces, render_schema, render_tool, render_type

__all__ = [
    "SchemaNode",
    "UnknownSchema",
    "EnumSchema",
    "ArraySchema",
    "ObjectSchema",
    "PrimitiveSchema",
    "parse_schema",
    "render_type",
    "render_schema",
    "render_tool",
    "render_interfaces",
]
