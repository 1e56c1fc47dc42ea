"""TypeScript-style signatures for aggregated tools."""

import json
from typing import TYPE_CHECKING, Any, Iterable

from .nodes import (
    ArraySchema,
    EnumSchema,
    ObjectSchema,
    PrimitiveSchema,
    SchemaNode,
    parse_schema,
)

if TYPE_CHECKING:
    from ..routing.registry import QualifiedTool

UNKNOWN_TYPE = "any"
OPEN_MAPPING_TYPE = "{ [key: string]: any }"
MAX_OBJECT_DEPTH = 2

_SCALAR_TYPES = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
    "null": "null",
}


def render_type(node: SchemaNode, depth: int = 0) -> str:
    """Render a schema node as a type expression.

    Objects nested deeper than ``MAX_OBJECT_DEPTH`` collapse to an open
    mapping.
    """
    if isinstance(node, EnumSchema):
        if not node.values:
            return "never"
        return " | ".join(_literal(value) for value in node.values)

    if isinstance(node, ArraySchema):
        if node.items is None:
            return f"{UNKNOWN_TYPE}[]"
        return f"({render_type(node.items, depth + 1)})[]"

    if isinstance(node, ObjectSchema):
        if not node.properties or depth > MAX_OBJECT_DEPTH:
            return OPEN_MAPPING_TYPE
        fields = "; ".join(
            f"{name}{'' if name in node.required else '?'}: {render_type(child, depth + 1)}"
            for name, child in node.properties.items()
        )
        return f"{{ {fields} }}"

    if isinstance(node, PrimitiveSchema):
        return _SCALAR_TYPES.get(node.type_name, UNKNOWN_TYPE)

    return UNKNOWN_TYPE


def render_schema(raw: Any) -> str:
    """Render a raw JSON schema value."""
    return render_type(parse_schema(raw))


def render_tool(tool: "QualifiedTool") -> str:
    """Render one tool as a function declaration inside its namespace."""
    comment = f"/* {_comment_text(tool.description)} */ " if tool.description else ""
    signature = f"function {tool.function}(args: {render_schema(tool.input_schema)}): Promise<any>;"
    return f"namespace {tool.namespace} {{ {comment}{signature} }}"


def render_interfaces(tools: Iterable["QualifiedTool"]) -> str:
    """Concatenate tool declarations into one interface document."""
    return "\n".join(render_tool(tool) for tool in tools)


def _literal(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return UNKNOWN_TYPE


def _comment_text(description: str) -> str:
    return description.replace("*/", "*\\/")
