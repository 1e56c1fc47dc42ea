"""Invocation routing from qualified names back to backends."""

import logging
from typing import Any, Dict, List, Optional, Union

import mcp.types as types

from ..server.connector import BackendConnector
from .registry import Registry

logger = logging.getLogger(__name__)

ToolPayload = Union[Dict[str, Any], List[types.ContentBlock]]


class InvocationRouter:
    """Resolves qualified tool names and forwards calls to their backend.

    Each call opens its own session through the connector; connector errors
    propagate unchanged so callers can tell connection failures from
    backend failures.
    """

    def __init__(self, registry: Registry, connector: BackendConnector):
        self.registry = registry
        self.connector = connector

    async def invoke(
        self, qualified_name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> ToolPayload:
        """Call a tool by its qualified name."""
        descriptor = self.registry.resolve(qualified_name)
        return await self.execute_tool(descriptor.backend_id, descriptor.tool_name, arguments)

    async def execute_tool(
        self, backend_id: str, tool_name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> ToolPayload:
        """Call a tool by backend identifier and backend-local name."""
        cfg = self.registry.lookup(backend_id, tool_name)

        logger.debug(f"Routing tool call {tool_name} to {backend_id}")
        result = await self.connector.call_tool(cfg, backend_id, tool_name, arguments or {})

        if result.structuredContent is not None:
            return result.structuredContent
        return result.content
