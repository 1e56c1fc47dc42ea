"""Per-backend allow/deny filtering of tools."""

import logging
from typing import List

import mcp.types as types

from ..config.models import BackendConfig

logger = logging.getLogger(__name__)


class PermissionEngine:
    """Decides which of a backend's tools are exposed through the proxy."""

    def check_tool_access(self, backend: BackendConfig, tool_name: str) -> bool:
        """Check whether a raw tool name passes the backend's filter.

        An allow list, when present, alone decides; otherwise the deny list
        excludes; with neither, every tool is admitted.
        """
        if backend.allow is not None:
            return tool_name in backend.allow

        if backend.deny:
            return tool_name not in backend.deny

        return True

    def filter_tools(self, backend: BackendConfig, tools: List[types.Tool]) -> List[types.Tool]:
        """Keep the tools admitted by the backend's filter, preserving order."""
        admitted = [tool for tool in tools if self.check_tool_access(backend, tool.name)]

        if len(admitted) != len(tools):
            logger.debug(
                f"Filtered {len(tools) - len(admitted)} of {len(tools)} tools from {backend.identifier}"
            )
        return admitted
