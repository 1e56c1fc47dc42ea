"""Catalog aggregation across backend MCP servers."""

import asyncio
import logging
from typing import List, Mapping, Optional

import mcp.types as types

from ..access.permission_engine import PermissionEngine
from ..config.models import BackendConfig
from ..errors import BackendConnectionError
from ..schema.signature import render_interfaces
from ..server.connector import BackendConnector
from .naming import qualify, split_qualified
from .registry import QualifiedTool, Registry

logger = logging.getLogger(__name__)


class CatalogAggregator:
    """Builds a registry from the tool lists of every configured backend."""

    def __init__(
        self,
        connector: BackendConnector,
        permission_engine: Optional[PermissionEngine] = None,
        discovery_timeout: Optional[float] = None,
    ):
        self.connector = connector
        self.permission_engine = permission_engine or PermissionEngine()
        self.discovery_timeout = discovery_timeout

    async def aggregate(self, backends: Mapping[str, BackendConfig]) -> Registry:
        """Aggregate tools from all backends into a fresh registry.

        Backends are queried concurrently and every query is awaited. A
        backend that fails contributes no tools; its error is recorded in
        ``Registry.failures`` and never raised.
        """
        registry = Registry()

        if not backends:
            logger.warning("No backends configured for tool aggregation")
            return registry

        # List tools from all backends concurrently
        tasks = []
        for backend_id, cfg in backends.items():
            task = asyncio.create_task(
                self._get_backend_tools(backend_id, cfg),
                name=f"list_tools_{backend_id}",
            )
            tasks.append(task)

        results = await asyncio.gather(*tasks, return_exceptions=True)

        # Merge in configuration order so collisions resolve deterministically
        for (backend_id, cfg), result in zip(backends.items(), results):
            if isinstance(result, BaseException):
                logger.warning(f"Failed to get tools from {backend_id}: {result}")
                registry.failures[backend_id] = str(result) or type(result).__name__
                continue

            for tool in self.permission_engine.filter_tools(cfg, result):
                self._register(registry, backend_id, cfg, tool)

        registry.interfaces = render_interfaces(registry.tools)

        logger.info(
            f"Aggregated {len(registry.tools)} tools from "
            f"{len(backends) - len(registry.failures)}/{len(backends)} backends"
        )
        return registry

    async def _get_backend_tools(self, backend_id: str, cfg: BackendConfig) -> List[types.Tool]:
        """Get tools from a specific backend, bounded by the discovery timeout if set."""
        if self.discovery_timeout is None:
            return await self.connector.list_tools(cfg, backend_id)

        try:
            return await asyncio.wait_for(
                self.connector.list_tools(cfg, backend_id), timeout=self.discovery_timeout
            )
        except asyncio.TimeoutError:
            raise BackendConnectionError(
                backend_id, f"no tool list within {self.discovery_timeout}s"
            ) from None

    def _register(
        self, registry: Registry, backend_id: str, cfg: BackendConfig, tool: types.Tool
    ) -> None:
        entry = QualifiedTool(
            name=qualify(backend_id, tool.name),
            backend_id=backend_id,
            raw_name=tool.name,
            description=tool.description,
            input_schema=tool.inputSchema,
        )
        namespace, function = split_qualified(entry.name)
        existing = registry.dispatch.get(namespace, {}).get(function)

        if existing is None:
            registry.tools.append(entry)
        elif existing.tool_name == tool.name:
            logger.warning(
                f"Tool {entry.name} from {backend_id} already registered by "
                f"{existing.backend_id}, keeping the first"
            )
            return
        else:
            logger.warning(
                f"Tool {tool.name} from {backend_id} replaces {existing.tool_name} "
                f"from {existing.backend_id} under {entry.name}"
            )
            registry.backends.pop((existing.backend_id, existing.tool_name), None)
            registry.tools = [entry if t.name == entry.name else t for t in registry.tools]

        registry.dispatch.setdefault(namespace, {})[function] = entry.descriptor
        registry.backends[(backend_id, tool.name)] = cfg
