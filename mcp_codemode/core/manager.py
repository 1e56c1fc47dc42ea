"""Main codemode proxy application."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.models import InitializationOptions
from pydantic import AnyUrl

from ..config.manager import ConfigManager
from ..errors import CodemodeError
from ..routing.aggregator import CatalogAggregator
from ..routing.registry import Registry
from ..routing.router import InvocationRouter, ToolPayload
from ..server.connector import BackendConnector

logger = logging.getLogger(__name__)

INTERFACES_URI = "codemode://interfaces"


class CodemodeProxy:
    """Aggregates backend tools and serves them to one MCP client over stdio."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        connector: Optional[BackendConnector] = None,
    ):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_or_empty()

        # Core components
        self.connector = connector or BackendConnector(client_version=self.config.proxy.version)
        self.aggregator = CatalogAggregator(
            self.connector, discovery_timeout=self.config.proxy.discovery_timeout
        )
        self.registry = Registry()
        self.router = InvocationRouter(self.registry, self.connector)

        # MCP Server setup
        self.mcp_server = Server(self.config.proxy.name, version=self.config.proxy.version)
        self._setup_mcp_handlers()

        self.start_time: Optional[datetime] = None

    def _setup_logging(self):
        """Setup logging configuration."""
        level = getattr(logging, self.config.proxy.log_level.upper())
        logging.basicConfig(
            level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    def _setup_mcp_handlers(self):
        """Set up MCP server handlers that serve the aggregated registry."""

        @self.mcp_server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return self.list_tools()

        @self.mcp_server.call_tool()
        async def call_tool(name: str, arguments: dict) -> ToolPayload:
            try:
                return await self.router.invoke(name, arguments)
            except CodemodeError as e:
                logger.error(f"Tool call {name} failed: {e}")
                raise

        @self.mcp_server.list_resources()
        async def list_resources() -> list[types.Resource]:
            return [
                types.Resource(
                    uri=INTERFACES_URI,
                    name="interfaces",
                    description="Type signatures of every aggregated tool",
                    mimeType="text/plain",
                )
            ]

        @self.mcp_server.read_resource()
        async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
            if str(uri) != INTERFACES_URI:
                raise CodemodeError(f"Unknown resource: {uri}")
            return [ReadResourceContents(content=self.registry.interfaces, mime_type="text/plain")]

    def list_tools(self) -> List[types.Tool]:
        """Advertise the flat catalog under qualified names."""
        return [
            types.Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema or {"type": "object"},
            )
            for tool in self.registry.tools
        ]

    async def initialize(self) -> Registry:
        """Run one aggregation pass and publish its registry."""
        registry = await self.aggregator.aggregate(self.config.servers)
        for backend_id, error in self.config_manager.invalid_servers.items():
            registry.failures.setdefault(backend_id, error)

        self.registry = registry
        self.router = InvocationRouter(registry, self.connector)

        for backend_id, error in registry.failures.items():
            logger.warning(f"Backend {backend_id} unavailable: {error}")
        return registry

    async def execute_tool(
        self, backend_id: str, tool_name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> ToolPayload:
        """Call a backend tool by its backend identifier and raw name."""
        return await self.router.execute_tool(backend_id, tool_name, arguments)

    async def start(self) -> None:
        """Aggregate backends, then serve the registry over stdio."""
        self._setup_logging()
        self.start_time = datetime.now()
        logger.info("Starting codemode proxy")

        await self.initialize()

        from mcp.server.stdio import stdio_server

        async with stdio_server() as streams:
            init_options = InitializationOptions(
                server_name=self.config.proxy.name,
                server_version=self.config.proxy.version,
                capabilities=types.ServerCapabilities(
                    tools=types.ToolsCapability(listChanged=False),
                    resources=types.ResourcesCapability(listChanged=False),
                ),
            )
            logger.info(f"Codemode proxy '{self.config.proxy.name}' ready")
            await self.mcp_server.run(*streams, initialization_options=init_options)

    def get_status(self) -> Dict[str, Any]:
        """Get overall proxy status."""
        uptime = (datetime.now() - self.start_time).total_seconds() if self.start_time else 0

        return {
            "proxy": {
                "name": self.config.proxy.name,
                "version": self.config.proxy.version,
                "uptime_seconds": uptime,
            },
            "backends": {
                "configured": len(self.config.servers),
                "failed": dict(self.registry.failures),
            },
            "registry": self.registry.get_stats(),
        }
