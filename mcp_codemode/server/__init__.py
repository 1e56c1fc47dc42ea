"""Backend MCP server connections."""

from .connector import QUIET_ENV, BackendConnector

__all__ = ["BackendConnector", "QUIET_ENV"]
