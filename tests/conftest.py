"""Shared fixtures and fakes for codemode proxy tests."""

from contextlib import asynccontextmanager
from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

import mcp.types as types
import pytest

from mcp_codemode.config.models import BackendConfig
from mcp_codemode.server.connector import BackendConnector


def make_tool(name: str, description: Optional[str] = None, schema: Any = None) -> types.Tool:
    return types.Tool(
        name=name,
        description=description,
        inputSchema=schema if schema is not None else {"type": "object"},
    )


class FakeSession:
    """Stands in for ClientSession; records requests and closures."""

    def __init__(self, responses: List[Any], fail_initialize: Optional[Exception] = None):
        self.responses = list(responses)
        self.fail_initialize = fail_initialize
        self.requests: List[types.ClientRequest] = []
        self.client_info: Optional[types.Implementation] = None
        self.entered = 0
        self.closed = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed += 1
        return False

    async def initialize(self):
        if self.fail_initialize:
            raise self.fail_initialize

    async def send_request(self, request, result_type):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class FakeBackend:
    """Fake transport plus session factory for a BackendConnector."""

    def __init__(
        self,
        responses: Optional[List[Any]] = None,
        fail_initialize: Optional[Exception] = None,
        fail_transport: Optional[Exception] = None,
    ):
        self.responses = responses or []
        self.fail_initialize = fail_initialize
        self.fail_transport = fail_transport
        self.sessions: List[FakeSession] = []
        self.configs: List[BackendConfig] = []
        self.transports_opened = 0
        self.transports_closed = 0

    @asynccontextmanager
    async def transport(self, cfg: BackendConfig):
        self.configs.append(cfg)
        if self.fail_transport:
            raise self.fail_transport
        self.transports_opened += 1
        try:
            yield ("read-stream", "write-stream")
        finally:
            self.transports_closed += 1

    def session_factory(self, read_stream, write_stream, client_info=None):
        session = FakeSession(self.responses, self.fail_initialize)
        session.client_info = client_info
        self.sessions.append(session)
        return session

    def connector(self) -> BackendConnector:
        connector = BackendConnector(session_factory=self.session_factory)
        connector.transport_for = self.transport
        return connector


@pytest.fixture
def stdio_backend():
    """Backend configured with a local command"""
    return BackendConfig(identifier="files", command="npx", args=["-y", "server-files"])


@pytest.fixture
def http_backend():
    """Backend configured with a remote url"""
    return BackendConfig(identifier="github", url="https://example.com/mcp")


@pytest.fixture
def mock_connector():
    """Connector double with async list/call methods"""
    connector = MagicMock(spec=BackendConnector)
    connector.list_tools = AsyncMock()
    connector.call_tool = AsyncMock()
    return connector
