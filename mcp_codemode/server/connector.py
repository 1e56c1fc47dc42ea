"""One-shot connections to backend MCP servers."""

import logging
from contextlib import AsyncExitStack
from typing import Any, AsyncContextManager, Awaitable, Callable, Dict, List, Optional, TypeVar

import httpx
import mcp.types as types
from mcp.client.session import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client
from mcp.client.streamable_http import streamablehttp_client
from mcp.shared.exceptions import McpError

from ..config.models import BackendConfig
from ..errors import BackendConnectionError, BackendError, CodemodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Keeps node-based backends from writing deprecation warnings to stderr
QUIET_ENV = {"NODE_NO_WARNINGS": "1"}

SessionAction = Callable[[ClientSession], Awaitable[T]]


class BackendConnector:
    """Opens a session to a backend, runs one action, and closes it again.

    Nothing is kept between calls: every invocation builds a fresh transport
    and session, and both are released on every exit path.
    """

    def __init__(
        self,
        client_version: str = "1.0.0",
        session_factory: Callable[..., ClientSession] = ClientSession,
    ):
        self.client_version = client_version
        self.session_factory = session_factory

    def transport_for(self, cfg: BackendConfig) -> AsyncContextManager[tuple]:
        """Select the transport from the shape of an expanded configuration."""
        if cfg.url:
            return streamablehttp_client(cfg.url, headers=cfg.headers or None)

        server_params = StdioServerParameters(
            command=cfg.command,
            args=list(cfg.args),
            env={**(cfg.env or {}), **QUIET_ENV},
        )
        return stdio_client(server_params)

    async def invoke(
        self, cfg: BackendConfig, purpose_label: str, action: SessionAction
    ) -> T:
        """Run ``action`` against a freshly opened session named ``purpose_label``."""
        expanded = cfg.expanded()
        logger.debug(f"Opening {expanded.transport} session to {purpose_label}")

        action_error: Optional[Exception] = None
        try:
            async with AsyncExitStack() as stack:
                session = await self._connect(stack, expanded, purpose_label)
                try:
                    return await self._run(session, purpose_label, action)
                except Exception as e:
                    action_error = e
                    raise
        except CodemodeError:
            raise
        except ExceptionGroup as group:
            raise _unwrap_group(group, purpose_label, action_error) from group
        except Exception as e:
            if e is action_error:
                raise
            # Raised while tearing the transport down
            raise BackendConnectionError(purpose_label, _describe(e)) from e

    async def _connect(
        self, stack: AsyncExitStack, cfg: BackendConfig, purpose_label: str
    ) -> ClientSession:
        try:
            streams = await stack.enter_async_context(self.transport_for(cfg))
            read_stream, write_stream = streams[0], streams[1]
            session = await stack.enter_async_context(
                self.session_factory(
                    read_stream,
                    write_stream,
                    client_info=types.Implementation(
                        name=purpose_label, version=self.client_version
                    ),
                )
            )
            await session.initialize()
        except Exception as e:
            raise BackendConnectionError(purpose_label, _describe(e)) from e
        return session

    async def _run(
        self, session: ClientSession, purpose_label: str, action: SessionAction
    ) -> T:
        try:
            return await action(session)
        except CodemodeError:
            raise
        except McpError as e:
            raise BackendError(purpose_label, e.error.message) from e
        except (httpx.HTTPError, OSError) as e:
            raise BackendConnectionError(purpose_label, _describe(e)) from e

    async def list_tools(self, cfg: BackendConfig, purpose_label: str) -> List[types.Tool]:
        """List every tool the backend offers, following pagination cursors."""

        async def _list(session: ClientSession) -> List[types.Tool]:
            tools: List[types.Tool] = []
            cursor: Optional[str] = None
            while True:
                request = types.ListToolsRequest(
                    method="tools/list",
                    params=types.PaginatedRequestParams(cursor=cursor) if cursor else None,
                )
                result = await session.send_request(
                    types.ClientRequest(request), types.ListToolsResult
                )
                tools.extend(result.tools)
                cursor = result.nextCursor
                if not cursor:
                    return tools

        return await self.invoke(cfg, purpose_label, _list)

    async def call_tool(
        self,
        cfg: BackendConfig,
        purpose_label: str,
        tool_name: str,
        arguments: Optional[Dict[str, Any]],
    ) -> types.CallToolResult:
        """Call one tool; a result flagged ``isError`` raises BackendError."""

        async def _call(session: ClientSession) -> types.CallToolResult:
            request = types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(name=tool_name, arguments=arguments),
            )
            result = await session.send_request(
                types.ClientRequest(request), types.CallToolResult
            )
            if result.isError:
                raise BackendError(purpose_label, _error_text(result))
            return result

        return await self.invoke(cfg, purpose_label, _call)


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _error_text(result: types.CallToolResult) -> str:
    texts = [block.text for block in result.content if isinstance(block, types.TextContent)]
    return "\n".join(texts) or "tool reported an error"


def _unwrap_group(
    group: BaseExceptionGroup, purpose_label: str, action_error: Optional[Exception]
) -> Exception:
    """Find the error buried in a task group's exception group.

    Proxy errors win, then an unexpected error raised by the action itself;
    anything else is treated as a broken connection.
    """
    matched, _ = group.split(CodemodeError)
    if matched is None and action_error is not None:
        matched, _ = group.split(lambda error: error is action_error)
    if matched is not None:
        return _first_leaf(matched)
    return BackendConnectionError(purpose_label, _describe(group.exceptions[0]))


def _first_leaf(group: BaseExceptionGroup) -> BaseException:
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error
