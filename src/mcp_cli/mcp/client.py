"""
MCP Client

Owns at most one live session to an MCP server subprocess and exposes a
typed request/response surface (list_tools, call_tool) on top of
mcp.ClientSession. Every reply passes through the schema validators before
it reaches the caller, and every failure is surfaced as one of the
MCPClientError subclasses.
"""

import asyncio
import json
from contextlib import AsyncExitStack
from datetime import timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import anyio
from mcp import ClientSession
from mcp import types
from mcp.shared.exceptions import McpError

from ..core.config import Settings, get_settings
from ..core.logging import get_logger
from .exceptions import (
    MCPClientError, MCPConnectionError, MCPNotConnectedError,
    MCPProtocolError, MCPToolInvocationError
)
from .models import (
    ClientConfig, ConnectionState, ServerKind,
    ToolCallContent, ToolDescriptor, ToolInputSchema
)
from .schemas import WireContentItem, validate_tool_call, validate_tools_list
from .server_registry import ServerRegistry
from .transport_factory import MCPTransportFactory


logger = get_logger(__name__)

_TRANSPORT_LOSS_ERRORS = (
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
    anyio.EndOfStream,
    BrokenPipeError,
    ConnectionResetError,
)


def _is_transport_loss(exc: BaseException) -> bool:
    if isinstance(exc, _TRANSPORT_LOSS_ERRORS):
        return True
    return isinstance(exc, McpError) and exc.error.code == types.CONNECTION_CLOSED


class MCPClient:
    """
    Stateful client for one MCP server at a time.

    States move DISCONNECTED -> CONNECTING -> CONNECTED. A failed connect
    returns straight to DISCONNECTED; connecting while connected tears the
    old session down first. Calls are expected to be awaited one at a time.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        registry: Optional[ServerRegistry] = None,
        settings: Optional[Settings] = None,
        transport_factory: Any = MCPTransportFactory,
        session_factory: Callable[..., Any] = ClientSession
    ):
        self._settings = settings or get_settings()
        self._config = config or ClientConfig(
            name=self._settings.CLIENT_NAME,
            version=self._settings.CLIENT_VERSION
        )
        self._registry = registry or ServerRegistry(settings=self._settings)
        self._transport_factory = transport_factory
        self._session_factory = session_factory

        self._exit_stack: Optional[AsyncExitStack] = None
        self._session: Optional[Any] = None
        self._transport: Optional[tuple] = None
        self._server_kind = ServerKind.NONE
        self._state = ConnectionState.DISCONNECTED

    async def __aenter__(self) -> "MCPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def registry(self) -> ServerRegistry:
        return self._registry

    def get_config(self) -> ClientConfig:
        """Return a copy of the client configuration."""
        return self._config.model_copy(deep=True)

    def is_connected(self) -> bool:
        return self._session is not None and self._transport is not None

    def current_server_kind(self) -> ServerKind:
        return self._server_kind

    async def connect_to(
        self,
        server_kind: Union[ServerKind, str],
        path_hint: Optional[str] = None
    ) -> None:
        """
        Launch and handshake with a server of the given kind.

        Args:
            server_kind: Kind of server to launch
            path_hint: Root path for filesystem/git servers (defaults to cwd)

        Raises:
            ValueError: If the kind is 'none', unknown or disabled
            MCPConnectionError: If the process cannot start or the handshake fails
        """
        kind = ServerKind(server_kind)
        transport_config = self._registry.build_transport_config(kind, path_hint)

        await self.disconnect()

        self._state = ConnectionState.CONNECTING
        logger.info(f"Connecting to {kind.value} MCP server")

        exit_stack = AsyncExitStack()
        try:
            read_stream, write_stream = await exit_stack.enter_async_context(
                self._transport_factory.create_stdio_transport(transport_config)
            )
            session = await exit_stack.enter_async_context(
                self._session_factory(
                    read_stream,
                    write_stream,
                    read_timeout_seconds=self._request_timeout(),
                    client_info=types.Implementation(
                        name=self._config.name,
                        version=self._config.version
                    )
                )
            )
            init_result = await asyncio.wait_for(
                session.initialize(),
                timeout=self._settings.HANDSHAKE_TIMEOUT
            )
        except MCPConnectionError as e:
            await self._abort_connect(exit_stack)
            e.server_kind = kind.value
            raise
        except asyncio.TimeoutError as e:
            await self._abort_connect(exit_stack)
            raise MCPConnectionError(
                f"Handshake with {kind.value} MCP server timed out after "
                f"{self._settings.HANDSHAKE_TIMEOUT}s",
                server_kind=kind.value,
                command=transport_config.command
            ) from e
        except Exception as e:
            await self._abort_connect(exit_stack)
            raise MCPConnectionError(
                f"Failed to connect to {kind.value} MCP server: {str(e)}",
                server_kind=kind.value,
                command=transport_config.command,
                details={"args": transport_config.args, "error_type": type(e).__name__}
            ) from e
        except BaseException:
            await self._abort_connect(exit_stack)
            raise

        self._exit_stack = exit_stack
        self._transport = (read_stream, write_stream)
        self._session = session
        self._server_kind = kind
        self._state = ConnectionState.CONNECTED

        server_info = getattr(init_result, "serverInfo", None)
        logger.info(
            f"Connected to {kind.value} MCP server",
            server_name=getattr(server_info, "name", None),
            server_version=getattr(server_info, "version", None)
        )

    async def connect_to_default_server(self) -> None:
        """Connect to the weather server, the default kind."""
        try:
            await self.connect_to(ServerKind.WEATHER)
        except MCPConnectionError as e:
            logger.warning(f"Failed to connect to default server: {e}")
            raise

    async def list_tools(self) -> List[ToolDescriptor]:
        """
        List the tools exposed by the connected server.

        Raises:
            MCPNotConnectedError: If no session is active
            MCPProtocolError: If the reply fails or cannot be validated
            MCPConnectionError: If the transport was lost (client is now disconnected)
        """
        self._require_session("list_tools")

        try:
            payload = await self._request(
                types.ListToolsRequest(method="tools/list"),
                method="tools/list"
            )
        except MCPClientError:
            raise
        except Exception as e:
            raise MCPProtocolError(
                f"Failed to list tools: {str(e)}",
                method="tools/list"
            ) from e

        reply = validate_tools_list(payload)
        return [
            ToolDescriptor(
                name=tool.name,
                description=tool.description or "No description available",
                input_schema=(
                    ToolInputSchema.model_validate(tool.inputSchema.model_dump(exclude_none=True))
                    if tool.inputSchema is not None
                    else ToolInputSchema()
                )
            )
            for tool in reply.tools
        ]

    async def call_tool(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None
    ) -> List[ToolCallContent]:
        """
        Invoke a tool and return its content items in server order.

        A reply whose content is present but not a list is wrapped as a
        single text item instead of failing.

        Raises:
            MCPNotConnectedError: If no session is active
            MCPToolInvocationError: If the request fails or the tool reports an error
            MCPProtocolError: If the reply cannot be validated
            MCPConnectionError: If the transport was lost (client is now disconnected)
        """
        self._require_session("call_tool")
        arguments = dict(arguments or {})

        logger.debug(f"Calling tool {name}", arguments=arguments)

        try:
            payload = await self._request(
                types.CallToolRequest(
                    method="tools/call",
                    params=types.CallToolRequestParams(name=name, arguments=arguments)
                ),
                method="tools/call"
            )
        except MCPClientError:
            raise
        except Exception as e:
            raise MCPToolInvocationError(
                f"Failed to call tool '{name}': {str(e)}",
                tool_name=name,
                details={"arguments": arguments}
            ) from e

        reply = validate_tool_call(payload)

        if reply.isError:
            message = "; ".join(item.text for item in reply.content if item.text) or "unknown error"
            raise MCPToolInvocationError(
                f"Failed to call tool '{name}': {message}",
                tool_name=name,
                details={"arguments": arguments, "reply": payload}
            )

        if reply.degraded:
            logger.warning(f"Unexpected tool call response format from {name}", reply=payload)
            return [ToolCallContent(type="text", text=json.dumps(payload, default=str), data=payload)]

        return [self._to_content(item) for item in reply.content]

    async def test_connection(self) -> bool:
        """Return True if connected and the server answers tools/list."""
        if not self.is_connected():
            return False
        try:
            await self.list_tools()
            return True
        except MCPClientError as e:
            logger.warning(f"Connection test failed: {e}")
            return False

    async def disconnect(self) -> None:
        """
        Close the session and terminate the server process.

        Idempotent and never raises; teardown failures are logged.
        """
        exit_stack = self._exit_stack
        previous_kind = self._server_kind

        self._exit_stack = None
        self._session = None
        self._transport = None
        self._server_kind = ServerKind.NONE
        self._state = ConnectionState.DISCONNECTED

        if exit_stack is None:
            return

        try:
            await exit_stack.aclose()
        except Exception as e:
            logger.warning(f"Warning during disconnect: {e}")

        if previous_kind != ServerKind.NONE:
            logger.info(f"Disconnected from {previous_kind.value} MCP server")

    def _require_session(self, operation: str) -> None:
        if not self.is_connected():
            raise MCPNotConnectedError(operation)

    def _request_timeout(self) -> Optional[timedelta]:
        if self._settings.REQUEST_TIMEOUT is None:
            return None
        return timedelta(seconds=self._settings.REQUEST_TIMEOUT)

    async def _request(self, request: Any, method: str) -> Dict[str, Any]:
        """Send one request and return the decoded reply as a plain dict."""
        try:
            result = await self._session.send_request(
                types.ClientRequest(request),
                types.Result,
                request_read_timeout_seconds=self._request_timeout()
            )
        except Exception as e:
            if not _is_transport_loss(e):
                raise
            lost_kind = self._server_kind
            await self.disconnect()
            raise MCPConnectionError(
                f"Lost connection to {lost_kind.value} MCP server during {method}: {str(e) or type(e).__name__}",
                server_kind=lost_kind.value
            ) from e

        return result.model_dump(by_alias=True, mode="json", exclude_none=True)

    async def _abort_connect(self, exit_stack: AsyncExitStack) -> None:
        try:
            await exit_stack.aclose()
        except Exception as e:
            logger.warning(f"Error cleaning up failed connection: {e}")
        self._state = ConnectionState.DISCONNECTED

    @staticmethod
    def _to_content(item: WireContentItem) -> ToolCallContent:
        raw = item.model_dump(exclude_none=True)
        return ToolCallContent(
            type=item.type or "text",
            text=item.text if item.text else json.dumps(raw, default=str),
            data=item.data if item.data is not None else raw
        )
