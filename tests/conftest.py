"""Shared fixtures: an in-memory MCP server double wired into MCPClient."""

import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from mcp import types

from mcp_cli.core.config import Settings
from mcp_cli.core.logging import setup_logging
from mcp_cli.mcp import MCPClient, MCPTransportError, ServerRegistry


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    setup_logging(Settings(LOG_LEVEL="WARNING"))


class FakeSession:
    """Stands in for mcp.ClientSession; replies come from the owning FakeServer."""

    def __init__(self, server: "FakeServer", read_stream, write_stream, **kwargs):
        self.server = server
        self.streams = (read_stream, write_stream)
        self.kwargs = kwargs
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True
        if self.server.close_error is not None:
            raise self.server.close_error
        return False

    async def initialize(self):
        if self.server.initialize_error is not None:
            raise self.server.initialize_error
        if self.server.initialize_delay:
            await asyncio.sleep(self.server.initialize_delay)
        return SimpleNamespace(serverInfo=SimpleNamespace(name="fake-server", version="0.1.0"))

    async def send_request(self, request, result_type, request_read_timeout_seconds=None):
        method = request.root.method
        self.server.requests.append(request.root)
        reply = self.server.replies.get(method, {})
        if isinstance(reply, BaseException):
            raise reply
        return types.Result.model_validate(reply)


class FakeServer:
    """Scriptable server double that doubles as transport and session factory."""

    def __init__(self):
        self.replies: Dict[str, Any] = {}
        self.requests: List[Any] = []
        self.launches: List[Any] = []
        self.sessions: List[FakeSession] = []
        self.open_transports = 0
        self.spawn_error: Optional[BaseException] = None
        self.initialize_error: Optional[BaseException] = None
        self.initialize_delay: float = 0.0
        self.close_error: Optional[BaseException] = None

    @asynccontextmanager
    async def create_stdio_transport(self, config, cwd=None):
        self.launches.append(config)
        if self.spawn_error is not None:
            raise self.spawn_error
        self.open_transports += 1
        try:
            yield "read-stream", "write-stream"
        finally:
            self.open_transports -= 1

    def session_factory(self, read_stream, write_stream, **kwargs):
        session = FakeSession(self, read_stream, write_stream, **kwargs)
        self.sessions.append(session)
        return session

    @property
    def last_session(self) -> FakeSession:
        return self.sessions[-1]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        SERVER_REGISTRY_FILE=str(tmp_path / "servers.yaml"),
        DATA_DIR=str(tmp_path / "data"),
        HANDSHAKE_TIMEOUT=5.0,
        GITHUB_PERSONAL_ACCESS_TOKEN=None,
    )


@pytest.fixture
def fake_server():
    server = FakeServer()
    server.replies["tools/list"] = {
        "tools": [
            {
                "name": "get_weather",
                "description": "Current weather for a location",
                "inputSchema": {
                    "type": "object",
                    "properties": {"location": {"type": "string"}},
                    "required": ["location"],
                },
            },
        ]
    }
    server.replies["tools/call"] = {
        "content": [{"type": "text", "text": "Sunny, 72°F"}],
        "isError": False,
    }
    return server


@pytest.fixture
def client(fake_server, settings):
    registry = ServerRegistry(settings=settings)
    return MCPClient(
        registry=registry,
        settings=settings,
        transport_factory=fake_server,
        session_factory=fake_server.session_factory,
    )


@pytest.fixture
def spawn_failure():
    return MCPTransportError("Failed to start MCP server process 'npx': not found", command="npx")
