"""
MCP Transport Factory

Spawns MCP server subprocesses over stdio and exposes their stdin/stdout
as the stream pair consumed by ClientSession.
"""

import os
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Mapping, Optional, Tuple

from mcp import StdioServerParameters
from mcp.client.stdio import stdio_client

from ..core.logging import get_logger
from .exceptions import MCPTransportError
from .models import TransportConfig


logger = get_logger(__name__)


def filter_environment(env: Mapping[str, Any]) -> Dict[str, str]:
    """Return a copy of ``env`` keeping only entries whose value is a string."""
    return {
        str(key): value
        for key, value in env.items()
        if key and isinstance(value, str)
    }


def build_environment(
    overrides: Optional[Mapping[str, Any]] = None,
    base: Optional[Mapping[str, Any]] = None
) -> Dict[str, str]:
    """Filter the inherited environment, then merge filtered overrides on top."""
    env = filter_environment(os.environ if base is None else base)
    if overrides:
        env.update(filter_environment(overrides))
    return env


class MCPTransportFactory:
    """Factory for stdio transport connections."""

    @staticmethod
    @asynccontextmanager
    async def create_stdio_transport(
        config: TransportConfig,
        cwd: Optional[str] = None
    ) -> AsyncGenerator[Tuple[Any, Any], None]:
        """
        Launch the configured server and yield its stream pair.

        Leaving the context closes the streams and terminates the child
        process.

        Args:
            config: Transport configuration (command, args, env)
            cwd: Working directory for the child process

        Yields:
            Tuple of (read_stream, write_stream)

        Raises:
            MCPTransportError: If the subprocess cannot be started
        """
        server_params = StdioServerParameters(
            command=config.command,
            args=list(config.args),
            env=filter_environment(config.env),
            cwd=cwd
        )

        logger.debug(f"Launching stdio server: {config.command} {' '.join(config.args)}")

        async with AsyncExitStack() as stack:
            try:
                read_stream, write_stream = await stack.enter_async_context(stdio_client(server_params))
            except Exception as e:
                raise MCPTransportError(
                    f"Failed to start MCP server process '{config.command}': {str(e)}",
                    command=config.command,
                    details={
                        "command": config.command,
                        "args": list(config.args),
                        "error_type": type(e).__name__
                    }
                ) from e

            yield read_stream, write_stream
