"""
MCP Client Integration Module

Stdio-based Model Context Protocol client used by the CLI commands and
tool adapters. The wire protocol is handled by the mcp SDK; this package
adds lifecycle management, reply validation and typed errors on top.
"""

from .client import MCPClient
from .models import (
    ClientConfig, ConnectionState, ServerKind, TransportConfig,
    ToolCallContent, ToolDescriptor, ToolInputSchema
)
from .server_registry import ServerDefinition, ServerRegistry
from .transport_factory import MCPTransportFactory, build_environment, filter_environment
from .exceptions import (
    MCPClientError, MCPConnectionError, MCPTransportError,
    MCPNotConnectedError, MCPProtocolError, ReplyValidationError,
    MCPToolInvocationError
)

__all__ = [
    "MCPClient",
    "ClientConfig",
    "ConnectionState",
    "ServerKind",
    "TransportConfig",
    "ToolCallContent",
    "ToolDescriptor",
    "ToolInputSchema",
    "ServerDefinition",
    "ServerRegistry",
    "MCPTransportFactory",
    "build_environment",
    "filter_environment",
    "MCPClientError",
    "MCPConnectionError",
    "MCPTransportError",
    "MCPNotConnectedError",
    "MCPProtocolError",
    "ReplyValidationError",
    "MCPToolInvocationError",
]
