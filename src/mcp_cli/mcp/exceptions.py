"""
MCP Client Exception Classes

Typed failures raised by the MCP client so callers can tell "could not
connect" apart from "connected but the server misbehaved" without
matching on message text.
"""

from typing import Optional, Dict, Any


class MCPClientError(Exception):
    """Base exception for all MCP client errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MCPConnectionError(MCPClientError):
    """Raised when a server subprocess cannot be started, the handshake fails,
    or the transport is lost mid-session."""

    def __init__(
        self,
        message: str,
        server_kind: Optional[str] = None,
        command: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.server_kind = server_kind
        self.command = command


class MCPTransportError(MCPConnectionError):
    """Raised when the stdio transport itself cannot be created."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, command=command, details=details)


class MCPNotConnectedError(MCPClientError):
    """Raised when an operation needs a session and none is active."""

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Not connected to MCP server (operation: {operation})", details)
        self.operation = operation


class MCPProtocolError(MCPClientError):
    """Raised when a reply cannot be decoded or fails validation."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.method = method


class ReplyValidationError(MCPProtocolError):
    """A reply violated its expected shape at ``path``."""

    def __init__(self, path: str, expected: str, received: str):
        location = path or "<reply>"
        super().__init__(
            f"Invalid reply at '{location}': expected {expected}, got {received}",
            details={"path": location, "expected": expected, "received": received}
        )
        self.path = location
        self.expected = expected
        self.received = received


class MCPToolInvocationError(MCPClientError):
    """Raised when a tools/call request fails at the protocol layer."""

    def __init__(
        self,
        message: str,
        tool_name: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.tool_name = tool_name
