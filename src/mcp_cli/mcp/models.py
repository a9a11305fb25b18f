"""
Data model shared by the MCP client, the server registry and tool adapters.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ServerKind(str, Enum):
    """Flavor of MCP server subprocess the client is attached to."""
    WEATHER = "weather"
    FILESYSTEM = "filesystem"
    GIT = "git"
    GITHUB = "github"
    NONE = "none"


class ConnectionState(str, Enum):
    """Lifecycle state of an MCPClient."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ClientConfig(BaseModel):
    """Identity and capabilities advertised during the initialize handshake."""

    model_config = ConfigDict(frozen=True)

    name: str = "mcp-cli-client"
    version: str = "1.0.0"
    capabilities: Dict[str, Any] = Field(default_factory=lambda: {"tools": {}})


@dataclass
class TransportConfig:
    """Launch configuration for one server subprocess. Built per connect call."""
    command: str
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)


class ToolInputSchema(BaseModel):
    """JSON schema describing a tool's arguments."""

    model_config = ConfigDict(extra="allow")

    type: str = "object"
    properties: Dict[str, Any] = Field(default_factory=dict)
    required: Optional[List[str]] = None


class ToolDescriptor(BaseModel):
    """A tool as handed to callers; every field is always populated."""
    name: str
    description: str = "No description available"
    input_schema: ToolInputSchema = Field(default_factory=ToolInputSchema)

    @property
    def parameter_names(self) -> List[str]:
        return list(self.input_schema.properties.keys())


class ToolCallContent(BaseModel):
    """One content item of a tool call result."""
    type: str = "text"
    text: Optional[str] = None
    data: Any = None
