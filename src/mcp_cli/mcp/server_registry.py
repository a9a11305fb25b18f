"""
MCP CLI Server Registry
Launch definitions for each server kind, with optional YAML overrides
"""
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import ServerKind, TransportConfig
from .transport_factory import build_environment
from ..core.config import Settings, get_settings
from ..core.logging import get_logger

logger = get_logger(__name__)


class ServerDefinition(BaseModel):
    """How to launch one kind of MCP server"""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    command: str = Field(..., min_length=1, description="Executable to launch")
    args: List[str] = Field(default_factory=list, description="Fixed arguments")
    env: Dict[str, str] = Field(default_factory=dict, description="Extra environment variables")
    accepts_path: bool = Field(default=False, description="Append a root path argument")
    description: str = Field(default="", description="Human-readable description")
    enabled: bool = Field(default=True, description="Whether this server may be launched")

    @field_validator('args')
    @classmethod
    def validate_args(cls, v):
        """Reject empty arguments"""
        if any(not arg for arg in v):
            raise ValueError("Server arguments must be non-empty strings")
        return v


def default_definitions(npx_command: str = "npx") -> Dict[ServerKind, ServerDefinition]:
    """Built-in launch definitions for the npm-packaged reference servers."""
    return {
        ServerKind.WEATHER: ServerDefinition(
            command=npx_command,
            args=["@modelcontextprotocol/server-weather"],
            description="Get weather information",
        ),
        ServerKind.FILESYSTEM: ServerDefinition(
            command=npx_command,
            args=["@modelcontextprotocol/server-filesystem"],
            accepts_path=True,
            description="File operations",
        ),
        ServerKind.GIT: ServerDefinition(
            command=npx_command,
            args=["@modelcontextprotocol/server-git"],
            accepts_path=True,
            description="Git repository operations",
        ),
        ServerKind.GITHUB: ServerDefinition(
            command=npx_command,
            args=["-y", "@modelcontextprotocol/server-github"],
            description="GitHub search and repository data",
        ),
    }


class ServerRegistry:
    """Registry of server launch definitions keyed by ServerKind"""

    def __init__(self, config_path: Optional[Path] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.config_path = config_path or Path(self.settings.SERVER_REGISTRY_FILE)
        self.servers: Dict[ServerKind, ServerDefinition] = default_definitions(self.settings.NPX_COMMAND)

    def load(self) -> None:
        """
        Overlay definitions from the YAML file, if it exists

        Raises:
            yaml.YAMLError: If YAML is malformed
        """
        if not self.config_path.exists():
            logger.debug(f"Server config file not found, using built-in servers: {self.config_path}")
            return

        logger.info(f"Loading server definitions from {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if not config_data or 'servers' not in config_data:
            logger.warning("No servers section found in configuration")
            return

        loaded_count = 0
        for kind_name, server_config in (config_data['servers'] or {}).items():
            try:
                kind = ServerKind(kind_name)
                if kind == ServerKind.NONE:
                    raise ValueError("'none' is not a launchable server kind")
                self.servers[kind] = ServerDefinition(**(server_config or {}))
                loaded_count += 1
            except Exception as e:
                logger.error(f"Failed to load server {kind_name}: {e}")
                continue

        logger.info(f"Loaded {loaded_count} server definitions")

    def get(self, kind: ServerKind) -> ServerDefinition:
        """Get the definition for a launchable server kind"""
        if kind == ServerKind.NONE:
            raise ValueError("Cannot launch server kind 'none'")
        definition = self.servers.get(kind)
        if definition is None:
            raise ValueError(f"No server definition registered for: {kind.value}")
        if not definition.enabled:
            raise ValueError(f"Server kind '{kind.value}' is disabled")
        return definition

    def list_servers(self) -> List[ServerKind]:
        """List enabled, launchable server kinds in declaration order"""
        return [kind for kind, definition in self.servers.items() if definition.enabled]

    def build_transport_config(
        self,
        kind: ServerKind,
        path_hint: Optional[str] = None,
        base_env: Optional[Dict[str, Optional[str]]] = None
    ) -> TransportConfig:
        """
        Build the launch configuration for ``kind``.

        Path-taking servers get one root-path argument, defaulting to the
        current working directory; other kinds ignore ``path_hint``.
        """
        definition = self.get(kind)

        args = list(definition.args)
        if definition.accepts_path:
            args.append(path_hint or os.getcwd())

        overrides: Dict[str, Optional[str]] = dict(definition.env)
        if kind == ServerKind.GITHUB and self.settings.GITHUB_PERSONAL_ACCESS_TOKEN:
            overrides.setdefault("GITHUB_PERSONAL_ACCESS_TOKEN", self.settings.GITHUB_PERSONAL_ACCESS_TOKEN)

        return TransportConfig(
            command=definition.command,
            args=args,
            env=build_environment(overrides, base=base_env),
        )
