"""Tests for server launch definitions and YAML overrides."""

import textwrap

import pytest
import yaml

from mcp_cli.mcp import ServerDefinition, ServerKind, ServerRegistry


@pytest.fixture
def registry_file(tmp_path):
    return tmp_path / "servers.yaml"


def write_yaml(path, text):
    path.write_text(textwrap.dedent(text), encoding="utf-8")


class TestServerRegistry:
    """Server registry behavior."""

    def test_builtin_definitions(self, settings, registry_file):
        registry = ServerRegistry(registry_file, settings)
        registry.load()

        assert registry.list_servers() == [
            ServerKind.WEATHER, ServerKind.FILESYSTEM, ServerKind.GIT, ServerKind.GITHUB
        ]
        assert registry.get(ServerKind.GITHUB).args == ["-y", "@modelcontextprotocol/server-github"]

    def test_none_kind_is_not_launchable(self, settings, registry_file):
        registry = ServerRegistry(registry_file, settings)
        with pytest.raises(ValueError):
            registry.get(ServerKind.NONE)

    def test_yaml_override(self, settings, registry_file):
        write_yaml(registry_file, """
            servers:
              weather:
                command: python
                args: ["-m", "weather_server"]
                env:
                  WEATHER_UNITS: metric
              git:
                command: npx
                enabled: false
        """)
        registry = ServerRegistry(registry_file, settings)
        registry.load()

        config = registry.build_transport_config(ServerKind.WEATHER, base_env={"PATH": "/usr/bin"})
        assert config.command == "python"
        assert config.args == ["-m", "weather_server"]
        assert config.env == {"PATH": "/usr/bin", "WEATHER_UNITS": "metric"}

        assert ServerKind.GIT not in registry.list_servers()
        with pytest.raises(ValueError, match="disabled"):
            registry.get(ServerKind.GIT)

    def test_invalid_entries_are_skipped(self, settings, registry_file):
        write_yaml(registry_file, """
            servers:
              teleporter:
                command: beam
              weather:
                args: ["missing-command"]
              filesystem:
                command: fs-server
                accepts_path: true
        """)
        registry = ServerRegistry(registry_file, settings)
        registry.load()

        assert registry.get(ServerKind.WEATHER).command == "npx"
        assert registry.get(ServerKind.FILESYSTEM).command == "fs-server"

    def test_malformed_yaml_raises(self, settings, registry_file):
        registry_file.write_text("servers: [unclosed", encoding="utf-8")
        registry = ServerRegistry(registry_file, settings)

        with pytest.raises(yaml.YAMLError):
            registry.load()

    def test_path_argument(self, settings, registry_file):
        registry = ServerRegistry(registry_file, settings)

        config = registry.build_transport_config(ServerKind.GIT, "/work/repo", base_env={})
        assert config.args == ["@modelcontextprotocol/server-git", "/work/repo"]

    def test_github_token_forwarded(self, settings, registry_file):
        settings.GITHUB_PERSONAL_ACCESS_TOKEN = "ghp_example"
        registry = ServerRegistry(registry_file, settings)

        config = registry.build_transport_config(ServerKind.GITHUB, base_env={})
        assert config.env == {"GITHUB_PERSONAL_ACCESS_TOKEN": "ghp_example"}

        weather = registry.build_transport_config(ServerKind.WEATHER, base_env={})
        assert "GITHUB_PERSONAL_ACCESS_TOKEN" not in weather.env

    def test_inherited_environment_is_filtered(self, settings, registry_file):
        registry = ServerRegistry(registry_file, settings)

        config = registry.build_transport_config(
            ServerKind.WEATHER, base_env={"HOME": "/home/me", "UNSET": None}
        )
        assert config.env == {"HOME": "/home/me"}

    def test_custom_npx_command(self, settings, registry_file):
        settings.NPX_COMMAND = "/opt/node/bin/npx"
        registry = ServerRegistry(registry_file, settings)

        assert registry.get(ServerKind.WEATHER).command == "/opt/node/bin/npx"


class TestServerDefinition:
    """Launch definition validation."""

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValueError):
            ServerDefinition(command="npx", transport="http")

    def test_rejects_empty_arguments(self):
        with pytest.raises(ValueError):
            ServerDefinition(command="npx", args=["server", ""])
