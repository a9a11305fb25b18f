"""Tests for the command-line interface."""

import argparse
import json

import pytest

from mcp_cli import main as cli
from mcp_cli.mcp import MCPConnectionError, ServerKind


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


class TestMain:
    """End-to-end runs of commands that need no server."""

    def test_no_arguments_prints_banner(self, capsys):
        assert cli.main([]) == 0
        out = capsys.readouterr().out
        assert "Quick start" in out
        assert "usage: mcp-cli" in out

    def test_calc(self, capsys):
        assert cli.main(["calc", "2 + 3"]) == 0
        assert "Result: 5" in capsys.readouterr().out

    def test_calc_advanced(self, capsys):
        assert cli.main(["calc", "sqrt(9)", "--advanced"]) == 0
        out = capsys.readouterr().out
        assert "Result: 3.0" in out
        assert "Processed: math.sqrt(9)" in out

    def test_calc_error_exit_status(self, capsys):
        assert cli.main(["calc", "1 / 0"]) == 1
        captured = capsys.readouterr()
        assert "Error: Calculation error: Division by zero" in captured.err
        assert "Tip:" in captured.out

    def test_todo_round_trip(self, tmp_path, capsys):
        assert cli.main(["todo", "--add", "Buy milk"]) == 0
        assert cli.main(["todo", "--list"]) == 0
        out = capsys.readouterr().out
        assert 'Added task: "Buy milk"' in out
        assert "⏳" in out

        tasks = json.loads((tmp_path / "data" / "todos.json").read_text(encoding="utf-8"))
        assert cli.main(["todo", "--done", str(tasks[0]["id"])]) == 0
        assert cli.main(["todo", "--stats"]) == 0
        out = capsys.readouterr().out
        assert "Completion rate: 100.0%" in out

    def test_todo_unknown_id(self, capsys):
        assert cli.main(["todo", "--done", "42"]) == 1
        assert "Task with ID 42 not found" in capsys.readouterr().err

    def test_weather_simulation(self, capsys):
        assert cli.main(["weather", "--city", "Lisbon"]) == 0
        assert "Weather in Lisbon:" in capsys.readouterr().out

    def test_malformed_registry_file(self, tmp_path, capsys):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "servers.yaml").write_text("servers: [", encoding="utf-8")

        assert cli.main(["calc", "1 + 1"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_unknown_server_kind_rejected(self):
        with pytest.raises(SystemExit):
            cli.main(["mcp", "--server", "none"])

    def test_mcp_args_must_be_object(self, capsys):
        assert cli.main(["mcp", "--test", "get_weather", "--args", "[1, 2]"]) == 1
        assert "Error: --args must be a JSON object" in capsys.readouterr().err


class TestHandlers:
    """Command handlers driven with an in-memory server."""

    async def test_mcp_list_and_test(self, client, settings, capsys):
        args = argparse.Namespace(server="weather", path=None, list=True, test="get_weather", args=None)

        assert await cli.run_mcp(args, client, settings) == 0

        out = capsys.readouterr().out
        assert "Connected to weather MCP server" in out
        assert "1. get_weather: Current weather for a location" in out
        assert "Parameters: location" in out
        assert "1. Sunny, 72°F" in out

    async def test_mcp_test_with_explicit_args(self, client, settings, fake_server):
        args = argparse.Namespace(
            server="filesystem", path="/srv", list=False, test="read_file", args='{"path": "notes.txt"}'
        )

        assert await cli.run_mcp(args, client, settings) == 0
        assert fake_server.launches[0].args[-1] == "/srv"
        assert fake_server.requests[-1].params.arguments == {"path": "notes.txt"}

    async def test_mcp_rejects_non_object_args_before_connecting(self, client, settings, fake_server):
        args = argparse.Namespace(server="weather", path=None, list=False, test="get_weather", args="[1, 2]")

        with pytest.raises(ValueError, match="--args must be a JSON object"):
            await cli.run_mcp(args, client, settings)

        assert fake_server.launches == []
        assert client.is_connected() is False

    async def test_mcp_tool_failure(self, client, settings, fake_server, capsys):
        fake_server.replies["tools/call"] = {"content": [{"type": "text", "text": "Unknown tool"}], "isError": True}
        args = argparse.Namespace(server="weather", path=None, list=False, test="nope", args=None)

        assert await cli.run_mcp(args, client, settings) == 1
        assert "Tool test failed" in capsys.readouterr().out

    async def test_mcp_connection_failure_prints_tips(self, client, settings, fake_server, spawn_failure, capsys):
        fake_server.spawn_error = spawn_failure
        args = argparse.Namespace(server="weather", path=None, list=True, test=None, args=None)

        with pytest.raises(MCPConnectionError):
            await cli.run_mcp(args, client, settings)
        assert "Troubleshooting tips" in capsys.readouterr().out

    async def test_weather_real_falls_back(self, client, settings, fake_server, spawn_failure, capsys):
        fake_server.spawn_error = spawn_failure
        args = argparse.Namespace(city="Rome", real=True, test=False)

        assert await cli.run_weather(args, client, settings) == 0

        out = capsys.readouterr().out
        assert "Falling back to simulation" in out
        assert "Weather in Rome:" in out

    async def test_weather_real(self, client, settings, capsys):
        args = argparse.Namespace(city="Rome", real=True, test=False)

        assert await cli.run_weather(args, client, settings) == 0
        assert "Sunny, 72°F" in capsys.readouterr().out
        assert client.current_server_kind() == ServerKind.WEATHER

    async def test_servers(self, client, settings, capsys):
        assert await cli.run_servers(argparse.Namespace(), client, settings) == 0

        out = capsys.readouterr().out
        assert out.count("1 tools available") == 3
        assert client.is_connected() is False

    async def test_github_tools(self, client, settings, capsys):
        args = cli.build_parser().parse_args(["github", "tools"])

        assert await cli.run_github(args, client, settings) == 0
        assert "Available GitHub MCP Tools (1 total)" in capsys.readouterr().out
        assert client.current_server_kind() == ServerKind.GITHUB

    async def test_github_search(self, client, settings, fake_server, capsys):
        fake_server.replies["tools/call"] = {
            "content": [{"type": "text", "text": json.dumps({"items": [
                {"name": "sdk", "owner": {"login": "modelcontextprotocol"}, "stargazers_count": 9}
            ]})}]
        }
        args = cli.build_parser().parse_args(["github", "search", "--repos", "mcp", "--limit", "1"])

        assert await cli.run_github(args, client, settings) == 0
        out = capsys.readouterr().out
        assert "1. modelcontextprotocol/sdk" in out
        assert "⭐ 9 stars" in out


class TestParser:
    """Argument parsing."""

    def test_defaults(self):
        parser = cli.build_parser()

        weather = parser.parse_args(["weather"])
        assert weather.city == "San Francisco"
        assert weather.real is False

        mcp = parser.parse_args(["mcp"])
        assert mcp.server == "weather"

        experiments = parser.parse_args(["github", "experiments"])
        assert experiments.topic == "typescript"
        assert experiments.user is None

    def test_sample_arguments(self):
        assert cli._sample_arguments("get_weather") == {"location": "San Francisco"}
        assert cli._sample_arguments("read_file") == {"path": "."}
        assert cli._sample_arguments("echo") == {}
