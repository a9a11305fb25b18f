"""Command-line entry point for the MCP CLI."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from mcp_cli import __version__
from mcp_cli.core.config import Settings, get_settings
from mcp_cli.core.logging import get_logger, setup_logging
from mcp_cli.mcp import (
    MCPClient, MCPClientError, MCPConnectionError, ServerKind, ServerRegistry, ToolDescriptor
)
from mcp_cli.tools import (
    CalculationError, CalculatorTool, GitHubTool, TodoError, TodoTool, WeatherTool
)

logger = get_logger(__name__)

CONNECTION_TIPS = [
    "Make sure you have internet connection",
    "Try: npm install @modelcontextprotocol/server-weather@latest",
    "Use --server filesystem for local testing",
    "Check if the MCP server package is available",
]

GITHUB_TIPS = [
    "Set GITHUB_PERSONAL_ACCESS_TOKEN environment variable",
    "Get a token from: https://github.com/settings/tokens",
    'Grant "repo" scope for full access',
]


def _print_tips(title: str, tips: List[str]) -> None:
    print(f"\n💡 {title}:")
    for tip in tips:
        print(f"   • {tip}")


def _print_tools(tools: List[ToolDescriptor]) -> None:
    for index, tool in enumerate(tools, 1):
        print(f"  {index}. {tool.name}: {tool.description}")
        if tool.parameter_names:
            print(f"     Parameters: {', '.join(tool.parameter_names)}")


def _sample_arguments(tool_name: str) -> Dict[str, Any]:
    if "weather" in tool_name:
        return {"location": "San Francisco"}
    if "file" in tool_name:
        return {"path": "."}
    return {}


# -- weather / todo / calc ---------------------------------------------------

async def run_weather(args: argparse.Namespace, client: MCPClient, settings: Settings) -> int:
    weather = WeatherTool()
    print(f"🌤️  Getting weather for {args.city}...")

    if args.test:
        print("🧪 Testing MCP weather servers...")
        for line in await weather.test_mcp_weather_servers(client, args.city):
            print(line)
        return 0

    if args.real:
        print("📡 Connecting to real MCP weather server...")
        try:
            await client.connect_to(ServerKind.WEATHER)
            print(await weather.get_weather_from_mcp(client, args.city))
            return 0
        except MCPConnectionError as e:
            print(f"⚠️ Real MCP server failed: {e}")
            print("Falling back to simulation...")

    print(weather.get_weather(args.city))
    return 0


async def run_todo(args: argparse.Namespace, client: MCPClient, settings: Settings) -> int:
    todo = TodoTool(settings.DATA_DIR)

    if args.add:
        print(f"✅ {todo.add_task(args.add)}")
    elif args.list:
        tasks = todo.list_tasks()
        if not tasks:
            print('📝 No tasks found. Add some with --add "task name"')
            return 0
        print("📝 Your tasks:")
        for task in tasks:
            status = "✅" if task.done else "⏳"
            created = task.created[:10]
            print(f"  {status} {task.id}: {task.text} ({created})")
    elif args.done is not None:
        print(f"✅ {todo.mark_done(args.done)}")
    elif args.clear:
        print(f"🗑️ {todo.clear_completed()}")
    elif args.stats:
        stats = todo.get_stats()
        print("📊 Todo Statistics:")
        print(f"   Total tasks: {stats.total}")
        print(f"   Completed: {stats.completed}")
        print(f"   Pending: {stats.pending}")
        print(f"   Completion rate: {stats.completion_rate:.1f}%")
    else:
        print("Use --add, --list, --done, --clear, or --stats options")
        print('Example: mcp-cli todo --add "Learn Python"')
    return 0


async def run_calc(args: argparse.Namespace, client: MCPClient, settings: Settings) -> int:
    calculator = CalculatorTool()
    print(f"🧮 Calculating: {args.expression}")

    try:
        if args.advanced:
            result = calculator.calculate_advanced(args.expression)
            print(f"Result: {result.result}")
            print(f"Processed: {result.processed_expression}")
        else:
            print(f"Result: {calculator.calculate(args.expression)}")
    except CalculationError:
        print("Tip: Try simpler expressions or use --advanced for functions like sin, cos, sqrt")
        raise
    return 0


# -- MCP exploration -----------------------------------------------------------

async def run_mcp(args: argparse.Namespace, client: MCPClient, settings: Settings) -> int:
    arguments = None
    if args.test:
        arguments = json.loads(args.args) if args.args else _sample_arguments(args.test)
        if not isinstance(arguments, dict):
            raise ValueError("--args must be a JSON object")

    print("🔌 Connecting to MCP server...")
    try:
        await client.connect_to(args.server, args.path)
        tools = await client.list_tools()
    except MCPConnectionError:
        _print_tips("Troubleshooting tips", CONNECTION_TIPS)
        raise

    print(f"✅ Connected to {client.current_server_kind().value} MCP server!")

    if args.list or not args.test:
        print("📋 Available tools:")
        _print_tools(tools)

    if args.test:
        print(f"🧪 Testing tool: {args.test}")
        try:
            result = await client.call_tool(args.test, arguments)
        except MCPClientError as e:
            print(f"❌ Tool test failed: {e}")
            return 1
        print("✅ Tool test result:")
        for index, item in enumerate(result, 1):
            print(f"   {index}. {item.text}")
    return 0


async def run_servers(args: argparse.Namespace, client: MCPClient, settings: Settings) -> int:
    print("🌐 Testing available MCP servers...\n")

    checks = [
        (ServerKind.WEATHER, None),
        (ServerKind.FILESYSTEM, settings.DATA_DIR),
        (ServerKind.GIT, "."),
    ]
    for kind, path in checks:
        name = kind.value.capitalize()
        print(f"Testing {name} server...")
        try:
            await client.connect_to(kind, path)
            tools = await client.list_tools()
            print(f"   ✅ {name}: {len(tools)} tools available")
            for tool in tools[:3]:
                print(f"      - {tool.name}")
        except MCPClientError as e:
            print(f"   ❌ {name}: Failed to connect")
            print(f"      Error: {e}")
        finally:
            await client.disconnect()
        print()
    return 0


# -- GitHub explorer -------------------------------------------------------------

async def run_github(args: argparse.Namespace, client: MCPClient, settings: Settings) -> int:
    github = GitHubTool()

    if args.github_command == "connect":
        print("🐙 Testing GitHub MCP server connection...")
        lines = await github.test_github_connection(client)
        for line in lines:
            print(line)
        if not client.is_connected():
            _print_tips("Setup Tips", GITHUB_TIPS)
            return 1
        return 0

    try:
        await client.connect_to(ServerKind.GITHUB)
    except MCPConnectionError:
        _print_tips("Setup Tips", GITHUB_TIPS)
        raise

    if args.github_command == "search":
        await _github_search(github, client, args)
    elif args.github_command == "trending":
        await github.trending_analysis(client, args.language)
    elif args.github_command == "developer":
        await github.developer_insights(client, args.username)
    elif args.github_command == "pattern":
        await github.code_pattern_analysis(client, args.pattern, args.language)
    elif args.github_command == "community":
        await github.community_explorer(client, args.topic)
    elif args.github_command == "tools":
        tools = await client.list_tools()
        print(f"🛠️ Available GitHub MCP Tools ({len(tools)} total):\n")
        _print_tools(tools)
    elif args.github_command == "experiments":
        await _github_experiments(github, client, args.topic, args.user)
    return 0


async def _github_search(github: GitHubTool, client: MCPClient, args: argparse.Namespace) -> None:
    if args.repos:
        print(f'🔍 Searching repositories for: "{args.repos}"')
        repos = await github.search_repositories(client, args.repos, args.limit)
        print(f"\n📚 Found {len(repos)} repositories:\n" if repos else "No repositories found.")
        for index, repo in enumerate(repos, 1):
            print(f"{index}. {repo.owner}/{repo.name}")
            print(f"   ⭐ {repo.stars} stars | 💻 {repo.language}")
            if repo.description:
                print(f"   📝 {repo.description[:100]}")
            print()

    if args.users:
        print(f'👥 Searching users for: "{args.users}"')
        users = await github.search_users(client, args.users, args.limit)
        print(f"\n👥 Found {len(users)} users:\n" if users else "No users found.")
        for index, user in enumerate(users, 1):
            print(f"{index}. {user.login}")
            if user.name:
                print(f"   Name: {user.name}")
            print(f"   👥 {user.followers} followers | 📁 {user.public_repos} repos")
            print()

    if args.code:
        query = f"{args.code} language:{args.language}" if args.language else args.code
        print(f'🔍 Searching code for pattern: "{args.code}"')
        matches = await github.search_code(client, query, args.limit)
        print(f"\n💻 Found {len(matches)} code matches:\n" if matches else "No code found matching pattern.")
        for index, match in enumerate(matches[:8], 1):
            repository = match.get("repository") or {}
            print(f"{index}. {repository.get('full_name', 'Unknown')}/{match.get('name', '')}")
            print(f"   🔗 {match.get('html_url', '')}")
            print()


async def _github_experiments(
    github: GitHubTool, client: MCPClient, topic: str, user: Optional[str]
) -> None:
    print("🧪 === GITHUB INFORMATION EXPERIMENTS === 🧪\n")
    is_typescript = topic == "typescript"

    print("🚀 Experiment 1: Trending Technology Analysis")
    await github.trending_analysis(client, "typescript" if is_typescript else None)

    print("\n🌐 Experiment 2: Community Explorer")
    await github.community_explorer(client, topic)

    print("\n🔍 Experiment 3: Code Pattern Analysis")
    await github.code_pattern_analysis(
        client,
        "interface" if is_typescript else "async function",
        "typescript" if is_typescript else None
    )

    if user:
        print(f"\n👨‍💻 Experiment 4: Developer Insights for {user}")
        await github.developer_insights(client, user)

    print("\n🎉 === EXPERIMENTS COMPLETE === 🎉")


# -- parser / dispatch -------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mcp-cli", description="CLI tool with real MCP server integration")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    weather = subparsers.add_parser("weather", help="Get weather information")
    weather.add_argument("-c", "--city", default="San Francisco", help="City name")
    weather.add_argument("-r", "--real", action="store_true", help="Use real MCP weather server (default: simulation)")
    weather.add_argument("-t", "--test", action="store_true", help="Test the MCP weather server")
    weather.set_defaults(handler=run_weather)

    todo = subparsers.add_parser("todo", help="Manage todo items")
    todo.add_argument("-a", "--add", metavar="TASK", help="Add a new task")
    todo.add_argument("-l", "--list", action="store_true", help="List all tasks")
    todo.add_argument("-d", "--done", metavar="ID", type=int, help="Mark task as done")
    todo.add_argument("-c", "--clear", action="store_true", help="Clear completed tasks")
    todo.add_argument("-s", "--stats", action="store_true", help="Show todo statistics")
    todo.set_defaults(handler=run_todo)

    calc = subparsers.add_parser("calc", help="Perform calculations")
    calc.add_argument("expression", help="Mathematical expression")
    calc.add_argument("-a", "--advanced", action="store_true", help="Use advanced math functions")
    calc.set_defaults(handler=run_calc)

    mcp = subparsers.add_parser("mcp", help="Test and explore MCP servers")
    mcp.add_argument(
        "-s", "--server", default=ServerKind.WEATHER.value,
        choices=[kind.value for kind in ServerKind if kind != ServerKind.NONE],
        help="Server type"
    )
    mcp.add_argument("-p", "--path", help="Path for filesystem/git server (default: current directory)")
    mcp.add_argument("-l", "--list", action="store_true", help="List available tools")
    mcp.add_argument("-t", "--test", metavar="TOOL", help="Test a specific tool")
    mcp.add_argument("--args", help="JSON object of arguments for --test")
    mcp.set_defaults(handler=run_mcp)

    servers = subparsers.add_parser("servers", help="List and test available MCP servers")
    servers.set_defaults(handler=run_servers)

    github = subparsers.add_parser("github", help="Explore GitHub through the GitHub MCP server")
    github.set_defaults(handler=run_github)
    github_commands = github.add_subparsers(dest="github_command", required=True)

    github_commands.add_parser("connect", help="Test connection to GitHub MCP server")
    github_commands.add_parser("tools", help="List available GitHub MCP tools")

    search = github_commands.add_parser("search", help="Search repositories, users, or code")
    search.add_argument("-r", "--repos", metavar="QUERY", help="Search repositories")
    search.add_argument("-u", "--users", metavar="QUERY", help="Search users")
    search.add_argument("-c", "--code", metavar="PATTERN", help="Search code patterns")
    search.add_argument("-l", "--language", help="Filter code search by programming language")
    search.add_argument("--limit", type=int, default=10, help="Limit results")

    trending = github_commands.add_parser("trending", help="Analyze trending repositories")
    trending.add_argument("-l", "--language", help="Filter by programming language")

    developer = github_commands.add_parser("developer", help="Analyze a developer's repositories")
    developer.add_argument("username", help="GitHub username to analyze")

    pattern = github_commands.add_parser("pattern", help="Analyze code patterns across GitHub")
    pattern.add_argument("pattern", help='Code pattern to search for (e.g. "useState")')
    pattern.add_argument("-l", "--language", help="Filter by programming language")

    community = github_commands.add_parser("community", help="Explore a technology community")
    community.add_argument("topic", help='Technology or topic (e.g. "machine-learning")')

    experiments = github_commands.add_parser("experiments", help="Run all information experiments")
    experiments.add_argument("-t", "--topic", default="typescript", help="Focus on specific topic")
    experiments.add_argument("-u", "--user", help="Analyze specific user")

    return parser


def print_banner() -> None:
    print("🚀 MCP CLI Tool - Real Server Edition")
    print("A Python CLI with real MCP server integration\n")
    print("🌟 Quick start with real MCP servers:")
    print('   mcp-cli weather --real --city "London"')
    print("   mcp-cli mcp --server weather --list")
    print("   mcp-cli servers")
    print("   mcp-cli github connect")
    print()


async def dispatch(args: argparse.Namespace, settings: Settings) -> int:
    """Run one command against a freshly constructed client."""
    logger.debug(f"Running command {args.command}")
    registry = ServerRegistry(Path(settings.SERVER_REGISTRY_FILE), settings)
    registry.load()

    async with MCPClient(registry=registry, settings=settings) as client:
        return await args.handler(args, client, settings)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    if not argv:
        print_banner()
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    try:
        return asyncio.run(dispatch(args, settings))
    except MCPClientError as e:
        print(f"MCP Error: {e}", file=sys.stderr)
        if isinstance(e, MCPConnectionError) and e.server_kind:
            print(f"Server kind: {e.server_kind}", file=sys.stderr)
    except (CalculationError, TodoError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    return 1


if __name__ == "__main__":
    sys.exit(main())
