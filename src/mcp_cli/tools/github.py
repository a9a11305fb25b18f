"""
GitHub explorer built on the GitHub MCP server.

Search helpers return parsed records; the analysis methods print reports
to stdout.
"""

import json
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from ..core.logging import get_logger
from ..mcp import (
    MCPClient, MCPClientError, MCPConnectionError, MCPNotConnectedError, ServerKind
)


logger = get_logger(__name__)

TRENDING_SINCE = "2024-01-01"


class GitHubRepoInfo(BaseModel):
    name: str
    owner: str
    description: Optional[str] = None
    stars: int = 0
    language: str = "Unknown"
    updated: Optional[str] = None


class GitHubUserInfo(BaseModel):
    login: str
    name: Optional[str] = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    location: Optional[str] = None
    bio: Optional[str] = None


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def _print_distribution(title: str, values: Iterable[str], total: int, noun: str, top: int) -> None:
    print(title)
    for value, count in Counter(values).most_common(top):
        percentage = count / total * 100 if total else 0.0
        print(f"  {value}: {count} {noun} ({percentage:.1f}%)")


def _print_repo(index: int, repo: GitHubRepoInfo, indent: str = "  ", with_owner: bool = True) -> None:
    title = f"{repo.owner}/{repo.name}" if with_owner else repo.name
    print(f"{indent}{index}. {title}")
    print(f"{indent}   ⭐ {repo.stars} stars | 💻 {repo.language or 'Unknown'}")
    if repo.description:
        print(f"{indent}   📝 {_truncate(repo.description, 80)}")
    print()


class GitHubTool:
    """Queries and reports over the GitHub MCP server's search tools."""

    async def _call_json(self, client: MCPClient, tool: str, arguments: Dict[str, Any]) -> Optional[Any]:
        """Call ``tool`` and decode the first text item as JSON.

        Returns None when the tool fails or its output is not JSON.
        Connection problems propagate.
        """
        if not client.is_connected():
            raise MCPNotConnectedError(tool)
        try:
            result = await client.call_tool(tool, arguments)
        except (MCPConnectionError, MCPNotConnectedError):
            raise
        except MCPClientError as e:
            logger.error(f"GitHub tool {tool} failed: {e}")
            return None

        if not result or not result[0].text:
            return None
        try:
            return json.loads(result[0].text)
        except json.JSONDecodeError as e:
            logger.error(f"GitHub tool {tool} returned non-JSON output: {e}")
            return None

    async def search_repositories(self, client: MCPClient, query: str, limit: int = 10) -> List[GitHubRepoInfo]:
        data = await self._call_json(client, "search_repositories", {"query": query, "perPage": limit})
        if not isinstance(data, dict):
            return []
        return [
            GitHubRepoInfo(
                name=repo.get("name") or "",
                owner=(repo.get("owner") or {}).get("login") or "unknown",
                description=repo.get("description"),
                stars=repo.get("stargazers_count") or 0,
                language=repo.get("language") or "Unknown",
                updated=repo.get("updated_at"),
            )
            for repo in data.get("items") or []
            if isinstance(repo, dict)
        ]

    async def search_users(self, client: MCPClient, query: str, limit: int = 10) -> List[GitHubUserInfo]:
        data = await self._call_json(client, "search_users", {"q": query, "per_page": limit})
        if not isinstance(data, dict):
            return []
        return [
            GitHubUserInfo(
                login=user.get("login") or "",
                name=user.get("name"),
                followers=user.get("followers_count") or 0,
                following=user.get("following_count") or 0,
                public_repos=user.get("public_repos_count") or 0,
                location=user.get("location"),
                bio=user.get("bio"),
            )
            for user in data.get("items") or []
            if isinstance(user, dict)
        ]

    async def search_code(self, client: MCPClient, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        data = await self._call_json(client, "search_code", {"q": query, "per_page": limit})
        if not isinstance(data, dict):
            return []
        return [item for item in data.get("items") or [] if isinstance(item, dict)]

    async def get_repository_info(self, client: MCPClient, owner: str, repo: str) -> Optional[Any]:
        return await self._call_json(
            client, "get_file_contents", {"owner": owner, "repo": repo, "path": "README.md"}
        )

    async def trending_analysis(self, client: MCPClient, language: Optional[str] = None) -> None:
        print("\n🚀 === TRENDING ANALYSIS === 🚀\n")

        query = (
            f"language:{language} created:>{TRENDING_SINCE}"
            if language
            else f"created:>{TRENDING_SINCE} stars:>100"
        )
        repos = await self.search_repositories(client, query, 15)
        if not repos:
            print("No trending repositories found.")
            return

        print("📈 Top Trending Repositories:")
        for index, repo in enumerate(repos[:10], 1):
            _print_repo(index, repo)

        _print_distribution("🔥 Language Distribution:", (r.language for r in repos), len(repos), "repos", 8)

    async def developer_insights(self, client: MCPClient, username: str) -> None:
        print(f"\n👨‍💻 === DEVELOPER INSIGHTS: {username} === 👨‍💻\n")

        repos = await self.search_repositories(client, f"user:{username}", 20)
        if not repos:
            print(f"No public repositories found for user: {username}")
            return

        total_stars = sum(r.stars for r in repos)
        print("📊 Repository Statistics:")
        print(f"  📁 Total Repositories: {len(repos)}")
        print(f"  ⭐ Total Stars: {total_stars}")
        print(f"  📈 Average Stars per Repo: {total_stars / len(repos):.1f}")
        print()

        _print_distribution("💻 Programming Languages:", (r.language for r in repos), len(repos), "repos", len(repos))
        print()

        print("⭐ Top Starred Repositories:")
        for index, repo in enumerate(sorted(repos, key=lambda r: r.stars, reverse=True)[:5], 1):
            _print_repo(index, repo, with_owner=False)

    async def code_pattern_analysis(self, client: MCPClient, pattern: str, language: Optional[str] = None) -> None:
        print(f'\n🔍 === CODE PATTERN ANALYSIS: "{pattern}" === 🔍\n')

        query = f"{pattern} language:{language}" if language else pattern
        results = await self.search_code(client, query, 20)
        if not results:
            print(f'No code found matching pattern: "{pattern}"')
            return

        repositories = [r.get("repository") or {} for r in results]
        repo_counts = Counter(repo["full_name"] for repo in repositories if repo.get("full_name"))
        owners = {(repo.get("owner") or {}).get("login") for repo in repositories} - {None}

        print("📊 Pattern Usage Statistics:")
        print(f"  📄 Files Found: {len(results)}")
        print(f"  📁 Unique Repositories: {len(repo_counts)}")
        print(f"  👥 Unique Authors: {len(owners)}")
        print()

        _print_distribution(
            "💻 Language Distribution:",
            (repo["language"] for repo in repositories if repo.get("language")),
            len(results), "occurrences", 8
        )
        print()

        print("🏆 Top Repositories Using This Pattern:")
        for index, (name, count) in enumerate(repo_counts.most_common(5), 1):
            print(f"  {index}. {name} ({count} occurrences)")
        print()

        print("📝 Sample Code Snippets:")
        for index, result in enumerate(results[:3], 1):
            full_name = (result.get("repository") or {}).get("full_name", "Unknown")
            print(f"  {index}. {full_name}/{result.get('name', '')}")
            print(f"     {result.get('html_url', '')}")
            print()

    async def community_explorer(self, client: MCPClient, topic: str) -> None:
        print(f'\n🌐 === COMMUNITY EXPLORER: "{topic}" === 🌐\n')

        repos = await self.search_repositories(client, topic, 15)
        users = await self.search_users(client, topic, 10)

        print("📚 Top Repositories:")
        for index, repo in enumerate(repos[:8], 1):
            _print_repo(index, repo)

        print("👥 Community Members:")
        for index, user in enumerate(users[:6], 1):
            print(f"  {index}. {user.login}")
            if user.name:
                print(f"     Name: {user.name}")
            if user.location:
                print(f"     📍 {user.location}")
            print(f"     👥 {user.followers} followers | 📁 {user.public_repos} repos")
            if user.bio:
                print(f"     💬 {_truncate(user.bio, 60)}")
            print()

        _print_distribution("🔧 Popular Technologies:", (r.language for r in repos), len(repos), "projects", 6)

    async def test_github_connection(self, client: MCPClient) -> List[str]:
        results: List[str] = []

        try:
            await client.connect_to(ServerKind.GITHUB)
            tools = await client.list_tools()
        except MCPClientError as e:
            results.append(f"❌ GitHub server connection failed: {e}")
            return results

        results.append(f"✅ GitHub server connected with {len(tools)} tools")
        results.append("🛠️ Available GitHub tools:")
        for tool in tools[:8]:
            results.append(f"   • {tool.name}: {tool.description}")

        try:
            await client.call_tool("search_repositories", {"query": "javascript", "perPage": 3})
            results.append("✅ GitHub API test successful")
        except MCPClientError as e:
            results.append(f"⚠️ GitHub API test failed: {e}")

        return results
