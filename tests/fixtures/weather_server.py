"""Minimal stdio weather server used by the integration tests."""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP("test-weather")


@mcp.tool()
def get_weather(location: str) -> str:
    """Current weather for a location."""
    return f"Weather in {location}: sunny, 70°F"


@mcp.tool()
def forecast(location: str, days: int = 3) -> str:
    """Multi-day forecast for a location."""
    return "\n".join(f"Day {day}: mild in {location}" for day in range(1, days + 1))


if __name__ == "__main__":
    mcp.run()
