"""
Weather tool: local simulation plus an MCP-backed lookup.
"""

import random
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from ..core.logging import get_logger
from ..mcp import MCPClient, MCPClientError, MCPConnectionError, MCPNotConnectedError


logger = get_logger(__name__)


class WeatherCondition(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    SNOWY = "snowy"
    PARTLY_CLOUDY = "partly-cloudy"
    STORMY = "stormy"


class WeatherData(BaseModel):
    city: str
    condition: WeatherCondition
    temperature: int
    humidity: int
    wind_speed: int
    timestamp: datetime


class WeatherTool:
    """Weather lookups, simulated locally or served by an MCP weather server."""

    TEMPERATURES = [65, 72, 68, 45, 80, 55, 38, 75, 82, 41]

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def get_weather(self, city: str) -> str:
        condition = self._rng.choice(list(WeatherCondition))
        temperature = self._rng.choice(self.TEMPERATURES)
        return f"Weather in {city}: {condition.value}, {temperature}°F"

    def get_detailed_weather(self, city: str) -> WeatherData:
        return WeatherData(
            city=city,
            condition=self._rng.choice(list(WeatherCondition)),
            temperature=self._rng.choice(self.TEMPERATURES),
            humidity=self._rng.randrange(100),
            wind_speed=self._rng.randrange(25),
            timestamp=datetime.now(timezone.utc),
        )

    async def get_weather_from_mcp(self, client: MCPClient, city: str) -> str:
        """
        Ask the connected weather server for ``city``.

        Falls back to the simulation only when the server is unreachable;
        protocol and tool errors propagate to the caller.
        """
        try:
            if not client.is_connected():
                raise MCPNotConnectedError("get_weather")
            result = await client.call_tool("get_weather", {"location": city})
        except (MCPConnectionError, MCPNotConnectedError) as e:
            logger.warning(f"MCP weather call failed, falling back to simulation: {e}")
            return self.get_weather(city)

        if result and result[0].text:
            return result[0].text
        return "Weather data unavailable"

    async def test_mcp_weather_servers(self, client: MCPClient, city: str) -> List[str]:
        """Connect, list tools and try the weather tool; return report lines."""
        results: List[str] = []

        try:
            await client.connect_to("weather")
            tools = await client.list_tools()
        except MCPClientError as e:
            results.append(f"❌ Weather server connection failed: {e}")
            return results

        results.append(f"✅ Weather server connected with {len(tools)} tools")

        weather_tool = next((t for t in tools if "weather" in t.name), None)
        if weather_tool is None:
            results.append("⚠️ No weather tool found")
            return results

        try:
            weather = await client.call_tool(weather_tool.name, {"location": city})
            text = weather[0].text if weather else None
            results.append(f"🌤️ Weather test: {text or 'No data'}")
        except MCPClientError as e:
            results.append(f"❌ Weather tool test failed: {e}")

        return results
