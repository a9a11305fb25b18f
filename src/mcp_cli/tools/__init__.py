"""Tool adapters built on the MCP client's public contract."""

from .calculator import CalculationError, CalculationResult, CalculatorTool, MathOperation, MathOperator
from .github import GitHubRepoInfo, GitHubTool, GitHubUserInfo
from .todo import TodoError, TodoItem, TodoStats, TodoTool
from .weather import WeatherCondition, WeatherData, WeatherTool

__all__ = [
    "CalculationError",
    "CalculationResult",
    "CalculatorTool",
    "MathOperation",
    "MathOperator",
    "GitHubRepoInfo",
    "GitHubTool",
    "GitHubUserInfo",
    "TodoError",
    "TodoItem",
    "TodoStats",
    "TodoTool",
    "WeatherCondition",
    "WeatherData",
    "WeatherTool",
]
