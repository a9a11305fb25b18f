"""Configuration management for the MCP CLI."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="text", description="Logging format: json or text")

    # Client identity advertised during the initialize handshake
    CLIENT_NAME: str = Field(default="mcp-cli-client", description="Client name sent to servers")
    CLIENT_VERSION: str = Field(default="1.0.0", description="Client version sent to servers")

    # Server registry
    SERVER_REGISTRY_FILE: str = Field(
        default="config/servers.yaml",
        description="Path to optional server launch overrides"
    )
    NPX_COMMAND: str = Field(default="npx", description="Executable used to launch npm-packaged servers")

    # Timeouts
    HANDSHAKE_TIMEOUT: float = Field(default=30.0, gt=0, le=600.0, description="Initialize handshake timeout in seconds")
    REQUEST_TIMEOUT: Optional[float] = Field(default=None, gt=0, description="Per-request read timeout in seconds")

    # Tool adapters
    DATA_DIR: str = Field(default="data", description="Directory holding local tool data such as todos.json")
    GITHUB_PERSONAL_ACCESS_TOKEN: Optional[str] = Field(
        default=None,
        description="Token forwarded to the GitHub MCP server"
    )

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('LOG_FORMAT')
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format"""
        valid_formats = ['json', 'text']
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}")
        return v.lower()


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings"""
    return settings
