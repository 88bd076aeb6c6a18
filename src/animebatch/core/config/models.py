"""
Pydantic configuration models for AnimeBatch.

These models provide type-safe configuration with validation for:
- Exporter invocation and output location
- FTP transfer settings
- Webhook notification settings
- Logging
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Export Configuration
# =============================================================================


class ExportConfig(BaseModel):
    """Exporter process and output file settings."""

    output_dir: Path = Field(
        default=Path("./output"),
        description="Directory for generated SQL files",
    )
    default_limit: int = Field(
        default=0,
        ge=0,
        description="Item limit when none is given on the command line (0 = all)",
    )
    command: list[str] = Field(
        default_factory=lambda: ["node", "animedekho_importer.js"],
        description="Exporter command line, without the subcommand and limit",
    )
    subcommand: str = Field(
        default="bulk-export",
        description="Subcommand token passed before the limit",
    )
    working_dir: Path | None = Field(
        default=None,
        description="Working directory for the exporter (default: current)",
    )

    @field_validator("command")
    @classmethod
    def command_not_empty(cls, v: list[str]) -> list[str]:
        """Ensure there is an executable to run."""
        if not v:
            raise ValueError("exporter command must not be empty")
        return v


# =============================================================================
# Transfer Configuration
# =============================================================================


class TransferConfig(BaseModel):
    """FTP upload settings."""

    host: str | None = Field(default=None, description="FTP server host")
    port: int = Field(default=21, ge=1, le=65535, description="FTP server port")
    user: str | None = Field(default=None, description="FTP username")
    password: str | None = Field(default=None, description="FTP password")
    remote_dir: str = Field(
        default="/",
        description="Remote directory the batch file is stored in",
    )

    @property
    def is_configured(self) -> bool:
        """Host, user and password are all present."""
        return bool(self.host and self.user and self.password)


# =============================================================================
# Notification Configuration
# =============================================================================


class NotifyConfig(BaseModel):
    """Webhook notification settings."""

    webhook_url: str | None = Field(
        default=None,
        description="Slack-compatible incoming webhook URL",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="HTTP timeout for the notification request (None = wait indefinitely)",
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url)


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    Built from an optional YAML file overlaid with environment variables.
    """

    export: ExportConfig = Field(default_factory=ExportConfig)
    transfer: TransferConfig = Field(default_factory=TransferConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
