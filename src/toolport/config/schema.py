"""
Pydantic configuration schema for toolport.

This module defines all configuration models with validation.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from toolport.security.whitelist import SAFE_COMMANDS

# =============================================================================
# Security Configuration
# =============================================================================


class CommandConfig(BaseModel):
    """run_command configuration."""

    allowed: list[str] = Field(default_factory=lambda: list(SAFE_COMMANDS))
    restrict_paths: bool = True
    default_timeout_ms: int = Field(default=10_000, ge=100)
    max_timeout_ms: int = Field(default=60_000, ge=100)


class SecurityConfig(BaseModel):
    """Security gate configuration."""

    model_config = ConfigDict(extra="allow")

    # Empty means "the working directory at startup"
    allowed_roots: list[str] = Field(default_factory=list)
    commands: CommandConfig = Field(default_factory=CommandConfig)


# =============================================================================
# Fetch Configuration
# =============================================================================


class FetchConfig(BaseModel):
    """HTTP fetch tool configuration."""

    model_config = ConfigDict(extra="allow")

    max_response_chars: int = Field(default=50_000, ge=1)
    max_timeout_ms: int = Field(default=120_000, ge=100)
    user_agent: str = "Mozilla/5.0 (compatible; toolport/1.0)"
    max_redirects: int = Field(default=5, ge=0, le=20)


# =============================================================================
# Tool Configuration
# =============================================================================


class RulesConfig(BaseModel):
    """Rule lookup configuration."""

    rules_dir: str = "./rules"


class ToolsConfig(BaseModel):
    """Which tools are exposed."""

    model_config = ConfigDict(extra="allow")

    disabled: list[str] = Field(default_factory=list)
    groups: list[Literal["filesystem", "git", "fetch", "memory", "system", "time", "rules"]] = Field(
        default_factory=lambda: ["filesystem", "git", "fetch", "memory", "system", "time", "rules"]
    )


# =============================================================================
# Logging & Server Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration. Logs always go to stderr."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    rich: bool = True


class ServerConfig(BaseModel):
    """Transport configuration."""

    name: str = "toolport"


# =============================================================================
# Root Configuration
# =============================================================================


class Config(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="allow")

    security: SecurityConfig = Field(default_factory=SecurityConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
