"""
BeatCheck Configuration System
==============================

Configuration management with environment variables and Pydantic models.
Environment variables override Field defaults with clear precedence.
"""

from pathlib import Path
from typing import List, Optional
from enum import Enum

from appdirs import user_config_dir, user_data_dir
from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode


APP_NAME = "beatcheck"

FIREFOX_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
)


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def default_config_dir() -> Path:
    """Per-user configuration directory (``~/.config/beatcheck`` on Linux)."""
    return Path(user_config_dir(APP_NAME))


def default_db_path() -> str:
    return str(Path(user_data_dir(APP_NAME)) / "feeds.db")


class FetchSettings(BaseModel):
    """Feed fetching and discovery configuration."""
    request_timeout: int = Field(default=30, ge=1, le=300, description="Total request timeout in seconds")
    connect_timeout: int = Field(default=10, ge=1, le=120, description="Connection timeout in seconds")
    parallel_feeds: int = Field(default=5, ge=1, le=50, description="Concurrent feed fetches during refresh")
    user_agent: str = Field(default="beatcheck/1.2.0", min_length=1, description="User-Agent for feed requests")


class ContentSettings(BaseModel):
    """Full-content fetching configuration."""
    request_timeout: int = Field(default=30, ge=1, le=300, description="Total request timeout in seconds")
    browser_user_agent: str = Field(default=FIREFOX_USER_AGENT, description="Desktop browser User-Agent")
    text_width: int = Field(default=80, ge=20, le=500, description="Column width for HTML to text rendering")
    min_content_length: int = Field(
        default=200,
        ge=0,
        description="Extracted text must be longer than this many characters to be kept"
    )
    chromium_cookie_paths: List[str] = Field(
        default_factory=lambda: [
            "~/.config/google-chrome/Default/Cookies",
            "~/.config/chromium/Default/Cookies",
        ],
        description="Chromium-family cookie databases, first existing one wins"
    )
    firefox_profiles_dir: str = Field(
        default="~/.mozilla/firefox",
        description="Directory holding Firefox profiles.ini"
    )


class BlocklistSettings(BaseModel):
    """Keyword blocklist configuration."""
    path: Optional[str] = Field(
        default=None,
        description="Blocklist file, defaults to <user-config-dir>/beatcheck/blocklist.txt"
    )
    max_keyword_length: int = Field(default=50, ge=1, le=500, description="Longest accepted keyword")

    def resolved_path(self) -> Path:
        if self.path:
            return Path(self.path).expanduser()
        return default_config_dir() / "blocklist.txt"


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")


class BeatCheckSettings(BaseSettings):
    """Main application settings."""

    fetch: FetchSettings = Field(default_factory=FetchSettings)
    content: ContentSettings = Field(default_factory=ContentSettings)
    blocklist: BlocklistSettings = Field(default_factory=BlocklistSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    db_path: str = Field(default_factory=default_db_path, description="SQLite database file path")
    claude_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("BEATCHECK_CLAUDE_API_KEY", "CLAUDE_API_KEY", "claude_api_key"),
        description="Claude API key for summaries"
    )
    raindrop_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("BEATCHECK_RAINDROP_TOKEN", "RAINDROP_TOKEN", "raindrop_token"),
        description="Raindrop.io token for bookmarking"
    )
    refresh_interval_minutes: int = Field(default=30, ge=0, description="Minutes between automatic refreshes")
    default_tags: List[str] = Field(default_factory=lambda: ["rss"], description="Tags applied to saved articles")

    app_name: str = Field(default="BeatCheck", description="Application name")
    version: str = Field(default="1.2.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "BEATCHECK_",
        "populate_by_name": True,
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Validate complete configuration."""
        errors = []

        if self.fetch.connect_timeout > self.fetch.request_timeout:
            errors.append("fetch.connect_timeout cannot exceed fetch.request_timeout")

        if self.logging.file_path:
            try:
                log_path = Path(self.logging.file_path).expanduser()
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid log file path: {e}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                error_code=ErrorCode.CONFIG_INVALID
            )

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value


def load_settings() -> BeatCheckSettings:
    """Load settings from environment variables and defaults.

    Environment variables override Pydantic Field defaults.

    Returns:
        Loaded and validated settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        # Precedence: environment, then .env file, then Field defaults
        settings = BeatCheckSettings()
        settings.validate_configuration()
        return settings

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        ) from e


# Global settings instance
_settings: Optional[BeatCheckSettings] = None


def get_settings(reload: bool = False) -> BeatCheckSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
