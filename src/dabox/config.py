"""Configuration management for dabox."""

import json
import os
from pathlib import Path
from typing import Literal, Optional

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dabox.utils import setup_logging

DATA_DIR_NAME = ".dabox"
CONFIG_FILE_NAME = "config.json"
DEFAULT_API_URL = "http://127.0.0.1:3000"
DEFAULT_IDENTITY_HEADER = "X-Entity-Uid"

Environment = Literal["test", "dev", "user"]


class DaboxConfig(BaseSettings):
    """Pydantic model for dabox client configuration."""

    env: Environment = Field(default="dev", description="Environment name")

    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="Base URL of the directory store. Every request path is appended to it.",
    )

    user_id: Optional[int] = Field(
        default=None,
        description="Identity token used when no session is active. Null means logged out.",
    )

    identity_header: str = Field(
        default=DEFAULT_IDENTITY_HEADER,
        description="Header carrying the caller's identity on every request",
    )

    request_timeout: float = Field(
        default=10.0,
        description="Seconds to wait for the store before reporting a transport error",
        gt=0,
    )

    root_name: str = Field(
        default="Root",
        description="Name given to the root directory when it has to be created on first login",
        min_length=1,
    )

    # overridden by ~/.dabox/config.json
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DABOX_",
        extra="ignore",
    )

    @property
    def is_test_env(self) -> bool:
        """Check if running in a test environment."""
        return (
            self.env == "test"
            or os.getenv("DABOX_ENV", "").lower() == "test"
            or os.getenv("PYTEST_CURRENT_TEST") is not None
        )

    @property
    def data_dir_path(self) -> Path:
        """Get app state directory for config and logs."""
        if config_dir := os.getenv("DABOX_CONFIG_DIR"):
            return Path(config_dir)

        home = os.getenv("HOME", Path.home())
        return Path(home) / DATA_DIR_NAME


# Module-level cache for configuration
_CONFIG_CACHE: Optional[DaboxConfig] = None


class ConfigManager:
    """Manages dabox configuration."""

    def __init__(self) -> None:
        """Initialize the configuration manager."""
        home = os.getenv("HOME", Path.home())
        if isinstance(home, str):
            home = Path(home)

        # Allow override via environment variable
        if config_dir := os.getenv("DABOX_CONFIG_DIR"):
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = home / DATA_DIR_NAME

        self.config_file = self.config_dir / CONFIG_FILE_NAME

    @property
    def config(self) -> DaboxConfig:
        """Get configuration, loading it lazily if needed."""
        return self.load_config()

    def load_config(self) -> DaboxConfig:
        """Load configuration from file or fall back to defaults.

        Environment variables take precedence over file config values.
        """
        global _CONFIG_CACHE

        if _CONFIG_CACHE is not None:
            return _CONFIG_CACHE

        if not self.config_file.exists():
            _CONFIG_CACHE = DaboxConfig()
            return _CONFIG_CACHE

        try:
            file_data = json.loads(self.config_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:  # pragma: no cover
            logger.error(f"Invalid JSON in config file {self.config_file}: {e}")
            raise SystemExit(
                f"Error: config file is not valid JSON: {self.config_file}\n"
                f"  {e}\n"
                f"Fix or delete the file and re-run."
            )

        # File data is the base; fields set through DABOX_* env vars win
        env_dict = DaboxConfig().model_dump()
        merged_data = file_data.copy()
        for field_name in DaboxConfig.model_fields.keys():
            if f"DABOX_{field_name.upper()}" in os.environ:
                merged_data[field_name] = env_dict[field_name]

        _CONFIG_CACHE = DaboxConfig(**merged_data)
        return _CONFIG_CACHE

    def save_config(self, config: DaboxConfig) -> None:
        """Save configuration to file and invalidate cache."""
        global _CONFIG_CACHE
        self.config_dir.mkdir(parents=True, exist_ok=True)
        save_dabox_config(self.config_file, config)
        _CONFIG_CACHE = None


def save_dabox_config(file_path: Path, config: DaboxConfig) -> None:
    """Save configuration to file."""
    try:
        config_dict = config.model_dump(mode="json")
        file_path.write_text(json.dumps(config_dict, indent=2))
    except Exception as e:  # pragma: no cover
        logger.error(f"Failed to save config: {e}")


def init_cli_logging() -> None:  # pragma: no cover
    """Initialize logging for CLI commands - file only.

    CLI commands should not log to stdout to avoid interfering with
    the rendered tree.
    """
    log_level = os.getenv("DABOX_LOG_LEVEL", "INFO")
    setup_logging(log_level=log_level, log_to_file=True)
