"""Configuration for commandwire.

Key classes:
    HandlerConfig: Immutable settings snapshot plus the two injectable
        callbacks (error reporter, guild prefix getter). Passed to the
        Dispatcher at construction.
    Settings: Loads settings.yaml and .env from a config directory and
        builds a HandlerConfig from them.

Example settings.yaml::

    handler:
      general_prefix: "!"
      invoke_to_lower: true
      allow_dm: true
    logging:
      level: INFO
      subsystem_levels:
        dispatch: DEBUG
"""

import os
from pathlib import Path
from typing import Any, Callable, Optional

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError

logger = structlog.get_logger("commandwire.dispatch")

PREFIX_ENV_VAR = "COMMANDWIRE_PREFIX"


class HandlerConfig(BaseModel):
    """Settings of a Dispatcher, fixed at startup."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    general_prefix: str = "!"             # Globally accepted prefix
    space_after_prefix: bool = False      # Prefix is its own token ("! ping")
    invoke_to_lower: bool = False         # Case-fold invocations
    allow_dm: bool = False                # Dispatch in DM and group DM channels
    allow_bots: bool = False              # Dispatch messages written by bot accounts
    execute_on_edit: bool = False         # Dispatch edited messages again
    use_default_help_command: bool = False
    delete_message_after: bool = False    # Delete the trigger message after success

    # async or sync (ctx, kind, exc) -> None. Receives a context that may
    # be only partially populated, see Context.
    on_error: Optional[Callable[..., Any]] = Field(default=None, repr=False)

    # async or sync (guild_id) -> str, "" when the guild has no prefix.
    # Raise only when the lookup itself failed.
    guild_prefix_getter: Optional[Callable[..., Any]] = Field(default=None, repr=False)


class Settings:
    """File and environment backed configuration.

    Loads settings.yaml and .env from the config directory. The
    ``COMMANDWIRE_PREFIX`` environment variable overrides
    ``handler.general_prefix``.

    Args:
        config_dir: Path to the config directory. Defaults to
            ``<repo_root>/config/``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if filepath.exists():
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    @property
    def handler_settings(self) -> dict:
        """The ``handler`` section, with environment overrides applied."""
        section = self.settings.get("handler", {})
        if not isinstance(section, dict):
            logger.error("handler_settings_invalid_type", type=type(section).__name__)
            section = {}
        section = dict(section)
        env_prefix = os.environ.get(PREFIX_ENV_VAR)
        if env_prefix:
            section["general_prefix"] = env_prefix
        return section

    def handler_config(
        self,
        on_error: Optional[Callable[..., Any]] = None,
        guild_prefix_getter: Optional[Callable[..., Any]] = None,
    ) -> HandlerConfig:
        """Build a HandlerConfig from the loaded settings.

        Raises:
            ConfigurationError: If the handler section has invalid values.
        """
        try:
            return HandlerConfig(
                **self.handler_settings,
                on_error=on_error,
                guild_prefix_getter=guild_prefix_getter,
            )
        except ValidationError as e:
            raise ConfigurationError(
                "invalid handler settings",
                setting_name="handler",
                errors=e.error_count(),
            ) from e

    def validate(self) -> None:
        """Check settings at startup.

        Logs problems but does not raise, so a misconfigured file still
        lets the handler start with defaults where possible.
        """
        section = self.handler_settings
        known = set(HandlerConfig.model_fields) - {"on_error", "guild_prefix_getter"}
        for key in section:
            if key not in known:
                logger.warning("unknown_handler_setting", key=key)

        prefix = section.get("general_prefix")
        if prefix is not None and not isinstance(prefix, str):
            logger.error("config_invalid_value", key="handler.general_prefix", value=prefix)
        elif prefix == "":
            logger.warning("empty_prefix", msg="Every message will be treated as a command")
        elif isinstance(prefix, str) and prefix != prefix.strip():
            logger.warning("prefix_has_whitespace", prefix=prefix)

    @property
    def log_dir(self) -> Optional[Path]:
        """Log directory, or None for console-only logging."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return None

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO)."""
        return self.settings.get("logging", {}).get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"dispatch": "DEBUG"}."""
        return self.settings.get("logging", {}).get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        return self.settings.get("logging", {}).get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        return self.settings.get("logging", {}).get("backup_count", 5)
