"""Configuration module for slack-butler."""

from slack_butler.config.loader import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
    EnvVarNotFoundError,
    MissingTokenError,
    load_config,
    require_token,
)
from slack_butler.config.models import (
    AppConfig,
    ArchiveConfig,
    DetectConfig,
    LoggingConfig,
    SlackConfig,
)

__all__ = [
    # Exceptions
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigParseError",
    "EnvVarNotFoundError",
    "MissingTokenError",
    # Functions
    "load_config",
    "require_token",
    # Models
    "AppConfig",
    "ArchiveConfig",
    "DetectConfig",
    "LoggingConfig",
    "SlackConfig",
]
