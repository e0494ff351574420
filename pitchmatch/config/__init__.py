"""Configuration management for PitchMatch."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config
from .models import (
    ApiConfig,
    AppConfig,
    CampaignConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MatchingConfig,
    SenderConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "parse_app_config",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "MatchingConfig",
    "CampaignConfig",
    "SenderConfig",
    "LoggingConfig",
    "ApiConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
