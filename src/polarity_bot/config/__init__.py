"""Configuration module for the Polarity bot."""

from polarity_bot.config.factory import create_from_config
from polarity_bot.config.loader import get_default_config_path, load_config
from polarity_bot.config.models import (
    BotConfig,
    CacheSettings,
    LoggingSettings,
    PolaritySettings,
    RenderSettings,
    SlackSettings,
)

__all__ = [
    "BotConfig",
    "CacheSettings",
    "LoggingSettings",
    "PolaritySettings",
    "RenderSettings",
    "SlackSettings",
    "create_from_config",
    "get_default_config_path",
    "load_config",
]
