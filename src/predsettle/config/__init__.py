"""Configuration: TOML settings, engine parameters, logging setup."""

from predsettle.config.engine import EngineConfig
from predsettle.config.settings import Settings, configure_logging, get_settings, load_config

__all__ = ["EngineConfig", "Settings", "configure_logging", "get_settings", "load_config"]
