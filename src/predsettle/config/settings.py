"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from predsettle.config.engine import EngineConfig

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        engine: dict[str, Any] | None = None,
        storage: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.engine = engine or {}
        self.storage = storage or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            engine=raw.get("engine"),
            storage=raw.get("storage"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/predsettle.duckdb")

    @property
    def oracle_fee_bps(self) -> int:
        return int(self.engine.get("oracle_fee_bps", 100))

    @property
    def platform_fee_bps(self) -> int:
        return int(self.engine.get("platform_fee_bps", 0))

    @property
    def withdrawal_fee_bps(self) -> int:
        return int(self.engine.get("withdrawal_fee_bps", 30))

    @property
    def max_oracle_data_len(self) -> int:
        return int(self.engine.get("max_oracle_data_len", 256))

    @property
    def min_market_duration_sec(self) -> int:
        return int(self.engine.get("min_market_duration_sec", 0))

    @property
    def max_market_duration_sec(self) -> int:
        return int(self.engine.get("max_market_duration_sec", 0))

    @property
    def platform_treasury(self) -> str:
        return str(self.engine.get("platform_treasury", "treasury"))

    @property
    def paused(self) -> bool:
        return bool(self.engine.get("paused", False))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            oracle_fee_bps=self.oracle_fee_bps,
            platform_fee_bps=self.platform_fee_bps,
            withdrawal_fee_bps=self.withdrawal_fee_bps,
            max_oracle_data_len=self.max_oracle_data_len,
            min_market_duration_sec=self.min_market_duration_sec,
            max_market_duration_sec=self.max_market_duration_sec,
            platform_treasury=self.platform_treasury,
            paused=self.paused,
        )


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
