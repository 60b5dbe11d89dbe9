"""
Centralized Configuration Management

Loads configuration from environment variables (and an optional .env file)
with sensible defaults. Supports development, staging, and production
environments.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional
from enum import Enum
from functools import lru_cache

from dotenv import load_dotenv

from .exceptions import ConfigurationError


class Environment(Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass(frozen=True)
class AnalysisConfig:
    """Analysis coordinator configuration"""
    parallel: bool = True
    max_workers: int = 6
    humans_only: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json_format: bool = False
    log_file: Optional[str] = None


@dataclass(frozen=True)
class AppConfig:
    """Root application configuration"""
    env: Environment
    analysis: AnalysisConfig
    logging: LoggingConfig
    debug: bool = False


VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """Get environment variable with optional requirement check"""
    value = os.getenv(key, default)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {key} is not set")
    return value


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable"""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


def _get_env_int(key: str, default: int) -> int:
    """Get integer environment variable"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """
    Load and cache application configuration.

    Uses @lru_cache to ensure config is loaded once and reused.
    Call get_config.cache_clear() to reload configuration.
    """
    # Values already in the environment win over the .env file
    load_dotenv(override=False)

    env_str = _get_env("APP_ENV", "development")
    try:
        env = Environment(env_str.lower())
    except ValueError:
        env = Environment.DEVELOPMENT

    is_prod = env == Environment.PRODUCTION

    return AppConfig(
        env=env,
        debug=_get_env_bool("DEBUG", default=not is_prod),
        analysis=AnalysisConfig(
            parallel=_get_env_bool("ANALYSIS_PARALLEL", True),
            max_workers=_get_env_int("ANALYSIS_MAX_WORKERS", 6),
            humans_only=_get_env_bool("ANALYSIS_HUMANS_ONLY", True),
        ),
        logging=LoggingConfig(
            level=_get_env("LOG_LEVEL", "DEBUG" if not is_prod else "INFO"),
            json_format=is_prod,
            log_file=_get_env("LOG_FILE"),
        ),
    )


def validate_config() -> bool:
    """
    Validate configuration on startup.

    Returns True if valid, raises ConfigurationError if not.
    """
    try:
        config = get_config()

        if config.analysis.max_workers < 1:
            raise ConfigurationError(
                f"ANALYSIS_MAX_WORKERS must be at least 1, got {config.analysis.max_workers}"
            )

        if config.logging.level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}, "
                f"got '{config.logging.level}'"
            )

        return True

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Configuration validation failed: {e}")


def configure_logging(config: Optional[AppConfig] = None) -> None:
    """Apply the logging section of the configuration."""
    from .logging_config import setup_logging

    config = config or get_config()
    setup_logging(
        level=config.logging.level,
        json_format=config.logging.json_format,
        log_file=config.logging.log_file,
    )
    logging.getLogger(__name__).debug(f"Configured for {config.env.value} environment")
