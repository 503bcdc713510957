"""
Configuration management for the rollup Web SDK

Loads settings from environment variables and .env file, and wires the
package logger so that coordinator logs carry their session correlation ID.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, List

from dotenv import load_dotenv


def _load_env_file():
    """Load .env file from project root"""
    current = Path(__file__).parent.parent  # rollup_web_sdk package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()

_TRUE_VALUES = ("true", "1", "yes", "on")


def _env(key: str, default: Any) -> Any:
    """
    Read an environment variable, converted to the type of its default

    Booleans accept true/1/yes/on (any case). Unparseable numbers log a
    warning and fall back to the default.
    """
    raw = os.getenv(key)
    if raw is None:
        return default
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUE_VALUES
    try:
        return type(default)(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid value for {key}={raw!r}, using default={default!r}"
        )
        return default


@dataclass
class RollupProviderConfig:
    """Rollup provider (remote status endpoint) configuration"""
    url: str = field(default_factory=lambda: _env("ROLLUP_PROVIDER_URL", ""))
    status_path: str = field(default_factory=lambda: _env("ROLLUP_STATUS_PATH", "/status"))
    timeout_seconds: float = field(default_factory=lambda: _env("ROLLUP_STATUS_TIMEOUT", 10.0))
    max_retries: int = field(default_factory=lambda: _env("ROLLUP_STATUS_MAX_RETRIES", 3))
    retry_delay: float = field(default_factory=lambda: _env("ROLLUP_STATUS_RETRY_DELAY", 1.0))


@dataclass
class SdkConfig:
    """Coordinator / SDK facade configuration"""
    clear_db: bool = field(default_factory=lambda: _env("SDK_CLEAR_DB", False))
    # Interval between chain id re-checks while waiting for the user to switch networks
    network_poll_interval: float = field(default_factory=lambda: _env("NETWORK_POLL_INTERVAL", 0.5))


# %(correlation_id)s is filled by CorrelationIdFilter, "-" outside an init() session
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(correlation_id)s] %(message)s"


@dataclass
class LoggingConfig:
    """
    Handler settings used by setup_logging()

    Environment variables:
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Format string, may reference %(correlation_id)s
        LOG_CONSOLE: Write to stderr (default: true)
        LOG_FILE: Rotating log file; empty means no file (default)
        LOG_MAX_BYTES / LOG_BACKUP_COUNT: Rotation limits (1MB, 3 files)
    """
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _env("LOG_FORMAT", DEFAULT_LOG_FORMAT))
    console_output: bool = field(default_factory=lambda: _env("LOG_CONSOLE", True))
    log_file: str = field(default_factory=lambda: _env("LOG_FILE", ""))
    max_bytes: int = field(default_factory=lambda: _env("LOG_MAX_BYTES", 1024 * 1024))
    backup_count: int = field(default_factory=lambda: _env("LOG_BACKUP_COUNT", 3))

    @property
    def level(self) -> int:
        """Numeric level, INFO for unknown names"""
        value = logging.getLevelName(self.log_level.upper())
        return value if isinstance(value, int) else logging.INFO


@dataclass
class Config:
    """
    Main configuration container

    Loads all settings from environment variables and .env file.

    Usage:
        from rollup_web_sdk.config import config

        print(config.rollup_provider.url)
        print(config.sdk.network_poll_interval)
    """
    rollup_provider: RollupProviderConfig = field(default_factory=RollupProviderConfig)
    sdk: SdkConfig = field(default_factory=SdkConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def reload(cls) -> "Config":
        """Reload configuration from environment"""
        _load_env_file()
        return cls()


# Global config instance
config = Config()


def get_config() -> Config:
    """Get global configuration instance"""
    return config


def reload_config() -> Config:
    """Reload and return new configuration"""
    global config
    config = Config.reload()
    return config


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "rollup_web_sdk",
) -> logging.Logger:
    """
    Attach console and/or rotating file handlers to the package logger

    Each handler carries a CorrelationIdFilter, so every line logged while a
    WebSdk.init() session runs shows that session's correlation ID. Calling
    it again replaces the previously installed handlers.

    Example:
        setup_logging(LoggingConfig(log_level="DEBUG", log_file="web_sdk.log"))
    """
    from logging.handlers import RotatingFileHandler

    # Deferred: infra.retry reads the global config at import time
    from .infra.retry import CorrelationIdFilter

    log_config = log_config or config.logging
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    handlers: List[logging.Handler] = []
    if log_config.console_output:
        handlers.append(logging.StreamHandler())
    if log_config.log_file:
        Path(log_config.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding="utf-8",
        ))

    formatter = logging.Formatter(log_config.log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(CorrelationIdFilter())
        logger.addHandler(handler)

    logger.debug(f"Logging configured: level={log_config.log_level} file={log_config.log_file or '-'}")
    return logger
