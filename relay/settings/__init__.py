"""Settings module with nested configuration groups."""

import os
from enum import Enum
from typing import Any, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from relay.settings.models import (
    DatabaseSettings,
    LoggingSettings,
    RedisSettings,
    WebSocketSettings,
)


class Environment(str, Enum):
    """Application environment types."""

    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):  # type: ignore[misc]
    """
    Main settings class.

    Provides both flat access (environment variables) and nested access
    through read-only grouped models.
    """

    model_config = SettingsConfigDict(case_sensitive=True)

    # Environment configuration
    ENV: Environment = Environment.DEV

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./notifications.db"
    DB_ECHO: bool = False
    DB_INIT_RETRY_INTERVAL: int = 2
    DB_INIT_MAX_RETRIES: int = 5

    # Redis settings (only used by the redis broadcast backend)
    REDIS_IP: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_MAX_CONNECTIONS: int = 50
    REDIS_SOCKET_TIMEOUT: int = 5
    REDIS_CONNECT_TIMEOUT: int = 5

    # WebSocket / broadcast settings
    WS_OUTBOUND_QUEUE_SIZE: int = 100
    WS_SEND_TIMEOUT_SECONDS: float = 5.0
    WS_OVERFLOW_POLICY: Literal["drop", "disconnect"] = "disconnect"
    BROADCAST_BACKEND: Literal["local", "redis"] = "local"
    BROADCAST_REDIS_CHANNEL: str = "relay:broadcast"

    # Cross-origin settings
    ALLOWED_ORIGINS: list[str] = ["*"]
    ALLOWED_WS_ORIGINS: list[str] = ["*"]

    # Logging settings
    LOG_FILE_PATH: str = "logs/relay_errors.log"
    LOG_LEVEL: str = "INFO"
    LOG_CONSOLE_FORMAT: str = "human"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize settings with environment-specific defaults."""
        super().__init__(**kwargs)
        self._apply_environment_defaults()

    def _apply_environment_defaults(self) -> None:
        """Apply environment-specific configuration defaults."""
        if self.ENV == Environment.PRODUCTION:
            if os.getenv("LOG_CONSOLE_FORMAT") is None:
                self.LOG_CONSOLE_FORMAT = "json"
            if os.getenv("LOG_LEVEL") is None:
                self.LOG_LEVEL = "WARNING"

        elif self.ENV == Environment.STAGING:
            if os.getenv("LOG_CONSOLE_FORMAT") is None:
                self.LOG_CONSOLE_FORMAT = "json"
            if os.getenv("LOG_LEVEL") is None:
                self.LOG_LEVEL = "INFO"

        else:  # Environment.DEV
            if os.getenv("LOG_CONSOLE_FORMAT") is None:
                self.LOG_CONSOLE_FORMAT = "human"
            if os.getenv("LOG_LEVEL") is None:
                self.LOG_LEVEL = "DEBUG"

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings as nested model."""
        return DatabaseSettings(
            URL=self.DATABASE_URL,
            ECHO=self.DB_ECHO,
            INIT_RETRY_INTERVAL=self.DB_INIT_RETRY_INTERVAL,
            INIT_MAX_RETRIES=self.DB_INIT_MAX_RETRIES,
        )

    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings as nested model."""
        return RedisSettings(
            IP=self.REDIS_IP,
            PORT=self.REDIS_PORT,
            DB=self.REDIS_DB,
            MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            CONNECT_TIMEOUT=self.REDIS_CONNECT_TIMEOUT,
        )

    @property
    def websocket(self) -> WebSocketSettings:
        """Get WebSocket settings as nested model."""
        return WebSocketSettings(
            OUTBOUND_QUEUE_SIZE=self.WS_OUTBOUND_QUEUE_SIZE,
            SEND_TIMEOUT_SECONDS=self.WS_SEND_TIMEOUT_SECONDS,
            OVERFLOW_POLICY=self.WS_OVERFLOW_POLICY,
            ALLOWED_ORIGINS=self.ALLOWED_WS_ORIGINS,
            BROADCAST_BACKEND=self.BROADCAST_BACKEND,
            BROADCAST_REDIS_CHANNEL=self.BROADCAST_REDIS_CHANNEL,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings as nested model."""
        return LoggingSettings(
            FILE_PATH=self.LOG_FILE_PATH,
            LEVEL=self.LOG_LEVEL,
            CONSOLE_FORMAT=self.LOG_CONSOLE_FORMAT,
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENV == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENV == Environment.DEV


app_settings = Settings()

__all__ = [
    "Settings",
    "app_settings",
    "Environment",
    # Nested models
    "DatabaseSettings",
    "RedisSettings",
    "WebSocketSettings",
    "LoggingSettings",
]
