"""Nested settings models (BaseModel, not BaseSettings)."""

from typing import Literal

from pydantic import BaseModel


class DatabaseSettings(BaseModel):  # type: ignore[misc]
    """Database configuration."""

    URL: str
    ECHO: bool = False
    INIT_RETRY_INTERVAL: int = 2
    INIT_MAX_RETRIES: int = 5


class RedisSettings(BaseModel):  # type: ignore[misc]
    """Redis configuration."""

    IP: str = "localhost"
    PORT: int = 6379
    DB: int = 0
    MAX_CONNECTIONS: int = 50
    SOCKET_TIMEOUT: int = 5
    CONNECT_TIMEOUT: int = 5

    @property
    def url(self) -> str:
        """Construct Redis URL."""
        return f"redis://{self.IP}:{self.PORT}"


class WebSocketSettings(BaseModel):  # type: ignore[misc]
    """WebSocket and broadcast configuration."""

    OUTBOUND_QUEUE_SIZE: int = 100
    SEND_TIMEOUT_SECONDS: float = 5.0
    OVERFLOW_POLICY: Literal["drop", "disconnect"] = "disconnect"
    ALLOWED_ORIGINS: list[str] = ["*"]
    BROADCAST_BACKEND: Literal["local", "redis"] = "local"
    BROADCAST_REDIS_CHANNEL: str = "relay:broadcast"


class LoggingSettings(BaseModel):  # type: ignore[misc]
    """Logging configuration."""

    FILE_PATH: str = "logs/relay_errors.log"
    LEVEL: str = "INFO"
    CONSOLE_FORMAT: str = "human"
