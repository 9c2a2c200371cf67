import os
from typing import Any, ClassVar, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv(".env")


class Settings(BaseModel):
    _instance: ClassVar[Optional["Settings"]] = None

    # Transport
    host: str = Field(default_factory=lambda: os.getenv("RELAY_HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("RELAY_PORT", "8080")))
    ping_interval: float = Field(
        default_factory=lambda: float(os.getenv("RELAY_PING_INTERVAL", "20")),
        description="WebSocket keepalive ping interval (seconds)",
    )
    ping_timeout: float = Field(
        default_factory=lambda: float(os.getenv("RELAY_PING_TIMEOUT", "20")),
        description="Seconds to wait for a pong before dropping the connection",
    )
    max_message_size: int = Field(
        default_factory=lambda: int(os.getenv("RELAY_MAX_MESSAGE_SIZE", str(1024 * 1024))),
        description="Maximum inbound frame size in bytes",
    )

    # Outbound
    outbound_queue_size: int = Field(
        default_factory=lambda: int(os.getenv("RELAY_OUTBOUND_QUEUE_SIZE", "256")),
        description="Frames buffered per connection before new ones are dropped",
    )

    # Diagnostics
    log_level: str = Field(default_factory=lambda: os.getenv("RELAY_LOG_LEVEL", "INFO"))
    snapshot_interval: float = Field(
        default_factory=lambda: float(os.getenv("RELAY_SNAPSHOT_INTERVAL", "60")),
        description="Seconds between registry snapshots in the log (0 disables)",
    )

    welcome_message: str = Field(
        default_factory=lambda: os.getenv("RELAY_WELCOME_MESSAGE", "Connected to signaling relay")
    )

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:
        if not hasattr(cls, "_instance") or cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        if hasattr(self, "_initialized"):
            return
        super().__init__(*args, **kwargs)
        self._initialized = True


# Create singleton instance
settings = Settings()
