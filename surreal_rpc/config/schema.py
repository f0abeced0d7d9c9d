"""Configuration schema using Pydantic.

Persisted to ~/.surreal_rpc/config.json; every field can also be set through
``SURREAL_RPC_*`` environment variables.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientConfig(BaseSettings):
    """Connection and session settings for SurrealClient."""
    url: str = "ws://127.0.0.1:8000/rpc"
    username: str | None = None
    password: str | None = None
    namespace: str | None = None
    database: str | None = None
    request_timeout: float | None = Field(default=None, gt=0)  # None waits forever
    open_timeout: float | None = 10.0
    ping_interval: float | None = 20.0  # None disables keepalive pings
    max_message_size: int | None = 2**24
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SURREAL_RPC_",
        env_nested_delimiter="__",
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and self.password is not None

    @property
    def has_namespace(self) -> bool:
        return bool(self.namespace) and bool(self.database)
