"""Central configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class BitfinexConfig(BaseSettings):
    ws_url: str = Field(default="wss://api.bitfinex.com/ws/2", alias="BITFINEX_WS_URL")
    # 65536 asks the exchange to append a sequence id to every frame
    conf_flags: int = Field(default=65536, alias="BITFINEX_CONF_FLAGS")
    l2_book_length: int = Field(default=250, alias="BITFINEX_L2_BOOK_LENGTH")
    l3_book_length: int = Field(default=100, alias="BITFINEX_L3_BOOK_LENGTH")
    pairs: str = Field(default="BTCUSD,ETHUSD", alias="BITFINEX_PAIRS")

    @property
    def pair_list(self) -> list[str]:
        return [p.strip().upper() for p in self.pairs.split(",") if p.strip()]


class RedisConfig(BaseSettings):
    host: str = Field(default="localhost", alias="REDIS_HOST")
    port: int = Field(default=6379, alias="REDIS_PORT")
    db: int = Field(default=0, alias="REDIS_DB")
    password: str = Field(default="", alias="REDIS_PASSWORD")
    max_connections: int = Field(default=10, alias="REDIS_MAX_CONNECTIONS")

    @property
    def url(self) -> str:
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class TuningConfig(BaseSettings):
    ws_ping_interval: int = Field(default=30, alias="WS_PING_INTERVAL")
    ws_pong_timeout: int = Field(default=10, alias="WS_PONG_TIMEOUT")
    ws_reconnect_max_delay: int = Field(default=60, alias="WS_RECONNECT_MAX_DELAY")
    ws_stats_interval: int = Field(default=60, alias="WS_STATS_INTERVAL")
    redis_publish_enabled: bool = Field(default=False, alias="REDIS_PUBLISH_ENABLED")


class LoggingConfig(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")


class AppConfig:
    """Aggregated application configuration."""

    def __init__(self) -> None:
        self.bitfinex = BitfinexConfig()
        self.redis = RedisConfig()
        self.tuning = TuningConfig()
        self.logging = LoggingConfig()


def get_config() -> AppConfig:
    """Create and return the application configuration."""
    return AppConfig()
