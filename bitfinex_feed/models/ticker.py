"""Pydantic model for the canonical best bid/ask ticker."""

from __future__ import annotations

from datetime import datetime, timezone

import orjson
from pydantic import BaseModel, Field


class Ticker(BaseModel):
    """A ticker update normalized from the Bitfinex 'ticker' channel.

    All numeric fields are fixed-point strings with 8 decimals except
    ``change_percent`` which carries 2.
    """

    exchange: str
    base: str
    quote: str
    timestamp: int = Field(description="Processing time in unix milliseconds")
    last: str
    open: str
    high: str
    low: str
    volume: str
    change: str
    change_percent: str
    bid: str
    bid_volume: str
    ask: str
    ask_volume: str

    model_config = {"frozen": True}

    @property
    def ts(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    def to_redis_payload(self) -> str:
        return orjson.dumps(self.model_dump()).decode()
