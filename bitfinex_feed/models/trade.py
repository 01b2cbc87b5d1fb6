"""Pydantic model for trades from the Bitfinex 'trades' channel."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

import orjson
from pydantic import BaseModel, Field


class Trade(BaseModel):
    """A single executed trade."""

    exchange: str
    base: str
    quote: str
    trade_id: str
    unix_millis: int = Field(description="Trade time in unix milliseconds")
    side: Literal["buy", "sell"]
    price: str = Field(description="Fixed-point e.g. '33432.00000000'")
    amount: str = Field(description="Absolute amount, fixed-point")

    model_config = {"frozen": True}

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.unix_millis / 1000, tz=timezone.utc)

    def to_redis_payload(self) -> str:
        """Return a JSON string for Redis stream publishing."""
        return orjson.dumps(self.model_dump()).decode()
