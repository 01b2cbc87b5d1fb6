"""Pydantic models for order book snapshots and updates.

Level 2 is the aggregated book (one entry per price level), level 3 is the
raw book (one entry per order id).
"""

from __future__ import annotations

import orjson
from pydantic import BaseModel, Field


class Level2Point(BaseModel):
    price: str
    size: str = Field(description="Absolute size; '0.00000000' removes the level")
    count: str

    model_config = {"frozen": True}


class Level3Point(BaseModel):
    order_id: str
    price: str
    size: str

    model_config = {"frozen": True}


class _BookEvent(BaseModel):
    exchange: str
    base: str
    quote: str
    sequence_id: int | None = Field(default=None, description="Exchange sequence, forwarded as-is")

    model_config = {"frozen": True}

    def to_redis_payload(self) -> str:
        return orjson.dumps(self.model_dump()).decode()


class Level2Snapshot(_BookEvent):
    """Full aggregated book sent right after subscribing."""

    bids: list[Level2Point] = Field(default_factory=list)
    asks: list[Level2Point] = Field(default_factory=list)


class Level2Update(_BookEvent):
    """A single price level change. Exactly one side holds one point."""

    bids: list[Level2Point] = Field(default_factory=list)
    asks: list[Level2Point] = Field(default_factory=list)


class Level3Snapshot(_BookEvent):
    """Full raw book sent right after subscribing."""

    bids: list[Level3Point] = Field(default_factory=list)
    asks: list[Level3Point] = Field(default_factory=list)


class Level3Update(_BookEvent):
    """A single order change."""

    bids: list[Level3Point] = Field(default_factory=list)
    asks: list[Level3Point] = Field(default_factory=list)
