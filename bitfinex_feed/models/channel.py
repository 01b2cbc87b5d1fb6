"""Pydantic model for the metadata Bitfinex attaches to a subscribed channel."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

RAW_PRECISION = "R0"


class ChannelType(str, Enum):
    TICKER = "ticker"
    TRADES = "trades"
    BOOK = "book"


class PrecisionClass(str, Enum):
    AGGREGATED = "aggregated"  # price levels (P0..P4)
    RAW = "raw"  # individual orders (R0)


class ChannelBinding(BaseModel):
    """Subscription metadata bound to a transient channel id.

    Built from a ``subscribed`` acknowledgment such as::

        {"event": "subscribed", "channel": "book", "chanId": 17,
         "symbol": "tBTCUSD", "pair": "BTCUSD", "prec": "R0", "len": "100"}
    """

    channel_id: int = Field(alias="chanId")
    channel_type: ChannelType = Field(alias="channel")
    pair: str
    precision_class: PrecisionClass | None = Field(default=None, alias="prec")
    requested_depth: int | None = Field(default=None, alias="len")

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def _pair_from_symbol(cls, data: Any) -> Any:
        # Some acks only carry the prefixed symbol ("tBTCUSD")
        if isinstance(data, dict) and not data.get("pair") and data.get("symbol"):
            symbol = str(data["symbol"])
            data = {**data, "pair": symbol[1:] if symbol.startswith("t") else symbol}
        return data

    @field_validator("precision_class", mode="before")
    @classmethod
    def _classify_precision(cls, value: Any) -> Any:
        if value is None or isinstance(value, PrecisionClass):
            return value
        if value in (PrecisionClass.RAW.value, PrecisionClass.AGGREGATED.value):
            return value
        return PrecisionClass.RAW if value == RAW_PRECISION else PrecisionClass.AGGREGATED

    @property
    def is_raw_book(self) -> bool:
        return self.channel_type is ChannelType.BOOK and self.precision_class is PrecisionClass.RAW

    @property
    def is_aggregated_book(self) -> bool:
        return self.channel_type is ChannelType.BOOK and self.precision_class is not PrecisionClass.RAW
