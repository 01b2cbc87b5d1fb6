"""Pydantic model for the trading pair a caller subscribes to."""

from __future__ import annotations

import orjson
from pydantic import BaseModel


class Market(BaseModel):
    """A Bitfinex trading pair and its base/quote assets.

    ``id`` is the exchange-native pair symbol (e.g. ``BTCUSD``) and is the key
    the feed uses in subscribe requests and acknowledgments.
    """

    id: str
    base: str
    quote: str

    model_config = {"frozen": True}

    @classmethod
    def from_pair(cls, pair: str) -> Market:
        """Split a Bitfinex pair symbol: ``BTCUSD`` or ``TESTBTC:TESTUSD``."""
        pair = pair.upper()
        if pair.startswith("T") and len(pair) > 6 and ":" not in pair:
            pair = pair[1:]  # trading symbol prefix, tBTCUSD
        if ":" in pair:
            base, quote = pair.split(":", 1)
        elif len(pair) == 6:
            base, quote = pair[:3], pair[3:]
        else:
            raise ValueError(f"cannot split pair {pair!r} into base/quote")
        return cls(id=pair, base=base, quote=quote)

    def to_redis_payload(self) -> str:
        return orjson.dumps(self.model_dump()).decode()
