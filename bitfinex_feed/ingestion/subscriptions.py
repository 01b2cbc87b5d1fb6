"""Tracks which pairs the caller is subscribed to, per logical stream."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

import structlog

from bitfinex_feed.models import Market

logger = structlog.get_logger(__name__)


class StreamType(str, Enum):
    TICKER = "ticker"
    TRADES = "trades"
    LEVEL2_UPDATES = "level2updates"
    LEVEL3_UPDATES = "level3updates"


class SubscriptionLookup(Protocol):
    """What the dispatcher needs to know about the caller's subscriptions."""

    def get(self, stream_type: StreamType, pair: str) -> Market | None: ...


class SubscriptionRegistry:
    """In-memory registry of active subscriptions keyed by stream type and pair."""

    def __init__(self) -> None:
        self._subs: dict[StreamType, dict[str, Market]] = {t: {} for t in StreamType}

    def add(self, stream_type: StreamType, market: Market) -> bool:
        """Register a subscription. Returns False if it already existed."""
        stream_type = StreamType(stream_type)
        subs = self._subs[stream_type]
        if market.id in subs:
            return False
        subs[market.id] = market
        logger.debug("subscription_registered", stream=stream_type.value, pair=market.id)
        return True

    def remove(self, stream_type: StreamType, pair: str) -> Market | None:
        stream_type = StreamType(stream_type)
        market = self._subs[stream_type].pop(pair, None)
        if market is not None:
            logger.debug("subscription_removed", stream=stream_type.value, pair=pair)
        return market

    def get(self, stream_type: StreamType, pair: str) -> Market | None:
        return self._subs[StreamType(stream_type)].get(pair)

    def is_subscribed(self, stream_type: StreamType, pair: str) -> bool:
        return self.get(stream_type, pair) is not None

    def context(self, pair: str) -> Market | None:
        """Return the base/quote context for a pair from any stream."""
        for subs in self._subs.values():
            if pair in subs:
                return subs[pair]
        return None

    def items(self) -> list[tuple[StreamType, Market]]:
        return [(t, m) for t, subs in self._subs.items() for m in subs.values()]

    def __len__(self) -> int:
        return sum(len(subs) for subs in self._subs.values())
