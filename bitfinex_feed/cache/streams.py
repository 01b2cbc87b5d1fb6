"""Redis stream publishing for canonical Bitfinex events."""

from __future__ import annotations

from typing import TYPE_CHECKING

import redis.asyncio as aioredis
import structlog

if TYPE_CHECKING:
    from bitfinex_feed.ingestion.dispatcher import FeedEvent

logger = structlog.get_logger(__name__)

# Stream names
STREAM_TICKER = "bitfinex:ticker"
STREAM_TRADES = "bitfinex:trades"
STREAM_L2_SNAPSHOTS = "bitfinex:l2:snapshots"
STREAM_L2_UPDATES = "bitfinex:l2:updates"
STREAM_L3_SNAPSHOTS = "bitfinex:l3:snapshots"
STREAM_L3_UPDATES = "bitfinex:l3:updates"

# Event name → stream
EVENT_STREAMS: dict[str, str] = {
    "ticker": STREAM_TICKER,
    "trade": STREAM_TRADES,
    "l2snapshot": STREAM_L2_SNAPSHOTS,
    "l2update": STREAM_L2_UPDATES,
    "l3snapshot": STREAM_L3_SNAPSHOTS,
    "l3update": STREAM_L3_UPDATES,
}

# Max stream length (approximate trimming)
STREAM_MAXLEN = 100_000


class RedisStreamPublisher:
    """Publishes canonical events to one Redis stream per event name."""

    def __init__(self, redis: aioredis.Redis, maxlen: int = STREAM_MAXLEN) -> None:
        self._redis = redis
        self._maxlen = maxlen
        self._msg_count: dict[str, int] = {}

    async def publish(self, feed_event: FeedEvent) -> str | None:
        """Publish an event to its stream. Returns the message ID."""
        stream = EVENT_STREAMS.get(feed_event.name)
        if stream is None:
            logger.warning("unknown_event_stream", event=feed_event.name)
            return None

        msg_id = await self._redis.xadd(
            stream,
            {"data": feed_event.event.to_redis_payload(), "pair": feed_event.market.id},
            maxlen=self._maxlen,
            approximate=True,
        )
        self._increment(stream)
        return msg_id

    def _increment(self, stream: str) -> None:
        self._msg_count[stream] = self._msg_count.get(stream, 0) + 1

    def get_counts(self) -> dict[str, int]:
        """Return and reset publish counts."""
        counts = dict(self._msg_count)
        self._msg_count.clear()
        return counts
