"""Bitfinex WebSocket connection manager, the ingestion entry point.

Manages a persistent public WebSocket connection: sequence-id configuration,
subscription management, automatic reconnection, frame decoding, and delivery
of canonical events to listeners and the Redis stream publisher.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any

import orjson
import structlog
import websockets
import websockets.asyncio.client

from bitfinex_feed.cache.streams import RedisStreamPublisher
from bitfinex_feed.config import AppConfig, get_config
from bitfinex_feed.ingestion import requests
from bitfinex_feed.ingestion.channels import ChannelTable, binding_stream
from bitfinex_feed.ingestion.dispatcher import FeedDispatcher, FeedEvent
from bitfinex_feed.ingestion.subscriptions import StreamType, SubscriptionRegistry
from bitfinex_feed.models import Market

logger = structlog.get_logger(__name__)

EventListener = Callable[[FeedEvent], None]


class BitfinexWSClient:
    """
    Manages a persistent WebSocket connection to the Bitfinex v2 public feed.

    Channel ids are issued per connection, so every (re)connect clears the
    channel table and resubscribes everything in the registry.
    """

    exchange = "Bitfinex"
    has_tickers = True
    has_trades = True
    has_level2_updates = True
    has_level3_updates = True

    def __init__(
        self,
        config: AppConfig,
        registry: SubscriptionRegistry | None = None,
        table: ChannelTable | None = None,
        publisher: RedisStreamPublisher | None = None,
    ) -> None:
        self._config = config
        self._registry = registry if registry is not None else SubscriptionRegistry()
        self._table = table if table is not None else ChannelTable()
        self._publisher = publisher
        self._dispatcher = FeedDispatcher(self._table, self._registry)
        self._listeners: list[EventListener] = []

        self._ws: websockets.asyncio.client.ClientConnection | None = None
        self._connected = False
        self._closing = False
        self._reconnect_delay = 1.0

        # Stats
        self._event_counts: dict[str, int] = {}
        self._frame_count = 0
        self._connect_time: float = 0
        self._last_stats_time: float = 0

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    @property
    def channels(self) -> ChannelTable:
        return self._table

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    # ── Connection lifecycle ──────────────────────────────────────────

    async def connect(self) -> None:
        """Connect and process frames until ``close()``, reconnecting with backoff."""
        self._closing = False
        while not self._closing:
            try:
                self._ws = await websockets.asyncio.client.connect(
                    self._config.bitfinex.ws_url,
                    ping_interval=self._config.tuning.ws_ping_interval,
                    ping_timeout=self._config.tuning.ws_pong_timeout,
                    max_size=10 * 1024 * 1024,
                )
                self._connected = True
                self._connect_time = time.time()
                self._reconnect_delay = 1.0
                logger.info("websocket_connected", url=self._config.bitfinex.ws_url)

                await self._on_open()
                await self._message_loop()

            except websockets.ConnectionClosed as e:
                logger.warning("websocket_disconnected", code=e.code, reason=e.reason)
            except websockets.InvalidHandshake as e:
                logger.error("websocket_handshake_failed", error=str(e))
            except OSError as e:
                logger.error("websocket_connection_error", error=str(e))
            except Exception:
                logger.exception("websocket_unexpected_error")
            finally:
                self._connected = False
                self._ws = None

            if self._closing:
                break

            logger.info("websocket_reconnecting", delay=self._reconnect_delay)
            await asyncio.sleep(self._reconnect_delay)
            self._reconnect_delay = min(
                self._reconnect_delay * 2,
                self._config.tuning.ws_reconnect_max_delay,
            )

        logger.info("websocket_closed")

    async def close(self) -> None:
        self._closing = True
        if self._ws is not None:
            await self._ws.close()

    async def _on_open(self) -> None:
        """Reset channel ids, enable sequence ids and resubscribe."""
        self._table.clear()
        await self._send(requests.conf_request(self._config.bitfinex.conf_flags))

        subs = self._registry.items()
        if subs:
            logger.info("resubscribing", count=len(subs))
        for stream_type, market in subs:
            try:
                await self._send(self._subscribe_request(stream_type, market.id))
            except websockets.ConnectionClosed:
                raise
            except Exception:
                logger.exception("resubscribe_failed", stream=stream_type.value, pair=market.id)

    async def _send(self, cmd: dict[str, Any]) -> None:
        if not self._ws:
            return
        await self._ws.send(requests.encode(cmd))

    # ── Subscription management ───────────────────────────────────────

    async def subscribe_ticker(self, market: Market) -> bool:
        return await self._subscribe(StreamType.TICKER, market)

    async def unsubscribe_ticker(self, market: Market) -> bool:
        return await self._unsubscribe(StreamType.TICKER, market)

    async def subscribe_trades(self, market: Market) -> bool:
        return await self._subscribe(StreamType.TRADES, market)

    async def unsubscribe_trades(self, market: Market) -> bool:
        return await self._unsubscribe(StreamType.TRADES, market)

    async def subscribe_level2_updates(self, market: Market) -> bool:
        return await self._subscribe(StreamType.LEVEL2_UPDATES, market)

    async def unsubscribe_level2_updates(self, market: Market) -> bool:
        return await self._unsubscribe(StreamType.LEVEL2_UPDATES, market)

    async def subscribe_level3_updates(self, market: Market) -> bool:
        return await self._subscribe(StreamType.LEVEL3_UPDATES, market)

    async def unsubscribe_level3_updates(self, market: Market) -> bool:
        return await self._unsubscribe(StreamType.LEVEL3_UPDATES, market)

    def _subscribe_request(self, stream_type: StreamType, pair: str) -> dict[str, Any]:
        if stream_type is StreamType.TICKER:
            return requests.ticker_subscribe(pair)
        if stream_type is StreamType.TRADES:
            return requests.trades_subscribe(pair)
        if stream_type is StreamType.LEVEL2_UPDATES:
            return requests.level2_subscribe(pair, self._config.bitfinex.l2_book_length)
        return requests.level3_subscribe(pair, self._config.bitfinex.l3_book_length)

    async def _subscribe(self, stream_type: StreamType, market: Market) -> bool:
        """Register a subscription and send it if connected."""
        if not self._registry.add(stream_type, market):
            return False

        if self._connected:
            await self._send(self._subscribe_request(stream_type, market.id))

        logger.info("subscription_added", stream=stream_type.value, pair=market.id)
        return True

    async def _unsubscribe(self, stream_type: StreamType, market: Market) -> bool:
        """Drop a subscription and release its channel.

        The registry entry goes first so frames still in flight are
        discarded. The binding is removed when the exchange acknowledges, or
        immediately when there is no connection to send the request on.
        """
        if self._registry.remove(stream_type, market.id) is None:
            return False

        chan_id = self._table.find_by_type_and_pair(stream_type, market.id)
        if chan_id is None:
            logger.info("unsubscribed_unbound", stream=stream_type.value, pair=market.id)
            return True

        if self._connected and self._ws:
            await self._send(requests.unsubscribe_request(chan_id))
        else:
            self._table.unbind(chan_id)

        logger.info("unsubscribed", stream=stream_type.value, pair=market.id, chan_id=chan_id)
        return True

    # ── Message processing ────────────────────────────────────────────

    async def _message_loop(self) -> None:
        """Main frame processing loop."""
        self._last_stats_time = time.time()

        async for raw in self._ws:
            await self.handle_raw(raw)

            now = time.time()
            if now - self._last_stats_time >= self._config.tuning.ws_stats_interval:
                self._log_stats()
                self._last_stats_time = now

    async def handle_raw(self, raw: str | bytes) -> FeedEvent | None:
        """Decode, dispatch and deliver one raw frame."""
        try:
            frame = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.error("invalid_json", raw=raw[:200] if isinstance(raw, str) else str(raw)[:200])
            return None

        self._frame_count += 1
        try:
            feed_event = self._dispatcher.dispatch(frame)
        except Exception:
            logger.exception("dispatch_error", frame=str(frame)[:200])
            return None

        if isinstance(frame, dict) and frame.get("event") == "subscribed":
            await self._release_if_unwanted(frame.get("chanId"))

        if feed_event is not None:
            await self._deliver(feed_event)
        return feed_event

    async def _release_if_unwanted(self, chan_id: Any) -> None:
        """Unsubscribe a channel acknowledged after its subscriber went away."""
        binding = self._table.resolve(chan_id) if isinstance(chan_id, int) else None
        if binding is None:
            return

        stream_type = binding_stream(binding)
        if self._registry.get(stream_type, binding.pair) is not None:
            return

        logger.info(
            "releasing_unwanted_channel",
            chan_id=chan_id,
            stream=stream_type.value,
            pair=binding.pair,
        )
        if self._connected and self._ws:
            await self._send(requests.unsubscribe_request(chan_id))
        else:
            self._table.unbind(chan_id)

    async def _deliver(self, feed_event: FeedEvent) -> None:
        self._event_counts[feed_event.name] = self._event_counts.get(feed_event.name, 0) + 1

        for listener in self._listeners:
            try:
                listener(feed_event)
            except Exception:
                logger.exception("listener_error", event=feed_event.name)

        if self._publisher is not None:
            try:
                await self._publisher.publish(feed_event)
            except Exception:
                logger.exception("publish_error", event=feed_event.name)

    def _log_stats(self) -> None:
        """Log frame and event rate statistics."""
        uptime = time.time() - self._connect_time if self._connect_time else 0
        logger.info(
            "ws_stats",
            uptime_seconds=int(uptime),
            total_frames=self._frame_count,
            by_event=dict(self._event_counts),
            published=self._publisher.get_counts() if self._publisher else {},
            subscriptions=len(self._registry),
            channels=len(self._table),
        )
        self._event_counts.clear()
        self._frame_count = 0


async def main() -> None:
    """Entry point for the WebSocket ingestion process."""
    from bitfinex_feed.cache.redis_client import get_redis
    from bitfinex_feed.log import configure_logging

    config = get_config()
    configure_logging(config.logging)

    publisher = None
    if config.tuning.redis_publish_enabled:
        redis = await get_redis(config.redis)
        publisher = RedisStreamPublisher(redis)

    client = BitfinexWSClient(config, publisher=publisher)

    for pair in config.bitfinex.pair_list:
        market = Market.from_pair(pair)
        await client.subscribe_ticker(market)
        await client.subscribe_trades(market)
        await client.subscribe_level2_updates(market)

    await client.connect()


if __name__ == "__main__":
    asyncio.run(main())
