"""Turns decoded Bitfinex frames into canonical events.

The dispatcher is synchronous and processes one frame at a time; it owns the
channel table updates driven by control messages and asks the subscription
lookup whether anyone still listens before decoding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from bitfinex_feed.ingestion.channels import ChannelTable
from bitfinex_feed.ingestion.decoders import (
    FeedDecodeError,
    decode_l2_snapshot,
    decode_l2_update,
    decode_l3_snapshot,
    decode_l3_update,
    decode_ticker,
    decode_trade,
    frame_sequence,
)
from bitfinex_feed.ingestion.subscriptions import StreamType, SubscriptionLookup
from bitfinex_feed.ingestion.ws_router import (
    FRAME_HANDLERS,
    FrameKind,
    classify_control,
    classify_frame,
    is_control,
)
from bitfinex_feed.models import Market

logger = structlog.get_logger(__name__)

# Frame kind → logical stream a caller subscribes to
FRAME_STREAMS: dict[FrameKind, StreamType] = {
    FrameKind.TICKER: StreamType.TICKER,
    FrameKind.TRADE: StreamType.TRADES,
    FrameKind.L2_SNAPSHOT: StreamType.LEVEL2_UPDATES,
    FrameKind.L2_UPDATE: StreamType.LEVEL2_UPDATES,
    FrameKind.L3_SNAPSHOT: StreamType.LEVEL3_UPDATES,
    FrameKind.L3_UPDATE: StreamType.LEVEL3_UPDATES,
}


@dataclass(frozen=True)
class FeedEvent:
    """A canonical event paired with the subscription that produced it."""

    name: str  # ticker, trade, l2snapshot, l2update, l3snapshot, l3update
    event: BaseModel
    market: Market


class FeedDispatcher:
    """Classifies frames and delegates to the matching decoder."""

    def __init__(self, table: ChannelTable, subscriptions: SubscriptionLookup) -> None:
        self._table = table
        self._subscriptions = subscriptions

    @property
    def table(self) -> ChannelTable:
        return self._table

    def dispatch(self, frame: Any) -> FeedEvent | None:
        """Process one frame. Returns the event produced, if any."""
        if is_control(frame):
            kind = classify_control(frame)
            getattr(self, FRAME_HANDLERS[kind])(frame)
            return None

        if not isinstance(frame, list) or not frame:
            return None
        if isinstance(frame[0], bool) or not isinstance(frame[0], int):
            return None

        binding = self._table.resolve(frame[0])
        if binding is None:
            return None

        kind = classify_frame(frame, binding)
        stream = FRAME_STREAMS.get(kind)
        if stream is None:
            return None

        market = self._subscriptions.get(stream, binding.pair)
        if market is None:
            return None

        handler = getattr(self, FRAME_HANDLERS[kind])
        try:
            event = handler(frame, market)
        except (FeedDecodeError, ValidationError) as e:
            logger.warning(
                "frame_decode_error",
                kind=kind.value,
                chan_id=binding.channel_id,
                pair=binding.pair,
                error=str(e),
            )
            return None

        if event is None:
            return None
        return FeedEvent(name=kind.value, event=event, market=market)

    # ── Control messages ──────────────────────────────────────────────

    def _handle_subscribed(self, msg: dict) -> None:
        try:
            self._table.bind(msg)
        except ValidationError as e:
            logger.warning("invalid_subscribe_ack", msg=msg, error=str(e))

    def _handle_unsubscribed(self, msg: dict) -> None:
        chan_id = msg.get("chanId")
        if msg.get("status", "OK") != "OK" or chan_id is None:
            logger.warning("unsubscribe_failed", msg=msg)
            return
        self._table.unbind(chan_id)

    def _handle_error(self, msg: dict) -> None:
        logger.warning("ws_server_error", code=msg.get("code"), error=msg.get("msg"), msg=msg)

    def _handle_info(self, msg: dict) -> None:
        logger.debug("ws_info", msg=msg)

    # ── Data frames ───────────────────────────────────────────────────

    def _handle_ticker(self, frame: list, market: Market):
        return decode_ticker(frame[1], market)

    def _handle_trade(self, frame: list, market: Market):
        # [chanId, 'tu', [id, unix, amount, price], seq]
        if len(frame) < 3:
            raise FeedDecodeError("trade frame has no row", frame)
        return decode_trade(frame[2], market)

    def _handle_l2_snapshot(self, frame: list, market: Market):
        return decode_l2_snapshot(frame[1], frame_sequence(frame), market)

    def _handle_l2_update(self, frame: list, market: Market):
        event = decode_l2_update(frame[1], frame_sequence(frame), market)
        if event is None:
            logger.debug("l2_update_non_numeric_price", frame=frame)
        return event

    def _handle_l3_snapshot(self, frame: list, market: Market):
        return decode_l3_snapshot(frame[1], frame_sequence(frame), market)

    def _handle_l3_update(self, frame: list, market: Market):
        return decode_l3_update(frame[1], frame_sequence(frame), market)

