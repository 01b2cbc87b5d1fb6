"""Classifies incoming Bitfinex frames by shape and channel metadata.

Data frames carry no type tag: ``[chanId, payload, seq?]``. What a payload
means depends on the channel it arrived on and, for books, on whether it is a
list of rows (snapshot) or a single row (update).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from bitfinex_feed.models import ChannelBinding, ChannelType

HEARTBEAT = "hb"
TRADE_UPDATE = "tu"
TRADE_EXECUTED = "te"


class FrameKind(str, Enum):
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
    ERROR = "error"
    INFO = "info"
    HEARTBEAT = "heartbeat"
    TICKER = "ticker"
    TRADE = "trade"
    L2_SNAPSHOT = "l2snapshot"
    L2_UPDATE = "l2update"
    L3_SNAPSHOT = "l3snapshot"
    L3_UPDATE = "l3update"
    IGNORED = "ignored"


# Frame kind → dispatcher handler method name
FRAME_HANDLERS: dict[FrameKind, str] = {
    FrameKind.SUBSCRIBED: "_handle_subscribed",
    FrameKind.UNSUBSCRIBED: "_handle_unsubscribed",
    FrameKind.ERROR: "_handle_error",
    FrameKind.INFO: "_handle_info",
    FrameKind.TICKER: "_handle_ticker",
    FrameKind.TRADE: "_handle_trade",
    FrameKind.L2_SNAPSHOT: "_handle_l2_snapshot",
    FrameKind.L2_UPDATE: "_handle_l2_update",
    FrameKind.L3_SNAPSHOT: "_handle_l3_snapshot",
    FrameKind.L3_UPDATE: "_handle_l3_update",
}


def is_control(frame: Any) -> bool:
    return isinstance(frame, dict)


def classify_control(msg: dict) -> FrameKind:
    """Classify a control object by its ``event`` field."""
    event = msg.get("event")
    if event == "subscribed":
        return FrameKind.SUBSCRIBED
    if event == "unsubscribed":
        return FrameKind.UNSUBSCRIBED
    if event == "error":
        return FrameKind.ERROR
    return FrameKind.INFO


def is_snapshot_payload(payload: Any) -> bool:
    """A book payload is a snapshot when it is a list of rows.

    An empty list is an empty snapshot (the book had no entries).
    """
    if not isinstance(payload, list):
        return False
    return not payload or isinstance(payload[0], list)


def classify_frame(frame: list, binding: ChannelBinding) -> FrameKind:
    """Classify a positional data frame already resolved to its channel."""
    if len(frame) < 2:
        return FrameKind.IGNORED

    payload = frame[1]
    if payload == HEARTBEAT:
        return FrameKind.HEARTBEAT

    if binding.channel_type is ChannelType.TICKER:
        return FrameKind.TICKER if isinstance(payload, list) else FrameKind.IGNORED

    if binding.channel_type is ChannelType.TRADES:
        # the initial history array and 'te' notices are not forwarded
        return FrameKind.TRADE if payload == TRADE_UPDATE else FrameKind.IGNORED

    if not isinstance(payload, list):
        return FrameKind.IGNORED

    snapshot = is_snapshot_payload(payload)
    if binding.is_raw_book:
        return FrameKind.L3_SNAPSHOT if snapshot else FrameKind.L3_UPDATE
    return FrameKind.L2_SNAPSHOT if snapshot else FrameKind.L2_UPDATE
