"""Decoders from Bitfinex positional arrays to canonical events.

Every decoder takes the payload rows of a frame plus the subscription context
(base/quote) and returns one canonical event. Malformed rows raise
``FeedDecodeError``; callers decide whether to drop the frame.
"""

from __future__ import annotations

import math
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from bitfinex_feed.models import (
    Level2Point,
    Level2Snapshot,
    Level2Update,
    Level3Point,
    Level3Snapshot,
    Level3Update,
    Market,
    Ticker,
    Trade,
)

EXCHANGE = "Bitfinex"
PRICE_DECIMALS = 8
PERCENT_DECIMALS = 2
ZERO_SIZE = format(Decimal(0), f".{PRICE_DECIMALS}f")


class FeedDecodeError(ValueError):
    """Raised when a frame does not have the shape its channel promises."""

    def __init__(self, message: str, row: Any = None) -> None:
        super().__init__(message)
        self.row = row


def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, (int, Decimal))


def to_fixed(value: Any, decimals: int = PRICE_DECIMALS) -> str:
    """Format a number as a fixed-point string, e.g. ``0.005 -> '0.00500000'``."""
    if not is_number(value):
        raise FeedDecodeError(f"expected a number, got {value!r}", value)
    # ties round away from zero
    quantum = Decimal(1).scaleb(-decimals)
    return format(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP), f".{decimals}f")


def _unpack(row: Any, arity: int, what: str) -> list:
    if not isinstance(row, (list, tuple)) or len(row) < arity:
        raise FeedDecodeError(f"{what} row must have {arity} fields", row)
    return list(row[:arity])


def _sequence(value: Any) -> int | None:
    """Coerce the trailing sequence field. Absent when sequencing is off."""
    if value is None:
        return None
    if is_number(value):
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    raise FeedDecodeError(f"invalid sequence id {value!r}", value)


def frame_sequence(frame: list, index: int = 2) -> int | None:
    return _sequence(frame[index]) if len(frame) > index else None


# ── Ticker ────────────────────────────────────────────────────────────


def decode_ticker(row: Any, market: Market, now_ms: int | None = None) -> Ticker:
    """Decode ``[bid, bidSize, ask, askSize, change, changePercent, last, volume, high, low]``.

    The ticker channel carries no timestamp, so processing time is used.
    """
    bid, bid_size, ask, ask_size, change, change_pct, last, volume, high, low = _unpack(
        row, 10, "ticker"
    )
    if not (is_number(last) and is_number(change)):
        raise FeedDecodeError("ticker last/change must be numbers", row)
    open_ = Decimal(str(last)) + Decimal(str(change))

    return Ticker(
        exchange=EXCHANGE,
        base=market.base,
        quote=market.quote,
        timestamp=now_ms if now_ms is not None else int(time.time() * 1000),
        last=to_fixed(last),
        open=to_fixed(open_),
        high=to_fixed(high),
        low=to_fixed(low),
        volume=to_fixed(volume),
        change=to_fixed(change),
        change_percent=to_fixed(change_pct, PERCENT_DECIMALS),
        bid=to_fixed(bid),
        bid_volume=to_fixed(bid_size),
        ask=to_fixed(ask),
        ask_volume=to_fixed(ask_size),
    )


# ── Trades ────────────────────────────────────────────────────────────


def decode_trade(row: Any, market: Market) -> Trade:
    """Decode ``[tradeId, unixSeconds, signedAmount, price]``.

    A positive amount is a buy (taker bought), anything else a sell.
    """
    trade_id, unix, amount, price = _unpack(row, 4, "trade")
    if not (is_number(trade_id) and is_number(unix) and is_number(amount)):
        raise FeedDecodeError("trade id/time/amount must be numbers", row)

    return Trade(
        exchange=EXCHANGE,
        base=market.base,
        quote=market.quote,
        trade_id=to_fixed(trade_id, 0),
        unix_millis=int(Decimal(str(unix)) * 1000),
        side="buy" if amount > 0 else "sell",
        price=to_fixed(price),
        amount=to_fixed(abs(amount)),
    )


# ── Level 2 (aggregated book) ─────────────────────────────────────────


def _level2_point(row: Any) -> tuple[Level2Point, bool]:
    price, count, size = _unpack(row, 3, "level2")
    if not is_number(size):
        raise FeedDecodeError("level2 size must be a number", row)
    point = Level2Point(price=to_fixed(price), size=to_fixed(abs(size)), count=to_fixed(count, 0))
    return point, size > 0


def decode_l2_snapshot(rows: Any, sequence_id: int | None, market: Market) -> Level2Snapshot:
    """Decode ``[[price, count, signedSize], ...]`` into bids and asks."""
    if not isinstance(rows, list):
        raise FeedDecodeError("level2 snapshot must be a list of rows", rows)

    bids: list[Level2Point] = []
    asks: list[Level2Point] = []
    for row in rows:
        point, is_bid = _level2_point(row)
        (bids if is_bid else asks).append(point)

    return Level2Snapshot(
        exchange=EXCHANGE,
        base=market.base,
        quote=market.quote,
        sequence_id=sequence_id,
        bids=bids,
        asks=asks,
    )


def decode_l2_update(row: Any, sequence_id: int | None, market: Market) -> Level2Update | None:
    """Decode a single ``[price, count, signedSize]`` level change.

    ``count == 0`` removes the level; the exchange sends the size as 1 or -1
    to carry the side, so the canonical size is forced to zero. Returns None
    when the price is not numeric.
    """
    row = _unpack(row, 3, "level2")
    if not is_number(row[0]):
        return None

    point, is_bid = _level2_point(row)
    if row[1] == 0:
        point = point.model_copy(update={"size": ZERO_SIZE})

    return Level2Update(
        exchange=EXCHANGE,
        base=market.base,
        quote=market.quote,
        sequence_id=sequence_id,
        bids=[point] if is_bid else [],
        asks=[] if is_bid else [point],
    )


# ── Level 3 (raw book) ────────────────────────────────────────────────


def _level3_point(row: Any) -> tuple[Level3Point, bool]:
    order_id, price, size = _unpack(row, 3, "level3")
    if not is_number(size):
        raise FeedDecodeError("level3 size must be a number", row)
    oid = to_fixed(order_id, 0) if is_number(order_id) else str(order_id)
    return Level3Point(order_id=oid, price=to_fixed(price), size=to_fixed(abs(size))), size > 0


def decode_l3_snapshot(rows: Any, sequence_id: int | None, market: Market) -> Level3Snapshot:
    """Decode ``[[orderId, price, signedSize], ...]`` into bids and asks."""
    if not isinstance(rows, list):
        raise FeedDecodeError("level3 snapshot must be a list of rows", rows)

    bids: list[Level3Point] = []
    asks: list[Level3Point] = []
    for row in rows:
        point, is_bid = _level3_point(row)
        (bids if is_bid else asks).append(point)

    return Level3Snapshot(
        exchange=EXCHANGE,
        base=market.base,
        quote=market.quote,
        sequence_id=sequence_id,
        bids=bids,
        asks=asks,
    )


def decode_l3_update(row: Any, sequence_id: int | None, market: Market) -> Level3Update:
    """Decode a single ``[orderId, price, signedSize]`` order change.

    Sizes are forwarded as-is; a zero size is not remapped.
    """
    point, is_bid = _level3_point(row)
    return Level3Update(
        exchange=EXCHANGE,
        base=market.base,
        quote=market.quote,
        sequence_id=sequence_id,
        bids=[point] if is_bid else [],
        asks=[] if is_bid else [point],
    )
