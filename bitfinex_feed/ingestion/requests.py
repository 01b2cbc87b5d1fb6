"""Builders for outbound Bitfinex websocket requests."""

from __future__ import annotations

from typing import Any

import orjson

from bitfinex_feed.models.channel import RAW_PRECISION


def conf_request(flags: int) -> dict[str, Any]:
    return {"event": "conf", "flags": flags}


def subscribe_request(channel: str, pair: str, **options: Any) -> dict[str, Any]:
    """``{event: subscribe, channel, pair, ...}``; None options are left out."""
    cmd: dict[str, Any] = {"event": "subscribe", "channel": channel, "pair": pair}
    cmd.update({k: v for k, v in options.items() if v is not None})
    return cmd


def ticker_subscribe(pair: str) -> dict[str, Any]:
    return subscribe_request("ticker", pair)


def trades_subscribe(pair: str) -> dict[str, Any]:
    return subscribe_request("trades", pair)


def level2_subscribe(pair: str, length: int) -> dict[str, Any]:
    return subscribe_request("book", pair, len=str(length))


def level3_subscribe(pair: str, length: int) -> dict[str, Any]:
    return subscribe_request("book", pair, prec=RAW_PRECISION, length=str(length))


def unsubscribe_request(chan_id: int) -> dict[str, Any]:
    return {"event": "unsubscribe", "chanId": chan_id}


def encode(cmd: dict[str, Any]) -> str:
    return orjson.dumps(cmd).decode()
