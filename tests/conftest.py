"""Shared test fixtures for the bitfinex-feed test suite."""

from __future__ import annotations

import pytest

from bitfinex_feed.ingestion.channels import ChannelTable
from bitfinex_feed.ingestion.dispatcher import FeedDispatcher
from bitfinex_feed.ingestion.subscriptions import StreamType, SubscriptionRegistry
from bitfinex_feed.models import Market


@pytest.fixture
def btcusd() -> Market:
    return Market(id="BTCUSD", base="BTC", quote="USD")


@pytest.fixture
def ticker_ack() -> dict:
    """Subscription acknowledgment for the ticker channel."""
    return {
        "event": "subscribed",
        "channel": "ticker",
        "chanId": 1,
        "symbol": "tBTCUSD",
        "pair": "BTCUSD",
    }


@pytest.fixture
def trades_ack() -> dict:
    return {
        "event": "subscribed",
        "channel": "trades",
        "chanId": 2,
        "symbol": "tBTCUSD",
        "pair": "BTCUSD",
    }


@pytest.fixture
def l2_ack() -> dict:
    """Aggregated book acknowledgment (P0 precision, 250 levels)."""
    return {
        "event": "subscribed",
        "channel": "book",
        "chanId": 3,
        "symbol": "tBTCUSD",
        "prec": "P0",
        "freq": "F0",
        "len": "250",
        "pair": "BTCUSD",
    }


@pytest.fixture
def l3_ack() -> dict:
    """Raw book acknowledgment (R0 precision)."""
    return {
        "event": "subscribed",
        "channel": "book",
        "chanId": 4,
        "symbol": "tBTCUSD",
        "prec": "R0",
        "freq": "F0",
        "len": "100",
        "pair": "BTCUSD",
    }


@pytest.fixture
def all_acks(ticker_ack: dict, trades_ack: dict, l2_ack: dict, l3_ack: dict) -> list[dict]:
    return [ticker_ack, trades_ack, l2_ack, l3_ack]


@pytest.fixture
def registry(btcusd: Market) -> SubscriptionRegistry:
    """Registry subscribed to every stream for BTCUSD."""
    reg = SubscriptionRegistry()
    for stream_type in StreamType:
        reg.add(stream_type, btcusd)
    return reg


@pytest.fixture
def table() -> ChannelTable:
    return ChannelTable()


@pytest.fixture
def dispatcher(table: ChannelTable, registry: SubscriptionRegistry, all_acks: list[dict]) -> FeedDispatcher:
    """Dispatcher with all four BTCUSD channels already acknowledged."""
    d = FeedDispatcher(table, registry)
    for ack in all_acks:
        d.dispatch(ack)
    return d
