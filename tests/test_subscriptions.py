"""Unit tests for the subscription registry and request builders."""

from __future__ import annotations

from bitfinex_feed.ingestion import requests
from bitfinex_feed.ingestion.subscriptions import StreamType, SubscriptionRegistry
from bitfinex_feed.models import Market


class TestSubscriptionRegistry:
    def test_add_get_remove(self, btcusd: Market) -> None:
        reg = SubscriptionRegistry()
        assert reg.add(StreamType.TRADES, btcusd) is True
        assert reg.get(StreamType.TRADES, "BTCUSD") == btcusd
        assert reg.get(StreamType.TICKER, "BTCUSD") is None
        assert reg.remove("trades", "BTCUSD") == btcusd
        assert reg.is_subscribed(StreamType.TRADES, "BTCUSD") is False

    def test_context_from_any_stream(self, btcusd: Market) -> None:
        reg = SubscriptionRegistry()
        reg.add(StreamType.LEVEL3_UPDATES, btcusd)
        assert reg.context("BTCUSD") == btcusd
        assert reg.context("ETHUSD") is None

    def test_items_and_len(self, registry: SubscriptionRegistry) -> None:
        assert len(registry) == 4
        assert {t for t, _ in registry.items()} == set(StreamType)


class TestRequests:
    def test_unsubscribe(self) -> None:
        assert requests.unsubscribe_request(17) == {"event": "unsubscribe", "chanId": 17}

    def test_none_options_dropped(self) -> None:
        assert requests.subscribe_request("book", "BTCUSD", len=None, prec="P1") == {
            "event": "subscribe",
            "channel": "book",
            "pair": "BTCUSD",
            "prec": "P1",
        }

    def test_encode(self) -> None:
        assert requests.encode(requests.conf_request(65536)) == '{"event":"conf","flags":65536}'
