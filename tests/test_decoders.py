"""Unit tests for the positional-array decoders."""

from __future__ import annotations

import pytest

from bitfinex_feed.ingestion.decoders import (
    FeedDecodeError,
    decode_l2_snapshot,
    decode_l2_update,
    decode_l3_snapshot,
    decode_l3_update,
    decode_ticker,
    decode_trade,
    frame_sequence,
    to_fixed,
)
from bitfinex_feed.models import Market


class TestFixedPoint:
    def test_eight_decimals(self) -> None:
        assert to_fixed(0.005) == "0.00500000"
        assert to_fixed(33432) == "33432.00000000"

    def test_small_float_not_scientific(self) -> None:
        assert to_fixed(1e-07) == "0.00000010"

    @pytest.mark.parametrize(
        ("value", "decimals", "expected"),
        [
            (0.125, 2, "0.13"),
            (0.005, 2, "0.01"),
            (-0.125, 2, "-0.13"),
            (0.000000125, 8, "0.00000013"),
            (1.000000005, 8, "1.00000001"),
        ],
    )
    def test_ties_round_away_from_zero(self, value: float, decimals: int, expected: str) -> None:
        assert to_fixed(value, decimals) == expected

    def test_change_percent_tie(self, btcusd: Market) -> None:
        ticker = decode_ticker([1, 1, 1, 1, 0, 0.125, 1, 1, 1, 1], btcusd, now_ms=0)
        assert ticker.change_percent == "0.13"

    def test_integer_string(self) -> None:
        assert to_fixed(560287312, 0) == "560287312"

    @pytest.mark.parametrize("value", ["1.0", None, True, float("nan"), [1]])
    def test_rejects_non_numbers(self, value) -> None:
        with pytest.raises(FeedDecodeError):
            to_fixed(value)


class TestTicker:
    def test_open_is_last_plus_change(self, btcusd: Market) -> None:
        ticker = decode_ticker([100, 1, 102, 1, 2, 1.5, 101, 500, 105, 99], btcusd, now_ms=1234)
        assert ticker.open == "103.00000000"
        assert ticker.last == "101.00000000"
        assert ticker.change == "2.00000000"
        assert ticker.change_percent == "1.50"
        assert ticker.bid == "100.00000000"
        assert ticker.bid_volume == "1.00000000"
        assert ticker.ask == "102.00000000"
        assert ticker.ask_volume == "1.00000000"
        assert ticker.volume == "500.00000000"
        assert ticker.high == "105.00000000"
        assert ticker.low == "99.00000000"
        assert ticker.timestamp == 1234
        assert (ticker.exchange, ticker.base, ticker.quote) == ("Bitfinex", "BTC", "USD")

    def test_negative_change(self, btcusd: Market) -> None:
        ticker = decode_ticker([1, 1, 1, 1, -0.5, -0.01, 10.25, 1, 1, 1], btcusd)
        assert ticker.open == "9.75000000"
        assert ticker.change_percent == "-0.01"
        assert ticker.timestamp > 0

    def test_short_row(self, btcusd: Market) -> None:
        with pytest.raises(FeedDecodeError):
            decode_ticker([100, 1, 102], btcusd)


class TestTrade:
    def test_buy(self, btcusd: Market) -> None:
        trade = decode_trade([1, 1609712228, 0.005, 33432], btcusd)
        assert trade.side == "buy"
        assert trade.amount == "0.00500000"
        assert trade.price == "33432.00000000"
        assert trade.unix_millis == 1609712228000
        assert trade.trade_id == "1"

    def test_sell(self, btcusd: Market) -> None:
        trade = decode_trade([1, 1609712228, -0.005, 33432], btcusd)
        assert trade.side == "sell"
        assert trade.amount == "0.00500000"

    def test_non_numeric_amount(self, btcusd: Market) -> None:
        with pytest.raises(FeedDecodeError):
            decode_trade([1, 1609712228, "x", 33432], btcusd)


class TestLevel2:
    def test_snapshot_partitions_by_sign(self, btcusd: Market) -> None:
        snap = decode_l2_snapshot([[100, 1, 0.5], [99, 1, -0.3]], 12, btcusd)
        assert [p.model_dump() for p in snap.bids] == [
            {"price": "100.00000000", "size": "0.50000000", "count": "1"}
        ]
        assert [p.model_dump() for p in snap.asks] == [
            {"price": "99.00000000", "size": "0.30000000", "count": "1"}
        ]
        assert snap.sequence_id == 12

    def test_snapshot_preserves_order_within_side(self, btcusd: Market) -> None:
        rows = [[100, 1, 1], [101, 2, -1], [99, 3, 2], [102, 1, -2]]
        snap = decode_l2_snapshot(rows, None, btcusd)
        assert [p.price for p in snap.bids] == ["100.00000000", "99.00000000"]
        assert [p.price for p in snap.asks] == ["101.00000000", "102.00000000"]
        assert snap.sequence_id is None

    @pytest.mark.parametrize("size", [1, -1, 5, -0.25])
    def test_delete_forces_zero_size(self, btcusd: Market, size: float) -> None:
        update = decode_l2_update([100, 0, size], 5, btcusd)
        points = update.bids + update.asks
        assert len(points) == 1
        assert points[0].size == "0.00000000"
        assert points[0].count == "0"

    def test_delete_keeps_side(self, btcusd: Market) -> None:
        bid = decode_l2_update([100, 0, 1], 5, btcusd)
        ask = decode_l2_update([100, 0, -1], 5, btcusd)
        assert len(bid.bids) == 1 and not bid.asks
        assert len(ask.asks) == 1 and not ask.bids

    def test_update_uses_absolute_size(self, btcusd: Market) -> None:
        update = decode_l2_update([101, 3, -1.5], 6, btcusd)
        assert update.asks[0].size == "1.50000000"
        assert update.asks[0].count == "3"
        assert update.bids == []
        assert update.sequence_id == 6

    def test_non_numeric_price_discarded(self, btcusd: Market) -> None:
        assert decode_l2_update(["hb", 0, 1], 1, btcusd) is None

    def test_wrong_arity(self, btcusd: Market) -> None:
        with pytest.raises(FeedDecodeError):
            decode_l2_snapshot([[100, 1]], 1, btcusd)


class TestLevel3:
    def test_snapshot(self, btcusd: Market) -> None:
        snap = decode_l3_snapshot([[55, 100, 0.2], [56, 101, -0.4]], 3, btcusd)
        assert snap.bids[0].model_dump() == {
            "order_id": "55",
            "price": "100.00000000",
            "size": "0.20000000",
        }
        assert snap.asks[0].order_id == "56"
        assert snap.asks[0].size == "0.40000000"

    def test_zero_size_update_forwarded_as_is(self, btcusd: Market) -> None:
        snap = decode_l3_snapshot([[55, 100, 0.2]], 3, btcusd)
        update = decode_l3_update([55, 100, 0], 4, btcusd)
        assert snap.bids[0].size == "0.20000000"
        points = update.bids + update.asks
        assert len(points) == 1
        assert points[0].order_id == "55"
        assert points[0].size == "0.00000000"
        assert points[0].price == "100.00000000"

    def test_update_side_from_sign(self, btcusd: Market) -> None:
        update = decode_l3_update([77, 100, 1.25], 9, btcusd)
        assert update.bids[0].size == "1.25000000"
        assert update.asks == []


class TestSequence:
    def test_present(self) -> None:
        assert frame_sequence([3, [], 17]) == 17

    def test_string(self) -> None:
        assert frame_sequence([3, [], "17"]) == 17

    def test_absent(self) -> None:
        assert frame_sequence([3, []]) is None

    def test_invalid(self) -> None:
        with pytest.raises(FeedDecodeError):
            frame_sequence([3, [], "abc"])
