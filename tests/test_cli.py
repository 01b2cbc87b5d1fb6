"""Unit tests for CLI formatting and the channels command."""

from __future__ import annotations

from typer.testing import CliRunner

from bitfinex_feed.cli.display import format_event
from bitfinex_feed.cli.main import app
from bitfinex_feed.ingestion.decoders import decode_l3_update, decode_trade
from bitfinex_feed.ingestion.dispatcher import FeedEvent
from bitfinex_feed.models import Market

runner = CliRunner()


class TestFormatEvent:
    def test_trade_line(self, btcusd: Market) -> None:
        trade = decode_trade([42, 1609712228, -0.25, 30000], btcusd)
        line = format_event(FeedEvent(name="trade", event=trade, market=btcusd)).plain
        assert "BTC/USD" in line
        assert "SELL" in line
        assert "0.25000000 @ 30000.00000000" in line

    def test_l3_update_line(self, btcusd: Market) -> None:
        update = decode_l3_update([55, 100, 0.2], 8, btcusd)
        line = format_event(FeedEvent(name="l3update", event=update, market=btcusd)).plain
        assert "seq=8" in line
        assert "#55" in line
        assert "BID" in line


class TestChannelsCommand:
    def test_lists_requests(self) -> None:
        result = runner.invoke(app, ["channels", "BTCUSD"])
        assert result.exit_code == 0
        assert "level2updates" in result.output
        assert "level3updates" in result.output

    def test_bad_pair(self) -> None:
        result = runner.invoke(app, ["channels", "BTC"])
        assert result.exit_code == 1
