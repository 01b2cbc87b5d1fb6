"""bfx-feed channels <pair> -- Show the subscribe request sent for each stream type."""

from __future__ import annotations

import typer
from rich.table import Table

from bitfinex_feed.cli.display import console
from bitfinex_feed.config import get_config
from bitfinex_feed.ingestion import requests
from bitfinex_feed.models import Market


def channels(
    pair: str = typer.Argument(..., help="Pair such as BTCUSD"),
) -> None:
    """Print the request payloads used for a pair."""
    config = get_config().bitfinex
    try:
        market = Market.from_pair(pair)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"{market.base}/{market.quote} on {config.ws_url}", show_lines=False)
    table.add_column("Stream", style="bold")
    table.add_column("Request", style="dim")
    table.add_row("conf", requests.encode(requests.conf_request(config.conf_flags)))
    table.add_row("ticker", requests.encode(requests.ticker_subscribe(market.id)))
    table.add_row("trades", requests.encode(requests.trades_subscribe(market.id)))
    table.add_row(
        "level2updates",
        requests.encode(requests.level2_subscribe(market.id, config.l2_book_length)),
    )
    table.add_row(
        "level3updates",
        requests.encode(requests.level3_subscribe(market.id, config.l3_book_length)),
    )
    console.print(table)
