"""bfx-feed stream <pair>... -- Print normalized events from the live feed."""

from __future__ import annotations

import asyncio

import typer

from bitfinex_feed.cli.display import console, format_event


async def _stream_async(
    pairs: list[str],
    ticker: bool,
    trades: bool,
    l2: bool,
    l3: bool,
    publish: bool,
) -> None:
    from bitfinex_feed.cache.redis_client import close_redis, get_redis
    from bitfinex_feed.cache.streams import RedisStreamPublisher
    from bitfinex_feed.config import get_config
    from bitfinex_feed.ingestion.ws_client import BitfinexWSClient
    from bitfinex_feed.log import configure_logging
    from bitfinex_feed.models import Market

    config = get_config()
    configure_logging(config.logging)

    publisher = None
    if publish:
        publisher = RedisStreamPublisher(await get_redis(config.redis))

    client = BitfinexWSClient(config, publisher=publisher)
    client.add_listener(lambda feed_event: console.print(format_event(feed_event)))

    for pair in pairs:
        try:
            market = Market.from_pair(pair)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            continue
        if ticker:
            await client.subscribe_ticker(market)
        if trades:
            await client.subscribe_trades(market)
        if l2:
            await client.subscribe_level2_updates(market)
        if l3:
            await client.subscribe_level3_updates(market)

    if not len(client.registry):
        console.print("[red]Nothing to subscribe to.[/red]")
        return

    console.print(f"[bold cyan]Streaming {len(client.registry)} subscriptions (Ctrl+C to stop)[/bold cyan]")
    try:
        await client.connect()
    finally:
        await client.close()
        if publisher is not None:
            await close_redis()


def stream(
    pairs: list[str] = typer.Argument(..., help="Pairs such as BTCUSD or TESTBTC:TESTUSD"),
    ticker: bool = typer.Option(True, "--ticker/--no-ticker", help="Best bid/ask ticker"),
    trades: bool = typer.Option(True, "--trades/--no-trades", help="Individual trades"),
    l2: bool = typer.Option(False, "--l2", help="Aggregated book snapshots and updates"),
    l3: bool = typer.Option(False, "--l3", help="Raw per-order book snapshots and updates"),
    publish: bool = typer.Option(False, "--publish", help="Also publish events to Redis streams"),
) -> None:
    """Connect to Bitfinex and print normalized events."""
    try:
        asyncio.run(_stream_async(pairs, ticker, trades, l2, l3, publish))
    except KeyboardInterrupt:
        console.print("\n[dim]Stream stopped.[/dim]")
