"""Rich console formatting helpers for the bfx-feed CLI."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

from bitfinex_feed.ingestion.dispatcher import FeedEvent

FEED_THEME = Theme(
    {
        "buy": "bold green",
        "sell": "bold red",
        "bid": "green",
        "ask": "red",
        "event": "bold cyan",
        "pair": "bold",
        "muted": "dim",
    }
)

console = Console(theme=FEED_THEME)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def _book_side(points: list, style: str, label: str) -> Text:
    text = Text()
    for point in points:
        text.append(f" {label} ", style=style)
        if hasattr(point, "order_id"):
            text.append(f"#{point.order_id} ", style="muted")
        text.append(f"{point.price} x {point.size}")
        if hasattr(point, "count"):
            text.append(f" ({point.count})", style="muted")
    return text


def format_event(feed_event: FeedEvent) -> Text:
    """One colored line per canonical event."""
    event = feed_event.event
    line = Text()
    line.append(f"{feed_event.name:<10}", style="event")
    line.append(f" {feed_event.market.base}/{feed_event.market.quote}", style="pair")

    if feed_event.name == "ticker":
        line.append(f" last={event.last}")
        line.append(f" bid={event.bid}", style="bid")
        line.append(f" ask={event.ask}", style="ask")
        line.append(f" chg={event.change_percent}%", style="muted")
    elif feed_event.name == "trade":
        line.append(f" {event.side.upper():<4}", style=event.side)
        line.append(f" {event.amount} @ {event.price}")
        line.append(f" id={event.trade_id}", style="muted")
    elif feed_event.name.endswith("snapshot"):
        line.append(f" seq={event.sequence_id}", style="muted")
        line.append(f" bids={len(event.bids)}", style="bid")
        line.append(f" asks={len(event.asks)}", style="ask")
    else:
        line.append(f" seq={event.sequence_id}", style="muted")
        line.append_text(_book_side(event.bids, "bid", "BID"))
        line.append_text(_book_side(event.asks, "ask", "ASK"))
    return line
