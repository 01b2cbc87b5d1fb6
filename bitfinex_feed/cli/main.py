"""bfx-feed CLI entry point.

Usage:
    python -m bitfinex_feed.cli.main [COMMAND] [OPTIONS]

Or via the installed console script:
    bfx-feed [COMMAND] [OPTIONS]
"""

from __future__ import annotations

import typer

from bitfinex_feed.cli.commands import channels, stream

app = typer.Typer(
    name="bfx-feed",
    help="Normalized Bitfinex market data feed",
    no_args_is_help=True,
    add_completion=False,
    pretty_exceptions_enable=True,
)

app.command(name="stream", help="Print normalized events from the live feed")(stream.stream)
app.command(name="channels", help="Show the subscribe request for each stream type")(channels.channels)


if __name__ == "__main__":
    app()
