from .market import Market
from .channel import ChannelBinding, ChannelType, PrecisionClass
from .ticker import Ticker
from .trade import Trade
from .orderbook import (
    Level2Point,
    Level2Snapshot,
    Level2Update,
    Level3Point,
    Level3Snapshot,
    Level3Update,
)

__all__ = [
    "Market",
    "ChannelBinding",
    "ChannelType",
    "PrecisionClass",
    "Ticker",
    "Trade",
    "Level2Point",
    "Level2Snapshot",
    "Level2Update",
    "Level3Point",
    "Level3Snapshot",
    "Level3Update",
]
