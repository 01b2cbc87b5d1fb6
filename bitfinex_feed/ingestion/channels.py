"""Correlation table between transient channel ids and subscription metadata."""

from __future__ import annotations

import threading

import structlog

from bitfinex_feed.ingestion.subscriptions import StreamType
from bitfinex_feed.models import ChannelBinding, ChannelType

logger = structlog.get_logger(__name__)


def binding_stream(binding: ChannelBinding) -> StreamType:
    """The logical stream a bound channel feeds."""
    if binding.is_raw_book:
        return StreamType.LEVEL3_UPDATES
    if binding.is_aggregated_book:
        return StreamType.LEVEL2_UPDATES
    return StreamType(binding.channel_type.value)


class ChannelTable:
    """
    Maps Bitfinex channel ids to the subscription they were issued for.

    Entries are created from ``subscribed`` acknowledgments and removed when
    an unsubscribe completes. Channel ids are only valid for the connection
    that issued them, so the table is cleared on every reconnect.
    """

    def __init__(self) -> None:
        self._channels: dict[int, ChannelBinding] = {}
        self._lock = threading.Lock()

    def bind(self, ack: dict) -> ChannelBinding:
        """Store the binding carried by a ``subscribed`` acknowledgment."""
        binding = ChannelBinding.model_validate(ack)
        with self._lock:
            previous = self._channels.get(binding.channel_id)
            self._channels[binding.channel_id] = binding

        if previous is not None and previous != binding:
            logger.warning(
                "channel_rebound",
                chan_id=binding.channel_id,
                previous_pair=previous.pair,
                pair=binding.pair,
            )
        logger.info(
            "channel_bound",
            chan_id=binding.channel_id,
            channel=binding.channel_type.value,
            pair=binding.pair,
            precision=binding.precision_class.value if binding.precision_class else None,
        )
        return binding

    def resolve(self, channel_id: int) -> ChannelBinding | None:
        return self._channels.get(channel_id)

    def find_by_type_and_pair(self, stream_type: StreamType | str, pair: str) -> int | None:
        """Find the channel id serving a logical stream for a pair."""
        stream_type = StreamType(stream_type)
        with self._lock:
            bindings = list(self._channels.values())

        for binding in bindings:
            if binding.pair != pair:
                continue
            if stream_type is StreamType.TICKER and binding.channel_type is ChannelType.TICKER:
                return binding.channel_id
            if stream_type is StreamType.TRADES and binding.channel_type is ChannelType.TRADES:
                return binding.channel_id
            if stream_type is StreamType.LEVEL2_UPDATES and binding.is_aggregated_book:
                return binding.channel_id
            if stream_type is StreamType.LEVEL3_UPDATES and binding.is_raw_book:
                return binding.channel_id
        return None

    def unbind(self, channel_id: int) -> ChannelBinding | None:
        with self._lock:
            binding = self._channels.pop(channel_id, None)
        if binding is not None:
            logger.info("channel_unbound", chan_id=channel_id, pair=binding.pair)
        return binding

    def clear(self) -> None:
        with self._lock:
            count = len(self._channels)
            self._channels.clear()
        if count:
            logger.info("channels_cleared", count=count)

    def __len__(self) -> int:
        return len(self._channels)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._channels
