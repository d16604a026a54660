"""Historical series retrieval with session-scoped caching."""

import asyncio
import logging
import math
from typing import Dict, Iterable, List

from ..api.meter_client import MeterClient
from ..api.schemas import Channel
from ..core.errors import ChannelFetchError
from ..dashboard.cache import CacheKey, SamplePoint, Series, SeriesCache
from ..dashboard.config import TimeRange

logger = logging.getLogger("meterdash.tasks")


def to_value(raw) -> float:
    """
    Coerce an upstream value to a number rounded to 2 decimals.

    Anything that is not a finite number becomes 0.
    """
    if isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return round(value, 2)


def is_timestamp(value) -> bool:
    """True for finite real numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_series(raw_points: Iterable) -> Series:
    """Map upstream [timestamp, value] pairs to SamplePoints, keeping upstream order."""
    points: List[SamplePoint] = []
    for raw in raw_points:
        if not isinstance(raw, (list, tuple)) or len(raw) != 2:
            logger.debug(f"skipping malformed point {raw!r}")
            continue
        timestamp, value = raw
        if not is_timestamp(timestamp):
            logger.debug(f"skipping point with invalid timestamp {raw!r}")
            continue
        points.append(SamplePoint(value=to_value(value), timestamp=timestamp))
    return tuple(points)


def fetch_window(time_range: TimeRange, now: float, align: bool = False) -> tuple:
    """
    Get (window_start_ms, window_end_ms) ending at now.

    With align=True, now is floored to the bucket interval first so that
    fetches within one bucket share a cache key.
    """
    if align:
        interval = time_range.bucket_interval_seconds
        now = math.floor(now / interval) * interval
    end_ms = int(now * 1000)
    return end_ms - time_range.duration_seconds * 1000, end_ms


class HistoricalFetcher:
    """Fetches one series per channel for a time range, consulting the cache first."""

    def __init__(self, client: MeterClient, cache: SeriesCache, align_window: bool = False):
        self.client = client
        self.cache = cache
        self.align_window = align_window

    async def _fetch_series(self, key: CacheKey) -> Series:
        """Remote request for one channel, run in the default executor."""
        loop = asyncio.get_running_loop()
        try:
            raw = await loop.run_in_executor(
                None,
                self.client.get_feed_data,
                key.channel_id,
                key.window_start_ms,
                key.window_end_ms,
                key.bucket_interval_seconds,
            )
        except Exception as e:
            raise ChannelFetchError(key.channel_id, e) from e
        return parse_series(raw)

    async def _fetch_channel(self, channel: Channel, start_ms: int, end_ms: int, interval: int) -> Series:
        key = CacheKey(channel.id, start_ms, end_ms, interval)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"cache hit for {channel.id} ({start_ms}-{end_ms}/{interval}s)")
            return cached

        try:
            series = await self._fetch_series(key)
        except ChannelFetchError as e:
            logger.warning(f"historical fetch failed, using empty series: {e}")
            return ()

        self.cache.put(key, series)
        return series

    async def fetch_historical(self, channels: List[Channel], time_range: TimeRange, now: float) -> Dict[str, Series]:
        """
        Fetch every channel's series for the window ending at now.

        Channels are fetched concurrently. A failed channel maps to an empty
        series and never affects the others. The mapping is returned only
        once every channel has settled.
        """
        start_ms, end_ms = fetch_window(time_range, now, self.align_window)
        interval = time_range.bucket_interval_seconds
        logger.debug(f"fetching {time_range.label} history for {len(channels)} channels")

        results = await asyncio.gather(*(
            self._fetch_channel(channel, start_ms, end_ms, interval) for channel in channels
        ))
        return {channel.id: series for channel, series in zip(channels, results)}
