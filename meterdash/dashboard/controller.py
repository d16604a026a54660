"""
Dashboard Session

Owns everything one active dashboard screen needs: the live poller, the
historical fetch rounds, the series cache, zoom and scale state. All
methods that feed the renderer return plain Python structures.
"""

import asyncio
import enum
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..api.meter_client import MeterClient
from ..api.schemas import Channel
from ..core.config import DashboardConfig
from ..core.errors import AggregateFetchError
from ..tasks.historical_fetcher import HistoricalFetcher
from ..tasks.live_poller import LivePoller
from ..web.template_helpers import format_axis_label
from .cache import Series, SeriesCache
from .config import TIME_RANGES, TimeRange, get_time_range
from .scale import ScaleMode, derive_max, fill_fraction
from .zoom import ZoomController

logger = logging.getLogger("meterdash.dashboard")

BASE_POINT_SPACING = 40.0


class DashboardKind(str, enum.Enum):
    TIMESERIES = "timeseries"
    BALANCE = "balance"     # Bounded gauges only, never fetches history


class SessionState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def parse_channels(channels: Iterable) -> List[Channel]:
    """
    Validate the inbound channel list.

    Raises:
        AggregateFetchError: If any entry is malformed or an id repeats
    """
    try:
        parsed = [c if isinstance(c, Channel) else Channel.model_validate(c) for c in channels]
    except (TypeError, ValidationError) as e:
        raise AggregateFetchError(f"malformed channel list: {e}") from e

    ids = [c.id for c in parsed]
    if len(set(ids)) != len(ids):
        raise AggregateFetchError(f"duplicate channel ids in {ids}")
    return parsed


class DashboardSession:
    """
    View-model for one dashboard screen.

    Lifecycle: activate() -> set_range()/set_scale_mode()/pinch_*() -> deactivate().
    Results that resolve after deactivate() never touch session state.
    """

    def __init__(
        self,
        client: MeterClient,
        channels: Iterable,
        kind: DashboardKind = DashboardKind.TIMESERIES,
        config: Optional[DashboardConfig] = None,
    ):
        self.client = client
        self.config = config or DashboardConfig()
        self.kind = DashboardKind(kind)
        self._raw_channels = channels
        self.channels: List[Channel] = []

        self.active_range: TimeRange = get_time_range(self.config.default_range)
        self.live_values: Dict[str, float] = {}
        self.series: Dict[str, Series] = {}
        self.scale_mode = ScaleMode.auto()
        self.zoom = ZoomController()
        self.cache = SeriesCache()
        self.fetcher = HistoricalFetcher(client, self.cache, align_window=self.config.align_window)

        self.state = SessionState.IDLE
        self.loading = False
        self.error: Optional[str] = None
        self.active = False

        self.poller: Optional[LivePoller] = None
        self._history_generation = 0
        self._history_tasks: set = set()
        self._live_ready = False
        self._history_ready = False
        self._has_loaded = False

    # ---------------- Lifecycle ----------------

    def activate(self) -> None:
        """Start polling and, for time-series dashboards, the first history round."""
        if self.active:
            return
        self.active = True
        self.state = SessionState.LOADING
        self.loading = True

        try:
            self.channels = parse_channels(self._raw_channels)
        except AggregateFetchError as e:
            logger.error(f"session activation failed: {e}")
            self.active = False
            self._set_error(str(e))
            return

        logger.info(f"activating {self.kind.value} session with {len(self.channels)} channels")
        self._history_ready = self.kind == DashboardKind.BALANCE

        self.poller = LivePoller(self.client, self.channels, self.config.poll_interval, self._apply_live)
        self.poller.start()

        if self.kind == DashboardKind.TIMESERIES:
            self._start_history_round()

    def deactivate(self) -> None:
        """Stop the poller, drop in-flight rounds without awaiting them and clear the cache."""
        if not self.active:
            return
        self.active = False
        if self.poller is not None:
            self.poller.stop()
        for task in list(self._history_tasks):
            task.cancel()
        self._history_tasks.clear()
        self.cache.clear()
        logger.info("session deactivated")

    # ---------------- User actions ----------------

    def set_range(self, label: str) -> None:
        """
        Switch the history window and refetch.

        Displayed series are cleared right away so stale-range data is never
        shown under the new label. The loading flag is raised again until the
        new round settles.
        """
        new_range = get_time_range(label)
        self.active_range = new_range
        self.series = {}
        if not self.active or self.kind == DashboardKind.BALANCE:
            return
        self.loading = True
        self.state = SessionState.LOADING
        self._history_ready = False
        self._start_history_round()

    def set_scale_mode(self, mode) -> None:
        self.scale_mode = mode if isinstance(mode, ScaleMode) else ScaleMode.parse(mode)

    def has_channel(self, channel_id: str) -> bool:
        return any(channel.id == channel_id for channel in self.channels)

    def pinch_update(self, channel_id: str, scale: float) -> float:
        return self.zoom.pinch_update(channel_id, scale)

    def pinch_end(self, channel_id: str) -> float:
        return self.zoom.pinch_end(channel_id)

    # ---------------- Fetch rounds ----------------

    def _start_history_round(self) -> asyncio.Task:
        self._history_generation += 1
        task = asyncio.get_running_loop().create_task(
            self._run_history_round(self._history_generation, self.active_range)
        )
        self._history_tasks.add(task)
        task.add_done_callback(self._history_tasks.discard)
        return task

    async def _run_history_round(self, generation: int, time_range: TimeRange) -> None:
        try:
            series = await self.fetcher.fetch_historical(self.channels, time_range, time.time())
        except Exception as e:
            if self._is_current_round(generation):
                logger.error(f"history round for {time_range.label} failed: {e}", exc_info=True)
                self._set_error(str(e))
            return

        if not self._is_current_round(generation):
            logger.debug(f"discarding superseded {time_range.label} history round {generation}")
            return

        self.series = series
        self._history_ready = True
        self._round_succeeded()

    def _is_current_round(self, generation: int) -> bool:
        return self.active and generation == self._history_generation

    def _apply_live(self, values: Dict[str, float]) -> None:
        if not self.active:
            return
        self.live_values.update(values)
        self._live_ready = True
        self._round_succeeded()

    def _round_succeeded(self) -> None:
        if not (self._live_ready and self._history_ready):
            return
        if self.state != SessionState.READY or self.error is not None:
            logger.info(f"session ready ({self.active_range.label})")
        self.loading = False
        self.error = None
        self._has_loaded = True
        self.state = SessionState.READY

    def _set_error(self, message: str) -> None:
        self.error = message
        self.loading = False
        self.state = SessionState.READY if self._has_loaded else SessionState.ERROR

    # ---------------- Renderer data ----------------

    def get_gauge(self, channel_id: str) -> Dict[str, float]:
        value = self.live_values.get(channel_id, 0.0)
        maximum = derive_max(value, self.scale_mode)
        return {"value": value, "max": maximum, "fraction": fill_fraction(value, maximum)}

    def get_dashboard_data(self) -> Dict[str, Any]:
        """Complete data structure for the renderer."""
        label = self.active_range.label
        return {
            "kind": self.kind.value,
            "state": self.state.value,
            "loading": self.loading,
            "error": self.error,
            "active_range": label,
            "ranges": list(TIME_RANGES),
            "scale_mode": str(self.scale_mode),
            "channels": [
                {
                    "id": channel.id,
                    "name": channel.name,
                    "live_value": self.live_values.get(channel.id),
                    "gauge": self.get_gauge(channel.id),
                    "zoom": self.zoom.get(channel.id),
                    "gesture_scale": self.zoom.gesture_scale(channel.id),
                    "spacing": self.zoom.spacing(channel.id, BASE_POINT_SPACING),
                    "series": [
                        {"value": p.value, "timestamp": p.timestamp, "label": format_axis_label(p.timestamp, label)}
                        for p in self.series.get(channel.id, ())
                    ],
                }
                for channel in self.channels
            ],
        }
