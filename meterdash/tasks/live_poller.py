"""Live value polling on a fixed cadence."""

import asyncio
import logging
import math
from typing import Callable, Dict, List, Optional, Set

from ..api.meter_client import MeterClient
from ..api.schemas import Channel

logger = logging.getLogger("meterdash.tasks")


async def fetch_value(client: MeterClient, channel: Channel) -> float:
    """Read one channel's instantaneous value; 0 on any failure."""
    loop = asyncio.get_running_loop()
    try:
        value = float(await loop.run_in_executor(None, client.get_feed_value, channel.id))
    except Exception as e:
        logger.warning(f"live poll failed for channel {channel.id}, using 0: {e}")
        return 0.0
    if not math.isfinite(value):
        logger.warning(f"non-finite live value for channel {channel.id}, using 0")
        return 0.0
    return value


async def poll_live(client: MeterClient, channels: List[Channel]) -> Dict[str, float]:
    """Poll every channel concurrently and return the merged values once all have settled."""
    values = await asyncio.gather(*(fetch_value(client, channel) for channel in channels))
    return {channel.id: value for channel, value in zip(channels, values)}


class LivePoller:
    """
    Runs poll_live every interval_seconds until stopped.

    Ticks are not serialized: a slow tick may still be in flight when the
    next one starts. Each tick carries a generation number and its result
    is applied only if no newer tick has been applied already. After stop()
    no result reaches on_result.
    """

    def __init__(
        self,
        client: MeterClient,
        channels: List[Channel],
        interval_seconds: float,
        on_result: Callable[[Dict[str, float]], None],
    ):
        self.client = client
        self.channels = list(channels)
        self.interval_seconds = interval_seconds
        self.on_result = on_result
        self.generation = 0
        self.applied_generation = 0
        self._stopped = False
        self._loop_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._stopped

    def start(self) -> None:
        if self._loop_task is not None:
            raise RuntimeError("poller already started")
        logger.info(f"live poller starting: {len(self.channels)} channels every {self.interval_seconds}s")
        self._loop_task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while not self._stopped:
            self.generation += 1
            task = asyncio.get_running_loop().create_task(self._tick(self.generation))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            await asyncio.sleep(self.interval_seconds)

    async def _tick(self, generation: int) -> None:
        try:
            values = await poll_live(self.client, self.channels)
        except Exception as e:
            # Keep previous live values when the whole tick fails
            logger.error(f"live poll tick {generation} failed: {e}", exc_info=True)
            return

        if self._stopped:
            logger.debug(f"dropping tick {generation} result after stop")
            return
        if generation <= self.applied_generation:
            logger.debug(f"dropping tick {generation}, tick {self.applied_generation} already applied")
            return

        self.applied_generation = generation
        self.on_result(values)

    def stop(self) -> None:
        """Stop the timer and drop every in-flight tick."""
        if self._stopped:
            return
        self._stopped = True
        if self._loop_task is not None:
            self._loop_task.cancel()
        for task in list(self._inflight):
            task.cancel()
        logger.info("live poller stopped")
