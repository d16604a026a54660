"""Unit tests for live polling

Covers per-channel isolation, tick ordering and cancellation.
"""
import asyncio
from unittest.mock import Mock, patch

import pytest

from meterdash.tasks.live_poller import LivePoller, poll_live


class TestPollLive:

    @pytest.mark.asyncio
    async def test_poll_returns_value_per_channel(self, channels, mock_client):
        mock_client.get_feed_value.side_effect = lambda feed_id: float(feed_id)

        values = await poll_live(mock_client, channels)

        assert values == {"101": 101.0, "102": 102.0, "103": 103.0}

    @pytest.mark.asyncio
    async def test_failing_channel_contributes_zero(self, channels, mock_client):
        def get_feed_value(feed_id):
            if feed_id == "102":
                raise ConnectionError("unreachable")
            return 5.5

        mock_client.get_feed_value.side_effect = get_feed_value

        values = await poll_live(mock_client, channels)

        assert values == {"101": 5.5, "102": 0.0, "103": 5.5}

    @pytest.mark.asyncio
    async def test_non_finite_value_contributes_zero(self, channels, mock_client):
        values = iter([float("nan"), float("inf"), 3.0])
        mock_client.get_feed_value.side_effect = lambda feed_id: next(values)

        result = await poll_live(mock_client, channels[:1])
        assert result == {"101": 0.0}
        result = await poll_live(mock_client, channels[:1])
        assert result == {"101": 0.0}
        result = await poll_live(mock_client, channels[:1])
        assert result == {"101": 3.0}


class TestLivePoller:

    @pytest.mark.asyncio
    async def test_ticks_repeat_until_stopped(self, channels, mock_client):
        results = []
        poller = LivePoller(mock_client, channels, 0.01, results.append)

        poller.start()
        await asyncio.sleep(0.1)
        poller.stop()

        assert len(results) >= 2
        assert results[0] == {"101": 42.0, "102": 42.0, "103": 42.0}
        assert not poller.running

    @pytest.mark.asyncio
    async def test_start_twice_raises(self, channels, mock_client):
        poller = LivePoller(mock_client, channels, 10, Mock())
        poller.start()
        try:
            with pytest.raises(RuntimeError):
                poller.start()
        finally:
            poller.stop()

    @pytest.mark.asyncio
    async def test_older_tick_is_discarded_after_newer_applied(self, channels, mock_client):
        """Tick 2 resolving before tick 1 wins; tick 1's late result is dropped"""
        gates = {1: asyncio.Event(), 2: asyncio.Event()}
        calls = []

        async def fake_poll(client, chans):
            tick = len(calls) + 1
            calls.append(tick)
            await gates[tick].wait()
            return {"101": float(tick)}

        on_result = Mock()
        poller = LivePoller(mock_client, channels, 10, on_result)

        with patch("meterdash.tasks.live_poller.poll_live", side_effect=fake_poll):
            first = asyncio.ensure_future(poller._tick(1))
            await asyncio.sleep(0)
            second = asyncio.ensure_future(poller._tick(2))
            await asyncio.sleep(0)

            gates[2].set()
            await second
            gates[1].set()
            await first

        on_result.assert_called_once_with({"101": 2.0})
        assert poller.applied_generation == 2

    @pytest.mark.asyncio
    async def test_result_after_stop_is_dropped(self, channels, mock_client):
        """A request issued before stop() that resolves after it never applies"""
        release = asyncio.Event()

        async def slow_poll(client, chans):
            await release.wait()
            return {"101": 1.0}

        on_result = Mock()
        poller = LivePoller(mock_client, channels, 10, on_result)

        with patch("meterdash.tasks.live_poller.poll_live", side_effect=slow_poll):
            tick = asyncio.ensure_future(poller._tick(1))
            await asyncio.sleep(0)
            poller.stop()
            release.set()
            await tick

        on_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_stop_cancels_inflight_ticks(self, channels, mock_client):
        release = asyncio.Event()

        async def slow_poll(client, chans):
            await release.wait()
            return {"101": 1.0}

        on_result = Mock()
        poller = LivePoller(mock_client, channels, 10, on_result)

        with patch("meterdash.tasks.live_poller.poll_live", side_effect=slow_poll):
            poller.start()
            await asyncio.sleep(0.01)
            assert poller.generation == 1
            poller.stop()
            release.set()
            await asyncio.sleep(0.01)

        on_result.assert_not_called()
        assert poller.generation == 1

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, channels, mock_client):
        poller = LivePoller(mock_client, channels, 10, Mock())
        poller.start()
        poller.stop()
        poller.stop()
        assert not poller.running
