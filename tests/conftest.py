"""Pytest configuration and shared fixtures"""
import pytest
from unittest.mock import Mock

from meterdash.api.schemas import Channel
from meterdash.core.config import DashboardConfig

NOW = 1_700_000_000.0


@pytest.fixture
def channels():
    """Three monitored feeds"""
    return [
        Channel(id="101", name="Mains current"),
        Channel(id="102", name="Solar power"),
        Channel(id="103", name="Heat pump"),
    ]


@pytest.fixture
def feed_points():
    """Raw upstream points for one channel (timestamp seconds, raw value)"""
    return [
        [NOW - 240, 12.3456],
        [NOW - 120, "7.1"],
        [NOW, None],
    ]


@pytest.fixture
def mock_client(feed_points):
    """Synchronous meter client mock; every channel returns the same data"""
    client = Mock()
    client.get_feed_data.return_value = feed_points
    client.get_feed_value.return_value = 42.0
    return client


@pytest.fixture
def fast_config():
    """Config with a short poll interval so lifecycle tests run quickly"""
    return DashboardConfig(api_key="test_key", poll_interval=0.01)
