"""Metering API client for querying feed values and historical data."""

import json
import math
import os
import urllib.request
from typing import List, Optional
from urllib.parse import urlencode

from dotenv import load_dotenv

load_dotenv()


class MeterClient:
    """Client for an emoncms-style feed API."""

    def __init__(self, api_key: Optional[str] = None, base_url: str = "https://emoncms.org", timeout: float = 10.0):
        """
        Initialize metering client.

        Args:
            api_key: Metering API key. If None, reads from METER_API_KEY env var.
            base_url: API root, without trailing slash.
            timeout: Per-request timeout in seconds.
        """
        self.api_key = api_key or os.getenv("METER_API_KEY")
        if not self.api_key:
            raise ValueError("METER_API_KEY not found in environment variables")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _query_api(self, endpoint: str, params: dict):
        """
        Query a feed API endpoint.

        Args:
            endpoint: API endpoint path (e.g., "/feed/value.json")
            params: Query string parameters

        Returns:
            Parsed JSON response

        Raises:
            urllib.error.HTTPError: If API request fails
            urllib.error.URLError: If the server cannot be reached
        """
        url = f"{self.base_url}{endpoint}?{urlencode(params)}"
        req = urllib.request.Request(url)
        req.add_header("Authorization", f"Bearer {self.api_key}")

        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            return json.loads(response.read())

    def get_feed_data(self, feed_id: str, start_ms: int, end_ms: int, interval: int) -> List[list]:
        """
        Get bucketed historical data for one feed.

        Args:
            feed_id: Channel id
            start_ms: Window start, milliseconds since epoch
            end_ms: Window end, milliseconds since epoch
            interval: Bucket size in seconds

        Returns:
            List of [timestamp, value] pairs in upstream order

        Raises:
            ValueError: If the response is not a list
        """
        data = self._query_api("/feed/data.json", {
            "id": feed_id,
            "start": start_ms,
            "end": end_ms,
            "interval": interval,
        })
        if not isinstance(data, list):
            raise ValueError(f"unexpected feed data response for {feed_id}: {data!r}")
        return data

    def get_feed_value(self, feed_id: str) -> float:
        """
        Get the instantaneous value of one feed.

        The API may return the number as a JSON string; both are accepted.

        Raises:
            ValueError: If the response is not a finite number
        """
        data = self._query_api("/feed/value.json", {"id": feed_id})
        if isinstance(data, bool) or data is None:
            raise ValueError(f"unexpected feed value for {feed_id}: {data!r}")
        value = float(data)
        if not math.isfinite(value):
            raise ValueError(f"non-finite feed value for {feed_id}: {data!r}")
        return value
