"""
Dashboard Configuration

Selectable time ranges and their downsampling intervals.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class TimeRange:
    """One selectable history window."""
    label: str
    duration_seconds: int
    bucket_interval_seconds: int


# Ordered shortest to longest; the first entry is the default
TIME_RANGES: Dict[str, TimeRange] = {
    "Day": TimeRange("Day", 86400, 120),
    "Week": TimeRange("Week", 7 * 86400, 900),
    "Month": TimeRange("Month", 30 * 86400, 3600),
    "Year": TimeRange("Year", 365 * 86400, 86400),
}

DEFAULT_TIME_RANGE = TIME_RANGES["Day"]


def get_time_range(label: str) -> TimeRange:
    """
    Look up a time range by label.

    Raises:
        KeyError: If the label is not one of TIME_RANGES
    """
    try:
        return TIME_RANGES[label]
    except KeyError:
        raise KeyError(f"unknown time range '{label}', expected one of {list(TIME_RANGES)}") from None
