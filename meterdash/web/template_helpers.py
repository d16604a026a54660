#!/usr/bin/env python3
"""
Template Helpers for meterdash charts
"""

import time

MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                       "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_axis_label(timestamp, range_label):
    """
    Format an x-axis tick for the active time range (local time).

    Day -> "HH:MM", Week -> "D/M H:00", Month -> "D/M", Year -> "Jan".
    Unknown labels use the Day format.
    """
    t = time.localtime(timestamp)
    if range_label == "Week":
        return f"{t.tm_mday}/{t.tm_mon} {t.tm_hour}:00"
    if range_label == "Month":
        return f"{t.tm_mday}/{t.tm_mon}"
    if range_label == "Year":
        # Fixed English names, strftime("%b") follows the locale
        return MONTH_ABBREVIATIONS[t.tm_mon - 1]
    return f"{t.tm_hour:02d}:{t.tm_min:02d}"

