"""
meterdash - live metering dashboard core

Polls a remote metering API for live channel values, fetches bucketed
historical series per time range and exposes a per-session view-model
for an external renderer.
"""

__version__ = "0.1.0"
