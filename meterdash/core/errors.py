"""Error taxonomy for dashboard fetch rounds."""


class ChannelFetchError(Exception):
    """A single channel's request failed. Isolated from its siblings."""

    def __init__(self, channel_id: str, cause: Exception):
        self.channel_id = channel_id
        self.cause = cause
        super().__init__(f"channel {channel_id}: {cause}")


class AggregateFetchError(Exception):
    """A failure outside per-channel isolation (e.g. malformed channel list)."""
