"""Per-channel horizontal zoom driven by pinch gestures."""

from typing import Dict

ZOOM_MIN = 0.5
ZOOM_MAX = 10.0
DEFAULT_ZOOM = ZOOM_MAX      # Fully zoomed out: larger value = tighter spacing
PINCH_SENSITIVITY = 0.2


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


class ZoomController:
    """
    Tracks one zoom level per channel.

    Every gesture-update event applies zoom - (scale - 1) * 0.2, so the final
    zoom depends on the sequence of updates, not only the final scale.

    The gesture scale reference is renderer-facing state: it is reported in
    the session snapshot so a pinch can be resumed from a neutral 1.0 after
    pinch_end(). The zoom formula itself only uses the latest update.
    """

    def __init__(self):
        self._levels: Dict[str, float] = {}
        self._gesture_scale: Dict[str, float] = {}

    def get(self, channel_id: str) -> float:
        return self._levels.get(channel_id, DEFAULT_ZOOM)

    def gesture_scale(self, channel_id: str) -> float:
        """Current scale reference of the channel's pinch gesture (1.0 when idle)."""
        return self._gesture_scale.get(channel_id, 1.0)

    def pinch_update(self, channel_id: str, scale: float) -> float:
        """Apply one gesture-update event and return the new zoom level."""
        self._gesture_scale[channel_id] = scale
        zoom = clamp(self.get(channel_id) - (scale - 1) * PINCH_SENSITIVITY, ZOOM_MIN, ZOOM_MAX)
        self._levels[channel_id] = zoom
        return zoom

    def pinch_end(self, channel_id: str) -> float:
        self._gesture_scale[channel_id] = 1.0
        return self.get(channel_id)

    def reset(self, channel_id: str) -> None:
        self._levels.pop(channel_id, None)
        self._gesture_scale.pop(channel_id, None)

    def spacing(self, channel_id: str, base_spacing: float) -> float:
        """Horizontal distance between points for the renderer."""
        return base_spacing / self.get(channel_id)

    def snapshot(self) -> Dict[str, float]:
        return dict(self._levels)
