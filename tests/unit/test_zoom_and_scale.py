"""Unit tests for zoom control and gauge scale selection"""
import random

import pytest

from meterdash.dashboard.scale import ScaleMode, derive_max, fill_fraction
from meterdash.dashboard.zoom import DEFAULT_ZOOM, ZOOM_MAX, ZOOM_MIN, ZoomController


class TestZoomController:

    def test_default_zoom(self):
        zoom = ZoomController()
        assert zoom.get("101") == DEFAULT_ZOOM == 10

    def test_pinch_out_lowers_zoom(self):
        zoom = ZoomController()
        assert zoom.pinch_update("101", 2.0) == pytest.approx(9.8)

    def test_pinch_in_is_clamped_at_max(self):
        zoom = ZoomController()
        assert zoom.pinch_update("101", 0.5) == ZOOM_MAX

    def test_updates_are_path_dependent(self):
        """Two updates to the same final scale differ from one update"""
        stepped = ZoomController()
        stepped.pinch_update("101", 1.5)
        stepped.pinch_update("101", 2.0)

        direct = ZoomController()
        direct.pinch_update("101", 2.0)

        assert stepped.get("101") == pytest.approx(10 - 0.1 - 0.2)
        assert direct.get("101") == pytest.approx(9.8)

    def test_gesture_end_resets_scale_reference(self):
        zoom = ZoomController()
        zoom.pinch_update("101", 3.0)
        assert zoom.gesture_scale("101") == 3.0

        level = zoom.pinch_end("101")

        assert zoom.gesture_scale("101") == 1.0
        assert level == pytest.approx(9.6)

    def test_channels_are_independent(self):
        zoom = ZoomController()
        zoom.pinch_update("101", 5.0)
        assert zoom.get("102") == DEFAULT_ZOOM

    def test_spacing_scales_inversely(self):
        zoom = ZoomController()
        assert zoom.spacing("101", 40) == 4.0
        for _ in range(100):
            zoom.pinch_update("101", 50.0)
        assert zoom.spacing("101", 40) == 80.0

    def test_reset(self):
        zoom = ZoomController()
        zoom.pinch_update("101", 20.0)
        zoom.reset("101")
        assert zoom.get("101") == DEFAULT_ZOOM

    def test_zoom_always_within_bounds(self):
        rng = random.Random(7)
        zoom = ZoomController()
        for _ in range(2000):
            level = zoom.pinch_update("101", rng.uniform(0.01, 40.0))
            assert ZOOM_MIN <= level <= ZOOM_MAX
            if rng.random() < 0.1:
                zoom.pinch_end("101")


class TestScaleSelector:

    @pytest.mark.parametrize("value,expected", [
        (5, 10),
        (0, 10),
        (-3, 10),
        (10, 20),
        (15, 20),
        (20, 50),
        (99.9, 100),
        (450, 500),
        (999, 1000),
        (1000, 1000),
        (1500, 2000),
        (12001, 13000),
    ])
    def test_auto_ladder(self, value, expected):
        assert derive_max(value, ScaleMode.auto()) == expected

    def test_fixed_mode_ignores_value(self):
        assert derive_max(7, ScaleMode.fixed_at(0.5)) == 0.5
        assert derive_max(5000, ScaleMode.fixed_at(1)) == 1.0

    def test_fixed_mode_rejects_other_values(self):
        with pytest.raises(ValueError):
            ScaleMode.fixed_at(2)

    @pytest.mark.parametrize("text,expected", [
        ("auto", ScaleMode.auto()),
        ("AUTO", ScaleMode.auto()),
        ("0.3", ScaleMode(fixed=0.3)),
        (0.1, ScaleMode(fixed=0.1)),
        ("1", ScaleMode(fixed=1.0)),
    ])
    def test_parse(self, text, expected):
        assert ScaleMode.parse(text) == expected

    @pytest.mark.parametrize("text", ["huge", "", None, "0.25"])
    def test_parse_rejects_invalid(self, text):
        with pytest.raises(ValueError):
            ScaleMode.parse(text)

    def test_str(self):
        assert str(ScaleMode.auto()) == "auto"
        assert str(ScaleMode.fixed_at(0.5)) == "0.5"

    def test_fill_fraction(self):
        assert fill_fraction(15, 20) == 0.75
        assert fill_fraction(7, 0.5) == 1.0
        assert fill_fraction(-4, 10) == 0.0
