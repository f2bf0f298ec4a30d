"""Unit tests for RenderConfig."""

import math

import pytest

from tiletrace.config import DEFAULT_BACKGROUND, DEFAULT_FIELD_OF_VIEW, MAX_DEPTH, RenderConfig


class TestRenderConfig:
    def test_defaults(self):
        config = RenderConfig()
        config.validate()

        assert (config.width, config.height) == (1280, 720)
        assert config.samples_per_pixel == 16
        assert config.max_depth == MAX_DEPTH
        assert config.num_tiles == 4
        assert config.background == DEFAULT_BACKGROUND
        assert config.background_top is None
        assert config.gamma == 2.0
        assert config.pixel_count == 1280 * 720
        assert abs(config.aspect_ratio - 16.0 / 9.0) < 1e-12

    def test_default_fov_spans_unit_height(self):
        """At 16:9 the default field of view gives a vertical half-extent of 1."""
        half_width = math.tan(math.radians(DEFAULT_FIELD_OF_VIEW) / 2.0)

        assert abs(half_width * 9.0 / 16.0 - 1.0) < 1e-9

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": -1},
            {"width": 4096},
            {"field_of_view": 0.0},
            {"field_of_view": 180.0},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
            {"num_tiles": 0},
            {"num_tiles": 2048},
            {"width": 3, "num_tiles": 5},
            {"seed": -1},
            {"gamma": 0.0},
            {"background": (1.0, 1.0)},
            {"background_top": (1.0, 1.0, 1.0, 1.0)},
        ],
    )
    def test_invalid_settings_raise(self, kwargs):
        with pytest.raises(ValueError):
            RenderConfig(**kwargs).validate()

    def test_zero_depth_is_valid(self):
        RenderConfig(max_depth=0).validate()

    def test_to_dict(self):
        data = RenderConfig(width=32, height=18, seed=3).to_dict()

        assert data["width"] == 32
        assert data["height"] == 18
        assert data["seed"] == 3
        assert set(data) == {
            "width",
            "height",
            "field_of_view",
            "samples_per_pixel",
            "max_depth",
            "num_tiles",
            "seed",
            "background",
            "background_top",
            "gamma",
        }
