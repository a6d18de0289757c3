"""Tests for the render configuration and the FinalImage container."""

import numpy as np
import pytest


class TestRenderConfig:
    """Tests for RenderConfig."""

    def test_defaults(self):
        """Test the default frame settings."""
        from rtw.core.config import RenderConfig

        config = RenderConfig()
        assert config.aspect_ratio == pytest.approx(1.5)
        assert config.image_width == 400
        assert config.image_height == 266
        assert config.samples_per_pixel == 100
        assert config.max_depth == 10
        assert config.seed == 0

    def test_image_height_truncates(self):
        """Test that the height is the floor of width / aspect ratio."""
        from rtw.core.config import RenderConfig

        assert RenderConfig(image_width=300, aspect_ratio=16.0 / 9.0).image_height == 168
        assert RenderConfig(image_width=10, aspect_ratio=1.0).image_height == 10

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"aspect_ratio": 0.0},
            {"image_width": 0},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
            {"seed": -5},
            {"image_width": 1, "aspect_ratio": 2.0},
        ],
    )
    def test_validation(self, kwargs):
        """Test that out-of-range settings raise ValueError."""
        from rtw.core.config import RenderConfig

        with pytest.raises(ValueError):
            RenderConfig(**kwargs)

    def test_zero_depth_is_allowed(self):
        """Test that a depth of 0 is a valid (black) configuration."""
        from rtw.core.config import RenderConfig

        assert RenderConfig(max_depth=0).max_depth == 0

    def test_seed_u32(self):
        """Test that large seeds are reduced to 32 bits."""
        from rtw.core.config import RenderConfig

        assert RenderConfig(seed=7).seed_u32 == 7
        assert RenderConfig(seed=2**32 + 3).seed_u32 == 3

    def test_dict_round_trip_ignores_unknown_keys(self):
        """Test to_dict and from_dict."""
        from rtw.core.config import RenderConfig

        config = RenderConfig(image_width=200, samples_per_pixel=8, seed=4)
        data = config.to_dict()
        assert data["image_width"] == 200
        assert "image_height" not in data

        data["comment"] = "ignored"
        assert RenderConfig.from_dict(data) == config


class TestFinalImage:
    """Tests for the FinalImage container."""

    def test_layout(self):
        """Test pixel lookup and reshaping with the top row first."""
        from rtw.core.image import FinalImage

        pixels = np.arange(2 * 3 * 3, dtype=np.float64).reshape(6, 3)
        image = FinalImage(width=3, height=2, samples_per_pixel=2, pixels=pixels)

        np.testing.assert_array_equal(image.pixel(0, 0), [0.0, 1.0, 2.0])
        np.testing.assert_array_equal(image.pixel(2, 1), [15.0, 16.0, 17.0])
        assert image.to_array().shape == (2, 3, 3)
        np.testing.assert_array_equal(image.to_array()[1, 0], [9.0, 10.0, 11.0])
        np.testing.assert_allclose(image.average()[0, 0], [0.0, 0.5, 1.0])

    def test_shape_validation(self):
        """Test that mismatched pixel arrays raise ValueError."""
        from rtw.core.image import FinalImage

        with pytest.raises(ValueError, match="shape"):
            FinalImage(width=3, height=2, samples_per_pixel=1, pixels=np.zeros((5, 3)))

    def test_sample_validation(self):
        """Test that a frame needs at least one sample."""
        from rtw.core.image import FinalImage

        with pytest.raises(ValueError, match="samples_per_pixel"):
            FinalImage(width=1, height=1, samples_per_pixel=0, pixels=np.zeros((1, 3)))
