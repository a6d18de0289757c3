"""Tests for tone mapping and image export.

This module tests:
- Gamma-2 conversion from color sums to display values and bytes
- Plain-text PPM encoding
- PNG and PPM writers, and format selection by extension
- Default output paths
- RMSE comparison helper
"""

import re
import tempfile
from pathlib import Path

import numpy as np
import pytest


def _image(values, width, height, samples_per_pixel):
    from rtw.core.image import FinalImage

    pixels = np.asarray(values, dtype=np.float64).reshape(width * height, 3)
    return FinalImage(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        pixels=pixels,
    )


class TestToneMapGamma2:
    """Tests for tone_map_gamma2 and image_to_uint8."""

    def test_known_values(self):
        """Test the byte values of averaged, clamped, gamma-2 pixels."""
        from rtw.preview.display import image_to_uint8

        # Sums over 4 samples: averages 0.25, 0.5, 10 (clamped) and -1 (clamped)
        image = _image(
            [[1.0, 2.0, 40.0], [-4.0, 0.0, 1.0]],
            width=2,
            height=1,
            samples_per_pixel=4,
        )
        out = image_to_uint8(image)

        assert out.dtype == np.uint8
        assert out.shape == (1, 2, 3)
        np.testing.assert_array_equal(out[0, 0], [128, 181, 255])
        np.testing.assert_array_equal(out[0, 1], [0, 0, 128])

    def test_display_values_bounded(self):
        """Test that display values never reach 1.0."""
        from rtw.preview.display import MAX_DISPLAY_VALUE, tone_map_gamma2

        image = _image([[100.0, 0.999, 0.5]], width=1, height=1, samples_per_pixel=1)
        display = tone_map_gamma2(image)

        assert display.max() == pytest.approx(np.sqrt(MAX_DISPLAY_VALUE))
        assert display[0, 0, 2] == pytest.approx(np.sqrt(0.5))

    def test_rows_stay_top_first(self):
        """Test that the output keeps the FinalImage row order."""
        from rtw.preview.display import image_to_uint8

        image = _image(
            [[1.0, 1.0, 1.0], [0.0, 0.0, 0.0]],
            width=1,
            height=2,
            samples_per_pixel=1,
        )
        out = image_to_uint8(image)
        assert out[0, 0, 0] == 255
        assert out[1, 0, 0] == 0


class TestPpm:
    """Tests for the plain-text PPM encoder and writer."""

    def test_format_ppm(self):
        """Test the exact P3 layout."""
        from rtw.preview.export import format_ppm

        image = _image(
            [[1.0, 2.0, 40.0], [0.0, 0.0, 1.0]],
            width=2,
            height=1,
            samples_per_pixel=4,
        )
        assert format_ppm(image) == "P3\n2 1\n255\n128 181 255\n0 0 128\n"

    def test_save_ppm(self, tmp_path):
        """Test writing a PPM file."""
        from rtw.preview.export import save_ppm

        image = _image([[0.25, 0.25, 0.25]] * 6, width=3, height=2, samples_per_pixel=1)
        path = save_ppm(image, tmp_path / "out.ppm")

        lines = path.read_text().splitlines()
        assert lines[:3] == ["P3", "3 2", "255"]
        assert len(lines) == 3 + 6
        assert lines[3] == "128 128 128"


class TestPng:
    """Tests for the PNG writer."""

    def test_save_png_matches_bytes(self, tmp_path):
        """Test that the PNG holds the gamma-2 bytes."""
        from PIL import Image

        from rtw.preview.display import image_to_uint8
        from rtw.preview.export import save_png

        values = np.linspace(0.0, 1.0, 4 * 3 * 3).reshape(12, 3)
        image = _image(values, width=4, height=3, samples_per_pixel=1)
        path = save_png(image, tmp_path / "out.png")

        with Image.open(path) as img:
            assert img.mode == "RGB"
            assert img.size == (4, 3)
            np.testing.assert_array_equal(np.asarray(img), image_to_uint8(image))

    def test_save_png_default_path(self):
        """Test that a missing path writes a timestamped file to the temp dir."""
        from rtw.preview.export import save_png

        image = _image([[0.5, 0.5, 0.5]], width=1, height=1, samples_per_pixel=1)
        path = save_png(image)
        try:
            assert path.parent == Path(tempfile.gettempdir())
            assert re.fullmatch(r"raytrace-\d+\.\d+s\.png", path.name)
            assert path.exists()
        finally:
            path.unlink()


class TestSaveImage:
    """Tests for format selection."""

    def test_extension_selects_format(self, tmp_path):
        """Test .png and .ppm dispatch."""
        from rtw.preview.export import save_image

        image = _image([[0.5, 0.5, 0.5]], width=1, height=1, samples_per_pixel=1)
        ppm = save_image(image, tmp_path / "a.PPM")
        png = save_image(image, tmp_path / "b.png")

        assert ppm.read_text().startswith("P3\n")
        assert png.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_unknown_extension(self, tmp_path):
        """Test that unsupported extensions raise ValueError."""
        from rtw.preview.export import save_image

        image = _image([[0.5, 0.5, 0.5]], width=1, height=1, samples_per_pixel=1)
        with pytest.raises(ValueError, match="Unsupported image format"):
            save_image(image, tmp_path / "out.jpg")

    def test_default_output_path(self, tmp_path):
        """Test default_output_path naming."""
        from rtw.preview.export import default_output_path

        path = default_output_path("ppm", tmp_path)
        assert path.parent == tmp_path
        assert re.fullmatch(r"raytrace-\d+\.\d+s\.ppm", path.name)


class TestComputeRmse:
    """Tests for compute_rmse."""

    def test_rmse_identical_images(self):
        """Test that identical images have zero RMSE."""
        from rtw.preview.export import compute_rmse

        a = np.random.default_rng(0).random((4, 4, 3))
        assert compute_rmse(a, a.copy()) == 0.0

    def test_rmse_known_difference(self):
        """Test RMSE of a constant offset."""
        from rtw.preview.export import compute_rmse

        a = np.zeros((2, 2, 3))
        b = np.full((2, 2, 3), 0.5)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_rmse_shape_mismatch_raises(self):
        """Test that mismatched shapes raise ValueError."""
        from rtw.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))


class TestModuleExports:
    """Tests for the package exports."""

    def test_preview_exports(self):
        """Test that the preview package exposes its public API."""
        import rtw.preview as preview

        for name in preview.__all__:
            assert hasattr(preview, name)
