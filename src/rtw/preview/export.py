"""Image export utilities for rendered frames.

This module writes FinalImage frames to disk using the gamma-2 conversion of
:mod:`rtw.preview.display`.

Supported formats:
    - PNG (8-bit RGB via Pillow)
    - PPM (plain-text P3, one "r g b" line per pixel)

When no path is given, files go to the system temp directory as
``raytrace-<seconds since epoch>s.<ext>``.

Example:
    >>> from rtw.preview.export import save_png
    >>> image = render_frame(config, camera)
    >>> save_png(image, "output.png")
"""

from __future__ import annotations

import logging
import tempfile
import time
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from rtw.core.image import FinalImage
from rtw.preview.display import image_to_uint8

logger = logging.getLogger(__name__)


def default_output_path(extension: str, directory: str | Path | None = None) -> Path:
    """Build a timestamped output path.

    Args:
        extension: File extension without the dot ("png" or "ppm").
        directory: Target directory. Defaults to the system temp directory.

    Returns:
        Path of the form <directory>/raytrace-<timestamp>s.<extension>.
    """
    base = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    return base / f"raytrace-{time.time():.6f}s.{extension}"


def save_png(image: FinalImage, filepath: str | Path | None = None) -> Path:
    """Save a frame as an 8-bit RGB PNG file.

    Args:
        image: The FinalImage to save.
        filepath: Output file path. Defaults to default_output_path("png").

    Returns:
        The path written.
    """
    path = Path(filepath) if filepath is not None else default_output_path("png")

    # (H, W, 3) uint8 arrays load as RGB
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(path)

    logger.info(f"Wrote {path}")
    return path


def format_ppm(image: FinalImage) -> str:
    """Encode a frame as plain-text PPM (P3).

    Returns:
        The file contents: a "P3", "<width> <height>", "255" header followed
        by one "r g b" line per pixel, top row first.
    """
    pixels = image_to_uint8(image).reshape(-1, 3)
    lines = ["P3", f"{image.width} {image.height}", "255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.tolist())
    return "\n".join(lines) + "\n"


def save_ppm(image: FinalImage, filepath: str | Path | None = None) -> Path:
    """Save a frame as a plain-text PPM file.

    Args:
        image: The FinalImage to save.
        filepath: Output file path. Defaults to default_output_path("ppm").

    Returns:
        The path written.
    """
    path = Path(filepath) if filepath is not None else default_output_path("ppm")
    path.write_text(format_ppm(image), encoding="ascii")

    logger.info(f"Wrote {path}")
    return path


def save_image(image: FinalImage, filepath: str | Path) -> Path:
    """Save a frame, choosing the format from the file extension.

    Raises:
        ValueError: If the extension is not .png or .ppm.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()
    if suffix == ".png":
        return save_png(image, path)
    if suffix == ".ppm":
        return save_ppm(image, path)
    raise ValueError(f"Unsupported image format: {suffix or '(none)'}")


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
