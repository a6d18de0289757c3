"""Gamma-2 tone mapping and Matplotlib preview for rendered frames.

A pixel's displayed value is derived from its color sum in three steps:
    1. Average: value = sum / samples_per_pixel
    2. Clamp to [0, 0.999]
    3. Gamma 2: value = sqrt(value)
Output bytes are floor(256 * value), so every byte lies in [0, 255].

Features:
    - Exact gamma-2 8-bit conversion used by all writers
    - Float display image for previews
    - Side-by-side comparison of two frames

Example:
    >>> from rtw.preview.display import show_preview
    >>> image = render_frame(config, camera)
    >>> show_preview(image)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from rtw.core.image import FinalImage

# Upper clamp of averaged values before gamma; keeps 256 * sqrt(v) below 256
MAX_DISPLAY_VALUE = 0.999


def tone_map_gamma2(image: FinalImage) -> npt.NDArray[np.float64]:
    """Average, clamp and gamma-encode a frame.

    Args:
        image: The FinalImage holding color sums.

    Returns:
        Display values in [0, sqrt(0.999)] of shape (height, width, 3).
    """
    averaged = image.average()
    clamped = np.clip(averaged, 0.0, MAX_DISPLAY_VALUE)
    return np.sqrt(clamped)


def image_to_uint8(image: FinalImage) -> npt.NDArray[np.uint8]:
    """Convert a frame to 8-bit RGB.

    Args:
        image: The FinalImage holding color sums.

    Returns:
        Array of shape (height, width, 3) with dtype uint8, top row first.
    """
    return np.floor(256.0 * tone_map_gamma2(image)).astype(np.uint8)


def show_preview(
    image: FinalImage,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a frame as a Matplotlib figure.

    Requires the optional ``preview`` dependencies (matplotlib).

    Args:
        image: The FinalImage to display.
        title: Custom title (default shows size and sample count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image_to_uint8(image))
    ax.axis("off")

    if title is None:
        title = f"{image.width}x{image.height} - {image.samples_per_pixel} SPP"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: FinalImage,
    image_b: FinalImage,
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two frames side by side with an amplified difference view.

    Args:
        image_a: First frame.
        image_b: Second frame (same size as image_a).
        labels: Labels for the two frames.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two frames in display space.
    """
    import matplotlib.pyplot as plt

    from rtw.preview.export import compute_rmse

    display_a = tone_map_gamma2(image_a)
    display_b = tone_map_gamma2(image_b)
    rmse = compute_rmse(display_a, display_b)

    diff_amplified = np.clip(np.abs(display_a - display_b) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
