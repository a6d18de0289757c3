"""Progressive frame driver for batched sample accumulation.

This module wraps the integrator kernels with a convenient interface:
- Rendering a frame in batches of samples
- Progress callbacks or a generator for UI updates and cancellation
- Reset and re-render of the same frame

Every sample is seeded from (seed, pixel, sample index), so splitting a
frame into batches produces exactly the same image as rendering it at once.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.core.config import RenderConfig
    >>> from rtw.core.progressive import ProgressiveRenderer
    >>> from rtw.scene.presets import three_sphere_scene
    >>> from rtw.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = three_sphere_scene()
    >>> setup_camera(camera)
    >>> renderer = ProgressiveRenderer(RenderConfig(image_width=300, samples_per_pixel=50))
    >>> renderer.render(batch_size=10)
    >>> image = renderer.get_final_image()
"""

import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path

from rtw.camera.thin_lens import ThinLensCamera, setup_camera
from rtw.core.config import RenderConfig
from rtw.core.image import FinalImage
from rtw.core.integrator import (
    clear_render_target,
    get_final_image,
    get_total_ray_count,
    get_total_samples,
    render_samples,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A renderer that accumulates the samples of one frame in batches.

    The renderer owns the global render target for its lifetime; creating
    it resizes and clears the target.

    Attributes:
        config: The render configuration of the frame.
    """

    def __init__(self, config: RenderConfig) -> None:
        """Initialize the renderer and its render target.

        Args:
            config: Frame configuration (size, samples, depth, seed).

        Raises:
            ValueError: If the image exceeds the maximum supported size.
        """
        self.config = config
        setup_render_target(config.image_width, config.image_height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.image_height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    @property
    def target_samples(self) -> int:
        """Get the number of samples per pixel of a finished frame."""
        return self.config.samples_per_pixel

    @property
    def is_complete(self) -> bool:
        """Whether all samples of the frame have been accumulated."""
        return self.sample_count >= self.target_samples

    def reset(self) -> None:
        """Discard accumulated samples so the frame can be rendered again."""
        clear_render_target()

    def _render_batch(self, batch: int) -> int:
        """Render the next batch of samples and return the new sample count."""
        start = self.sample_count
        render_samples(
            start,
            start + batch,
            samples_per_pixel=self.config.samples_per_pixel,
            max_depth=self.config.max_depth,
            seed=self.config.seed_u32,
        )
        return start + batch

    def render(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples in batches with an optional progress callback.

        Can be called repeatedly; samples beyond the frame's
        samples_per_pixel are never rendered.

        Args:
            num_samples: Number of samples to add. Defaults to all remaining.
            batch_size: Number of samples to render before each callback.
            callback: Optional function called after each batch with
                (current_samples, target_samples).

        Raises:
            ValueError: If batch_size is not positive.

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples in batches, yielding progress after each batch.

        Stop iterating to cancel between batches; the samples rendered so
        far stay in the render target.

        Args:
            num_samples: Number of samples to add. Defaults to all remaining.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_samples, target_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target = self.target_samples
        remaining = target - self.sample_count
        if num_samples is not None:
            remaining = min(remaining, num_samples)

        while remaining > 0:
            batch = min(batch_size, remaining)
            current = self._render_batch(batch)
            remaining -= batch
            logger.debug(f"Rendered {current}/{target} samples per pixel")
            yield (current, target)

    def get_final_image(self) -> FinalImage:
        """Get the accumulated color sums of the samples rendered so far.

        Raises:
            RuntimeError: If no samples have been rendered.
        """
        return get_final_image()

    def save_png(self, filepath: str | Path) -> Path:
        """Save the current image as an 8-bit PNG.

        Returns:
            The path written.
        """
        from rtw.preview.export import save_png

        return save_png(self.get_final_image(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}/{self.target_samples})"
        )


def render_frame(
    config: RenderConfig,
    camera: ThinLensCamera | None = None,
    batch_size: int | None = None,
    callback: ProgressCallback | None = None,
) -> FinalImage:
    """Render a complete frame of the current scene.

    Args:
        config: Frame configuration.
        camera: Camera to set up before rendering. If None, the camera
            already set up is used.
        batch_size: Samples per batch. Defaults to the whole frame in one batch.
        callback: Optional progress callback, see ProgressiveRenderer.render.

    Returns:
        The finished FinalImage.
    """
    if camera is not None:
        setup_camera(camera)

    renderer = ProgressiveRenderer(config)
    logger.info(
        f"Rendering {renderer.width}x{renderer.height} at {config.samples_per_pixel} spp, "
        f"max depth {config.max_depth}, seed {config.seed}"
    )

    start_time = time.perf_counter()
    renderer.render(batch_size=batch_size or config.samples_per_pixel, callback=callback)
    elapsed = time.perf_counter() - start_time

    logger.info(f"Rendered in {elapsed:.2f}s ({get_total_ray_count()} rays traced)")
    return renderer.get_final_image()
