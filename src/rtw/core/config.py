"""Render configuration.

RenderConfig is the flat set of knobs controlling a frame: output size,
sampling density, path depth and the seed of the random streams. The image
height is derived from the width and aspect ratio.

Example:
    >>> from rtw.core.config import RenderConfig
    >>> config = RenderConfig(image_width=400, samples_per_pixel=100, max_depth=10)
    >>> config.image_height
    266
"""

from dataclasses import asdict, dataclass
from typing import Any

# Defaults used by the command-line renderer
DEFAULT_ASPECT_RATIO = 3.0 / 2.0
DEFAULT_IMAGE_WIDTH = 400
DEFAULT_SAMPLES_PER_PIXEL = 100
DEFAULT_MAX_DEPTH = 10
DEFAULT_SEED = 0


@dataclass
class RenderConfig:
    """Configuration for rendering one frame.

    Attributes:
        aspect_ratio: Width divided by height of the output image.
        image_width: Output width in pixels.
        samples_per_pixel: Number of camera samples averaged per pixel.
        max_depth: Maximum number of rays traced per camera sample.
        seed: Seed of the per-sample random streams. Equal seeds give
            identical images.

    Raises:
        ValueError: If any field is out of range or the derived height is 0.
    """

    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    image_width: int = DEFAULT_IMAGE_WIDTH
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")
        if self.image_height <= 0:
            raise ValueError(
                f"image_width {self.image_width} with aspect_ratio {self.aspect_ratio} "
                "gives an empty image"
            )

    @property
    def image_height(self) -> int:
        """Output height in pixels, floor(image_width / aspect_ratio)."""
        return int(self.image_width / self.aspect_ratio)

    @property
    def seed_u32(self) -> int:
        """The seed reduced to the 32 bits consumed by the kernels."""
        return self.seed & 0xFFFFFFFF

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a configuration from a dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
