"""Container for a finished frame.

FinalImage holds the unnormalized per-pixel color sums produced by the frame
driver. Rows run top scanline first and pixels left to right, which is the
order image writers consume them in. Dividing by ``samples_per_pixel`` gives
the linear pixel average.
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt


@dataclass
class FinalImage:
    """Accumulated color sums of a rendered frame.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of samples summed into each pixel.
        pixels: Float64 array of shape (width * height, 3), top row first.
    """

    width: int
    height: int
    samples_per_pixel: int
    pixels: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        expected = (self.width * self.height, 3)
        if self.pixels.shape != expected:
            raise ValueError(f"pixels must have shape {expected}, got {self.pixels.shape}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )

    def pixel(self, x: int, row: int) -> npt.NDArray[np.float64]:
        """Get the color sum at column x of a row (row 0 is the top scanline)."""
        return self.pixels[row * self.width + x]

    def to_array(self) -> npt.NDArray[np.float64]:
        """Get the color sums as an array of shape (height, width, 3)."""
        return self.pixels.reshape(self.height, self.width, 3)

    def average(self) -> npt.NDArray[np.float64]:
        """Get the linear per-pixel averages as an array of shape (height, width, 3)."""
        return self.to_array() / float(self.samples_per_pixel)
