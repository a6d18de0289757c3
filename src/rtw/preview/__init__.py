"""Preview module for output and visualization.

Components:
    display: Gamma-2 tone mapping and Matplotlib preview
    export: PNG/PPM image export utilities

Example:
    >>> from rtw.preview import save_png, show_preview
    >>> image = render_frame(config, camera)
    >>> save_png(image, "output.png")
    >>> show_preview(image)
"""

from rtw.preview.display import (
    image_to_uint8,
    show_comparison,
    show_preview,
    tone_map_gamma2,
)
from rtw.preview.export import (
    compute_rmse,
    default_output_path,
    format_ppm,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "show_comparison",
    # Tone mapping
    "tone_map_gamma2",
    "image_to_uint8",
    # Export functions
    "save_png",
    "save_ppm",
    "save_image",
    "format_ppm",
    "default_output_path",
    "compute_rmse",
]
