"""Camera module for view and ray generation.

Components:
    thin_lens: Look-at perspective camera with optional defocus blur

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_camera_origin",
    "get_camera_info",
]
