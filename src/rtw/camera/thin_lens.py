"""Thin-lens camera model for primary ray generation.

This module implements a positionable camera with defocus blur:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- Aperture and focus distance for depth of field (aperture 0 is a pinhole)

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport lies on the focus plane, focus_dist in front of the lens. A ray
for image coordinates (s, t) starts at a random point on the lens disk and
passes through ``lower_left + s * horizontal + t * vertical``. Ray
directions are not normalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray, rng = get_ray(0.5, 0.5, ti.u32(1))  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from rtw.core.ray import make_ray
from rtw.core.vec import random_in_unit_disk, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera with no blur.
        focus_dist: Distance from the lens to the plane in perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0

    def validate(self) -> None:
        """Check that the parameters describe a usable camera.

        Raises:
            ValueError: If vfov is outside (0, 180), aspect_ratio or
                focus_dist is not positive, aperture is negative,
                lookfrom equals lookat, or vup is parallel to the view
                direction.
        """
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be non-negative, got {self.aperture}")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")

        view = np.subtract(self.lookfrom, self.lookat)
        if np.linalg.norm(view) == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        if np.linalg.norm(np.cross(self.vup, view)) == 0.0:
            raise ValueError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport vectors on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the orthonormal basis and viewport geometry in double
    precision with NumPy and stores them in Taichi fields. Must be called
    before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the configuration is degenerate (see ThinLensCamera.validate).
    """
    camera.validate()

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    horizontal = u * viewport_width * camera.focus_dist
    vertical = v * viewport_height * camera.focus_dist
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - w * camera.focus_dist

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32, state: ti.u32):
    """Generate a camera ray through image coordinates (s, t).

    The coordinates are normalized:
    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    A lens sample is drawn for every ray, including pinhole cameras where
    the lens radius is zero.

    Args:
        s: Horizontal image coordinate.
        t: Vertical image coordinate.
        state: The current random stream state.

    Returns:
        A tuple of (ray, new_state).
    """
    disk, rng = random_in_unit_disk(state)
    rd = _lens_radius[None] * disk
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - _camera_origin[None]
        - offset
    )
    return make_ray(origin, direction), rng


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera position (center of the lens) in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        vectors and the scalar lens_radius.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info: dict[str, tuple[float, float, float] | float] = {}
    for name, vec_field in fields.items():
        value = vec_field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    info["lens_radius"] = float(_lens_radius[None])
    return info
