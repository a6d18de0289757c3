"""Sky gradient returned for rays that escape the scene.

The background blends two colors by the height of the unit ray direction:
    t = 0.5 * (unit(direction).y + 1)
    color = (1 - t) * bottom + t * top

By default the gradient runs from a pale lavender at the horizon below to a
light blue straight up. Scenes can override both colors.
"""

import taichi as ti
import taichi.math as tm

from rtw.core.vec import unit, vec3

# Default gradient endpoints (8-bit sRGB values scaled to [0, 1])
DEFAULT_BOTTOM_COLOR = (248.0 / 255.0, 245.0 / 255.0, 254.0 / 255.0)
DEFAULT_TOP_COLOR = (139.0 / 255.0, 179.0 / 255.0, 237.0 / 255.0)

_background_bottom = ti.Vector.field(3, dtype=ti.f32, shape=())
_background_top = ti.Vector.field(3, dtype=ti.f32, shape=())
# 0 while the defaults apply (fields start zeroed)
_background_custom = ti.field(dtype=ti.i32, shape=())


def set_background(
    bottom: tuple[float, float, float],
    top: tuple[float, float, float],
) -> None:
    """Override the gradient colors.

    Args:
        bottom: Color seen looking straight down, as (R, G, B).
        top: Color seen looking straight up, as (R, G, B).

    Raises:
        ValueError: If any component is negative.
    """
    for name, color in (("bottom", bottom), ("top", top)):
        if any(component < 0.0 for component in color):
            raise ValueError(f"Background {name} color {color} has a negative component")

    _background_bottom[None] = vec3(bottom[0], bottom[1], bottom[2])
    _background_top[None] = vec3(top[0], top[1], top[2])
    _background_custom[None] = 1


def reset_background() -> None:
    """Restore the default gradient."""
    _background_custom[None] = 0


def get_background() -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Get the active (bottom, top) gradient colors."""
    if _background_custom[None] == 0:
        return DEFAULT_BOTTOM_COLOR, DEFAULT_TOP_COLOR
    bottom = _background_bottom[None]
    top = _background_top[None]
    return (
        (float(bottom[0]), float(bottom[1]), float(bottom[2])),
        (float(top[0]), float(top[1]), float(top[2])),
    )


@ti.func
def background_color(direction: vec3) -> vec3:
    """Evaluate the sky gradient for a ray direction.

    Args:
        direction: The ray direction (any nonzero length).

    Returns:
        The background color seen along the direction.
    """
    bottom = vec3(DEFAULT_BOTTOM_COLOR[0], DEFAULT_BOTTOM_COLOR[1], DEFAULT_BOTTOM_COLOR[2])
    top = vec3(DEFAULT_TOP_COLOR[0], DEFAULT_TOP_COLOR[1], DEFAULT_TOP_COLOR[2])
    if _background_custom[None] == 1:
        bottom = _background_bottom[None]
        top = _background_top[None]

    t = 0.5 * (unit(direction).y + 1.0)
    return tm.mix(bottom, top, t)
