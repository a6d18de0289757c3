"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    rng: Explicitly seeded per-sample random streams
    vec: Vector arithmetic, reflection/refraction and random vectors
    ray: Ray data structure
    config: Render configuration
    image: Accumulated frame container
    integrator: Path integrator and frame driver kernel
    progressive: Batched rendering with progress reporting

All compute-intensive operations use Taichi kernels.
"""

from .config import RenderConfig
from .image import FinalImage
from .ray import Ray, make_ray, ray_at
from .rng import hash_u32, random_float, random_float_in_range, seed_stream
from .vec import (
    Color,
    Point3,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    random_in_hemisphere,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec,
    random_vec_in_range,
    reflect,
    refract,
    unit,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import them directly from rtw.core.integrator or rtw.core.progressive.

__all__ = [
    "RenderConfig",
    "FinalImage",
    "Ray",
    "ray_at",
    "make_ray",
    "hash_u32",
    "seed_stream",
    "random_float",
    "random_float_in_range",
    "vec3",
    "Point3",
    "Color",
    "length",
    "length_squared",
    "unit",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "random_vec",
    "random_vec_in_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_hemisphere",
    "random_in_unit_disk",
]
