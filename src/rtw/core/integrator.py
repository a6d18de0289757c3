"""Path tracing integrator and frame driver kernel.

This module implements the Monte Carlo estimate of each pixel color. Every
camera sample follows one light path: the ray is intersected with the scene,
scattered by the material it hits, and followed again until it escapes to
the sky, is absorbed, or runs out of depth.

The path color obeys the recursion
    color(ray, depth) = 0                                   if depth <= 0
                      = background(ray)                     if nothing is hit
                      = 0                                   if absorbed
                      = attenuation * color(scattered, depth - 1)
which is evaluated here as a loop carrying the product of attenuations.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Explicit per-sample random streams for reproducible frames
    - Pure sum accumulation; batching does not change the result
    - Per-pixel traced-ray counters for diagnostics
    - Shadow-acne avoidance by ignoring hits closer than T_MIN

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.core.integrator import setup_render_target, render_samples
    >>> from rtw.scene.presets import three_sphere_scene
    >>> from rtw.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = three_sphere_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(300, 200)
    >>> render_samples(0, 16, samples_per_pixel=16, max_depth=10, seed=0)
"""

import logging

import numpy as np
import taichi as ti
import taichi.math as tm

from rtw.camera.thin_lens import get_ray
from rtw.core.image import FinalImage
from rtw.core.ray import Ray
from rtw.core.rng import random_float, seed_stream
from rtw.core.vec import vec3
from rtw.geometry.sphere import HitRecord, make_hit_record
from rtw.materials.dielectric import scatter_dielectric_by_id
from rtw.materials.lambertian import scatter_lambertian_by_id
from rtw.materials.metal import scatter_metal_by_id
from rtw.scene.background import background_color
from rtw.scene.intersection import intersect_scene
from rtw.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection; hits closer than T_MIN are ignored
T_MIN = 0.001
T_MAX = tm.inf

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color sum per pixel, indexed [x, y] with y = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Rays traced per pixel, summed over its samples
_ray_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()
    logger.debug(f"Render target set to {width}x{height}")


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)
    _ray_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Dispatch to the scatter function of the hit material.

    Args:
        ray_in: The incoming ray.
        rec: The hit record, whose material_id selects the material.
        state: The current random stream state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    scattered = Ray(origin=rec.point, direction=rec.normal)
    rng = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        did_scatter, attenuation, scattered, rng = scatter_lambertian_by_id(
            type_index, ray_in, rec, state
        )
    elif mat_type == int(MaterialType.METAL):
        did_scatter, attenuation, scattered, rng = scatter_metal_by_id(
            type_index, ray_in, rec, state
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        did_scatter, attenuation, scattered, rng = scatter_dielectric_by_id(
            type_index, ray_in, rec, state
        )

    return did_scatter, attenuation, scattered, rng


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray: Ray, rec: HitRecord, depth: ti.i32, state: ti.u32):
    """Estimate the color seen along a ray.

    Each traced ray increments rec.ray_count. Rays that escape pick up the
    background color, absorbed rays and paths that exhaust their depth
    contribute black.

    Only rays that are intersected with the scene are counted. A path that
    runs out of depth is not charged for the step that finds the depth
    exhausted, so its count is one lower than a recursive tracer that
    increments on every call would report.

    Args:
        ray: The ray to follow.
        rec: The hit record threaded through every bounce.
        depth: Maximum number of rays to trace. depth <= 0 returns black
            without tracing.
        state: The current random stream state.

    Returns:
        A tuple of (color, record, new_state).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = Ray(origin=ray.origin, direction=ray.direction)
    record = rec
    rng = state

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(depth):
        if active == 1:
            record.ray_count += 1
            hit, record = intersect_scene(current, T_MIN, T_MAX, record)

            if hit == 0:
                color = throughput * background_color(current.direction)
                active = 0
            else:
                did_scatter, attenuation, scattered, rng = _scatter_material(
                    current, record, rng
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered

    return color, record, rng


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_batch(
    width: ti.i32,
    height: ti.i32,
    sample_start: ti.i32,
    sample_end: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    """Add samples [sample_start, sample_end) to every pixel.

    Pixels are processed in parallel; samples of one pixel run in order.
    Each sample draws from its own stream, seeded by (seed, pixel, sample).

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        sample_start: Index of the first sample to add.
        sample_end: One past the index of the last sample to add.
        samples_per_pixel: Total samples of the frame. With a single sample
            the sub-pixel offset is fixed at 1.0 instead of random.
        max_depth: Maximum rays traced per sample.
        seed: Render seed.
    """
    for x, y in ti.ndrange(width, height):
        pixel_index = y * width + x
        # Width-1 and height-1 spread pixels across the full [0, 1] range
        u_scale = 1.0 / ti.cast(ti.max(width - 1, 1), ti.f32)
        v_scale = 1.0 / ti.cast(ti.max(height - 1, 1), ti.f32)
        for s in range(sample_start, sample_end):
            rng = seed_stream(seed, pixel_index, s)

            jitter_u = 1.0
            jitter_v = 1.0
            if samples_per_pixel > 1:
                jitter_u, rng = random_float(rng)
                jitter_v, rng = random_float(rng)

            u = (jitter_u + ti.cast(x, ti.f32)) * u_scale
            v = (jitter_v + ti.cast(y, ti.f32)) * v_scale
            ray, rng = get_ray(u, v, rng)

            color, rec, rng = ray_color(ray, make_hit_record(), max_depth, rng)

            # Drop NaN/Inf components from degenerate geometry
            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    color[c] = 0.0

            _color_buffer[x, y] += color
            _ray_count[x, y] += rec.ray_count

        _sample_count[x, y] += sample_end - sample_start


# Rays traced by the last _trace_single_ray call
_single_ray_count = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32, seed: ti.u32) -> vec3:
    """Trace one ray from an arbitrary origin, for testing and debugging."""
    rng = seed_stream(seed, 0, 0)
    ray = Ray(origin=origin, direction=direction)
    color, rec, rng = ray_color(ray, make_hit_record(), max_depth, rng)
    _single_ray_count[None] = rec.ray_count
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    seed: int = 0,
) -> tuple[tuple[float, float, float], int]:
    """Trace a single ray through the current scene.

    This is a Python-callable function for testing. The ray uses the
    stream of sample 0 of pixel 0 under the given seed.

    Args:
        origin: Ray origin.
        direction: Ray direction (any nonzero length).
        max_depth: Maximum number of rays to trace.
        seed: Render seed.

    Returns:
        Tuple of ((R, G, B), ray_count).
    """
    color = _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
        seed & 0xFFFFFFFF,
    )
    return (float(color[0]), float(color[1]), float(color[2])), int(_single_ray_count[None])


def render_samples(
    sample_start: int,
    sample_end: int,
    samples_per_pixel: int,
    max_depth: int,
    seed: int = 0,
) -> None:
    """Accumulate samples [sample_start, sample_end) into the render target.

    Args:
        sample_start: Index of the first sample to add.
        sample_end: One past the index of the last sample to add.
        samples_per_pixel: Total samples planned for the frame.
        max_depth: Maximum rays traced per sample.
        seed: Render seed.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the sample range is empty or reversed.
    """
    _check_render_target_initialized()
    if sample_end <= sample_start or sample_start < 0:
        raise ValueError(f"Invalid sample range [{sample_start}, {sample_end})")

    width, height = get_image_dimensions()
    _render_batch(
        width,
        height,
        sample_start,
        sample_end,
        samples_per_pixel,
        max_depth,
        seed & 0xFFFFFFFF,
    )


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


def get_total_ray_count() -> int:
    """Get the number of rays traced over the whole image so far.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    counts = _ray_count.to_numpy()[:width, :height]
    return int(counts.sum(dtype=np.int64))


def get_ray_count_numpy():
    """Get the traced-ray count per pixel as an array of shape (height, width), top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    counts = _ray_count.to_numpy()[:width, :height]
    return np.flipud(np.transpose(counts, (1, 0)))


def get_final_image(samples_per_pixel: int | None = None) -> FinalImage:
    """Collect the accumulated color sums into a FinalImage.

    Args:
        samples_per_pixel: Samples summed per pixel. Defaults to the count
            recorded in the render target.

    Returns:
        The FinalImage with rows ordered top scanline first.

    Raises:
        RuntimeError: If render target has not been set up or holds no samples.
    """
    _check_render_target_initialized()

    if samples_per_pixel is None:
        samples_per_pixel = get_total_samples()
    if samples_per_pixel < 1:
        raise RuntimeError("No samples rendered yet.")

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :].astype(np.float64)

    # (width, height, 3) with y up -> (height, width, 3) with row 0 at the top
    image = np.flipud(np.transpose(image, (1, 0, 2)))

    return FinalImage(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        pixels=np.ascontiguousarray(image).reshape(width * height, 3),
    )
