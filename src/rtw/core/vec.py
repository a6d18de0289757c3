"""Vector utilities for GPU-accelerated ray tracing.

Points, directions and colors all share the three-component ``vec3`` type
from Taichi's math module; ``Point3`` and ``Color`` are aliases kept for
readability. Arithmetic is componentwise, while ``dot``, ``cross`` and
``length`` are geometric.

The random constructors take an explicit stream state (see
:mod:`rtw.core.rng`) and return ``(vector, new_state)``. Rejection sampling
loops are bounded by MAX_REJECTION_TRIES since Taichi functions cannot loop
without limit; the chance of exhausting the bound is below 1e-30.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.core.vec import vec3, reflect
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

from rtw.core.rng import random_float, random_float_in_range

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
Point3 = vec3
Color = vec3

# Components below this magnitude count as zero
NEAR_ZERO_EPSILON = 1e-8

# Upper bound on rejection sampling iterations
MAX_REJECTION_TRIES = 100


# =============================================================================
# Vector Arithmetic
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def unit(v: vec3) -> vec3:
    """Scale a vector to unit length.

    There is no zero-length guard: a zero vector produces NaN components.
    Callers only normalize directions that are nonzero by construction.

    Args:
        v: The input vector.

    Returns:
        v divided by its length.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a normal.

    Args:
        v: The incoming direction.
        n: The surface normal (unit length).

    Returns:
        v - 2(v . n)n
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The caller is responsible for ruling out total internal reflection
    beforehand; the parallel component takes the absolute value under the
    square root so the result stays finite either way.

    Args:
        uv: The incoming direction (unit length).
        n: The surface normal facing the incoming ray (unit length).
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


# =============================================================================
# Random Vector Constructors
# =============================================================================


@ti.func
def random_vec(state: ti.u32):
    """Generate a vector with components uniform in [0, 1).

    Returns:
        A tuple of (vector, new_state).
    """
    x, rng = random_float(state)
    y, rng = random_float(rng)
    z, rng = random_float(rng)
    return vec3(x, y, z), rng


@ti.func
def random_vec_in_range(min_value: ti.f32, max_value: ti.f32, state: ti.u32):
    """Generate a vector with components uniform in [min_value, max_value).

    Returns:
        A tuple of (vector, new_state).
    """
    x, rng = random_float_in_range(min_value, max_value, state)
    y, rng = random_float_in_range(min_value, max_value, rng)
    z, rng = random_float_in_range(min_value, max_value, rng)
    return vec3(x, y, z), rng


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a random point strictly inside the unit ball.

    Samples the cube [-1, 1)^3 and rejects points with squared length >= 1.

    Returns:
        A tuple of (point, new_state).
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_TRIES):
        if found == 0:
            candidate, rng = random_vec_in_range(-1.0, 1.0, rng)
            if length_squared(candidate) < 1.0:
                p = candidate
                found = 1
    return p, rng


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector by normalizing a unit-ball sample.

    Returns:
        A tuple of (unit vector, new_state).
    """
    p, rng = random_in_unit_sphere(state)
    return unit(p), rng


@ti.func
def random_in_hemisphere(normal: vec3, state: ti.u32):
    """Generate a random unit-ball point in the hemisphere around a normal.

    Args:
        normal: The normal defining the hemisphere.
        state: The current stream state.

    Returns:
        A tuple of (point, new_state) with dot(point, normal) >= 0.
    """
    in_unit_sphere, rng = random_in_unit_sphere(state)
    result = in_unit_sphere
    if tm.dot(in_unit_sphere, normal) <= 0.0:
        result = -in_unit_sphere
    return result, rng


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Generate a random point inside the unit disk in the xy-plane.

    Used for thin-lens defocus sampling.

    Returns:
        A tuple of (point, new_state) where point.z == 0.
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_TRIES):
        if found == 0:
            x, rng = random_float_in_range(-1.0, 1.0, rng)
            y, rng = random_float_in_range(-1.0, 1.0, rng)
            if x * x + y * y < 1.0:
                p = vec3(x, y, 0.0)
                found = 1
    return p, rng
