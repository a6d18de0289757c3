"""Explicit random number streams for Taichi kernels.

Every random decision in the renderer draws from a 32-bit state that is
threaded through the calling functions: each sampler takes a state and
returns ``(value, new_state)``. A stream is derived from the render seed,
the pixel index and the sample index, so the value sequence seen by a
sample does not depend on thread scheduling or on how samples are batched.

The seed is mixed with a Wang hash and the stream is advanced with a
xorshift32 generator. Floats are built from the top 24 bits of the state,
which keeps them strictly below 1.0.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.core.rng import seed_stream, random_float
    >>> @ti.kernel
    ... def sample() -> ti.f32:
    ...     state = seed_stream(ti.u32(7), 0, 0)
    ...     value, state = random_float(state)
    ...     return value
"""

import taichi as ti

# 2^-24, scales the top 24 bits of a u32 into [0, 1)
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def hash_u32(key: ti.u32) -> ti.u32:
    """Mix a 32-bit key with Thomas Wang's integer hash.

    Args:
        key: The value to hash.

    Returns:
        A well-scrambled 32-bit value.
    """
    h = (key ^ ti.u32(61)) ^ (key >> ti.u32(16))
    h *= ti.u32(9)
    h = h ^ (h >> ti.u32(4))
    h *= ti.u32(0x27D4EB2D)
    h = h ^ (h >> ti.u32(15))
    return h


@ti.func
def seed_stream(seed: ti.u32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the initial state for one pixel sample.

    Args:
        seed: The render seed.
        pixel_index: Linear pixel index (y * width + x).
        sample_index: Index of the sample within the pixel.

    Returns:
        A nonzero 32-bit state.
    """
    h = hash_u32(seed)
    h = hash_u32(h ^ ti.cast(pixel_index, ti.u32))
    h = hash_u32(h ^ ti.cast(sample_index, ti.u32))
    # xorshift has a fixed point at zero
    if h == ti.u32(0):
        h = ti.u32(1)
    return h


@ti.func
def next_state(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step."""
    x = state
    x ^= x << ti.u32(13)
    x ^= x >> ti.u32(17)
    x ^= x << ti.u32(5)
    return x


@ti.func
def random_float(state: ti.u32):
    """Draw a float uniformly distributed in [0, 1).

    Args:
        state: The current stream state.

    Returns:
        A tuple of (value, new_state).
    """
    rng = next_state(state)
    value = ti.cast(rng >> ti.u32(8), ti.f32) * _INV_2_24
    return value, rng


@ti.func
def random_float_in_range(min_value: ti.f32, max_value: ti.f32, state: ti.u32):
    """Draw a float uniformly distributed in [min_value, max_value).

    Args:
        min_value: Lower bound (inclusive).
        max_value: Upper bound (exclusive).
        state: The current stream state.

    Returns:
        A tuple of (value, new_state).
    """
    r, rng = random_float(state)
    return min_value + (max_value - min_value) * r, rng
