"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters every incoming ray. The new direction is the
surface normal plus a random unit vector, which yields a cosine-weighted
distribution around the normal. The color is attenuated by the albedo.

When the random unit vector nearly cancels the normal the sum is
degenerate, and the normal itself is used as the scatter direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered, rng = scatter_lambertian(
    >>> #     albedo, ray_in, rec, rng
    >>> # )
"""

import taichi as ti

from rtw.core.ray import Ray, make_ray
from rtw.core.vec import near_zero, random_unit_vector, vec3
from rtw.geometry.sphere import HitRecord


@ti.func
def scatter_lambertian(albedo: vec3, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        ray_in: The incoming ray. Unused, kept for the common scatter signature.
        rec: The hit record of the intersection.
        state: The current random stream state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state) where
        did_scatter is always 1 and attenuation is the albedo.
    """
    offset, rng = random_unit_vector(state)
    scatter_direction = rec.normal + offset

    # Catch degenerate scatter direction
    if near_zero(scatter_direction):
        scatter_direction = rec.normal

    scattered = make_ray(rec.point, scatter_direction)
    return 1, albedo, scattered, rng


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 512

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter off a registered Lambertian material.

    Looks up the albedo from the material registry and calls
    scatter_lambertian.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state).
    """
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, ray_in, rec, state)
