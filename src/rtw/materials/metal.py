"""Metal (specular reflective) material implementation.

Metals reflect the incoming direction about the surface normal:
    R = I - 2(I . N)N

For fuzzy metals the reflected direction is perturbed by a random point in
the unit ball scaled by the fuzz factor. The perturbed direction is not
renormalized. If it ends up at or below the surface the ray is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered, rng = scatter_metal(
    >>> #     albedo, fuzz, ray_in, rec, rng
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from rtw.core.ray import Ray, make_ray
from rtw.core.vec import random_in_unit_sphere, reflect, unit, vec3
from rtw.geometry.sphere import HitRecord


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: Perturbation radius in [0, 1]. 0 = perfect mirror.
        ray_in: The incoming ray.
        rec: The hit record of the intersection.
        state: The current random stream state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state) where
        did_scatter is 1 only if the scattered direction leaves the surface.
    """
    reflected = reflect(unit(ray_in.direction), rec.normal)
    fuzz_offset, rng = random_in_unit_sphere(state)
    scattered = make_ray(rec.point, reflected + fuzz * fuzz_offset)

    did_scatter = 0
    if tm.dot(scattered.direction, rec.normal) > 0.0:
        did_scatter = 1

    return did_scatter, albedo, scattered, rng


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 512

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component must be in [0, 1].
        fuzz: The reflection perturbation in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum blur)."
        )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the fuzz factor for a metal material by index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter off a registered metal material.

    Looks up the albedo and fuzz from the material registry and calls
    scatter_metal.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, ray_in, rec, state)
