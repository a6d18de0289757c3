"""Dielectric (glass/water) material implementation.

This module implements transparent materials that both reflect and refract.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for the reflection probability
    - Total internal reflection when ratio * sin(theta) > 1

The refraction ratio is 1/ir when entering the surface and ir when leaving
it. A random float is drawn for every interaction; the ray reflects when
refraction is impossible or when the Schlick reflectance exceeds that float.
The color is attenuated by the material's albedo (white for clear glass).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered, rng = scatter_dielectric(
    >>> #     ir, albedo, ray_in, rec, rng
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from rtw.core.ray import Ray, make_ray
from rtw.core.rng import random_float
from rtw.core.vec import reflect, refract, unit, vec3
from rtw.geometry.sphere import HitRecord


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Compute the reflection probability with Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        ref_idx: The refraction ratio.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - ref_idx) / (1 + ref_idx))^2.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def scatter_dielectric(ir: ti.f32, albedo: vec3, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter a ray through a dielectric surface.

    Args:
        ir: Index of refraction of the material.
        albedo: The color tint of transmitted and reflected light.
        ray_in: The incoming ray.
        rec: The hit record of the intersection.
        state: The current random stream state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state) where
        did_scatter is always 1 and attenuation is the albedo.
    """
    refraction_ratio = 1.0 / ir
    if rec.front_face == 0:
        refraction_ratio = ir

    unit_direction = unit(ray_in.direction)
    cos_theta = tm.min(tm.dot(-unit_direction, rec.normal), 1.0)
    sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))

    cannot_refract = refraction_ratio * sin_theta > 1.0
    r, rng = random_float(state)

    direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or schlick_reflectance(cos_theta, refraction_ratio) > r:
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, refraction_ratio)

    scattered = make_ray(rec.point, direction)
    return 1, albedo, scattered, rng


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 512

# Storage for dielectric material properties
dielectric_irs = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
dielectric_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(
    ir: float = 1.5,
    albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ir: Index of refraction. Default is 1.5 (typical glass).
            Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
        albedo: The color tint as (R, G, B). Default is clear (white).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the index of refraction is not positive.
        ValueError: If any albedo component is outside [0, 1].
    """
    if ir <= 0.0:
        raise ValueError(f"Index of refraction = {ir} must be positive.")

    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_irs[idx] = ir
    dielectric_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ir(material_idx: ti.i32) -> ti.f32:
    """Get the index of refraction for a dielectric material by index."""
    return dielectric_irs[material_idx]


@ti.func
def get_dielectric_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a dielectric material by index."""
    return dielectric_albedos[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter through a registered dielectric material.

    Looks up the index of refraction and albedo from the material registry
    and calls scatter_dielectric.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state).
    """
    ir = get_dielectric_ir(material_idx)
    albedo = get_dielectric_albedo(material_idx)
    return scatter_dielectric(ir, albedo, ray_in, rec, state)
