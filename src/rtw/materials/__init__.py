"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction and Schlick reflectance

Each material provides a scatter function with the common signature
    did_scatter, attenuation, scattered, rng = scatter_x(params..., ray_in, rec, rng)
plus a registry of Taichi fields holding the parameters of every material of
that type, addressed by a type-local index.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_albedo,
    get_dielectric_ir,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    schlick_reflectance,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "schlick_reflectance",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ir",
    "get_dielectric_albedo",
]
