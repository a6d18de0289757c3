"""Scene-level sphere storage and nearest-hit queries.

The scene is a flat list of spheres kept in Taichi fields using a
Structure-of-Arrays layout. It is filled from Python before rendering and
only read while a kernel runs. intersect_scene is the list's hit test: a
linear scan that shrinks the search interval to the closest hit found so
far, so the returned record is the nearest intersection in (t_min, t_max).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.scene.intersection import add_sphere, intersect_scene, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from rtw.core.ray import Ray
from rtw.core.vec import vec3
from rtw.geometry.sphere import HitRecord, Sphere, hit_sphere

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere (must be positive).
        material_id: The unified material ID of the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Assemble the Sphere stored at an index."""
    return Sphere(
        center=sphere_centers[index],
        radius=sphere_radii[index],
        material_id=sphere_material_ids[index],
    )


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f32, t_max: ti.f32, rec: HitRecord):
    """Find the nearest sphere hit along a ray.

    Spheres are tested in insertion order with the upper bound shrinking to
    the closest t found so far. A later sphere replaces the current hit only
    if it is strictly closer, so exact ties keep the earlier sphere.

    Args:
        ray: The ray to test.
        t_min: Exclusive lower bound on accepted t.
        t_max: Exclusive upper bound on accepted t.
        rec: The current hit record, returned unchanged if nothing is hit.

    Returns:
        A tuple of (hit_anything, record).
    """
    hit_anything = 0
    closest_so_far = t_max
    result = rec

    for i in range(num_spheres[None]):
        did_hit, candidate = hit_sphere(ray, get_sphere(i), t_min, closest_so_far, result)
        if did_hit == 1:
            hit_anything = 1
            closest_so_far = candidate.t
            result = candidate

    return hit_anything, result
