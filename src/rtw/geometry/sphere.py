"""Sphere primitive and ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
intersection routine used by the scene list.

The intersection solves ``|O + tD - C|^2 = r^2`` with the half-b form of
the quadratic formula and accepts a root only when it lies strictly inside
the open interval (t_min, t_max). The nearer root is tried first.

HitRecord is passed by value: hit_sphere takes the current record and
returns ``(did_hit, record)``. On a miss the returned record is the input
unchanged, so a caller can thread one record through every test.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from rtw.core.ray import Ray, ray_at
from rtw.core.vec import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere.
        material_id: Unified material ID shared with other spheres.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of the nearest ray-surface intersection found so far.

    Attributes:
        point: The 3D point where the ray intersected the surface.
        normal: Unit surface normal, always facing against the incoming ray.
        t: The ray parameter of the intersection.
        front_face: 1 if the ray hit the outside of the surface, 0 if it hit
            from inside.
        material_id: Unified material ID of the hit surface.
        ray_count: Number of rays traced so far for the current camera sample.
    """

    point: vec3
    normal: vec3
    t: ti.f32
    front_face: ti.i32
    material_id: ti.i32
    ray_count: ti.i32


@ti.func
def make_hit_record() -> HitRecord:
    """Create an empty hit record with a zero ray count."""
    return HitRecord(
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        t=0.0,
        front_face=0,
        material_id=0,
        ray_count=0,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32, rec: HitRecord):
    """Test a ray against a sphere.

    With oc = origin - center the quadratic is a*t^2 + 2*half_b*t + c = 0,
    where:
        a = dot(D, D)
        half_b = dot(oc, D)
        c = dot(oc, oc) - radius^2

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        t_min: Exclusive lower bound on accepted t.
        t_max: Exclusive upper bound on accepted t.
        rec: The current hit record. Its ray_count is carried into a new
            record on a hit.

    Returns:
        A tuple of (did_hit, record). did_hit is 1 on a hit; on a miss the
        record is rec unchanged.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    did_hit = 0
    result = rec

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        # Find the nearest root that lies in the acceptable range
        root = (-half_b - sqrtd) / a
        valid = (root > t_min) and (root < t_max)
        if not valid:
            root = (-half_b + sqrtd) / a
            valid = (root > t_min) and (root < t_max)

        if valid:
            did_hit = 1
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            front_face = 0
            normal = -outward_normal
            if tm.dot(ray.direction, outward_normal) < 0.0:
                front_face = 1
                normal = outward_normal
            result = HitRecord(
                point=point,
                normal=normal,
                t=root,
                front_face=front_face,
                material_id=sphere.material_id,
                ray_count=rec.ray_count,
            )

    return did_hit, result
