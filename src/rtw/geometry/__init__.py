"""Geometry module for shape primitives.

This module provides the sphere primitive and intersection records:

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they can run inside
the parallel render kernel. They follow the pattern:
    did_hit, rec = hit_shape(ray, shape, t_min, t_max, rec)
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_hit_record

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_hit_record",
]
