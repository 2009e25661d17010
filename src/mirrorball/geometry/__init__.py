"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with analytic ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) returning a HitRecord
value; a record with hit == 0 is a miss.
"""

from .sphere import HitRecord, hit_sphere, make_miss_record, sphere_normal

__all__ = [
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "sphere_normal",
]
