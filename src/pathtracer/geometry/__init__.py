"""Geometry module for surface primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are implemented as Taichi functions (@ti.func)
and follow the pattern:
    hit, t = intersect_shape(ray_origin, ray_direction, shape)

Hits closer than SHADOW_ACNE_TOLERANCE are discarded by the sphere routine
and by the scene-level nearest-hit query.
"""

from .plane import Plane, intersect_plane, plane_from_point, plane_normal
from .sphere import SHADOW_ACNE_TOLERANCE, Sphere, intersect_sphere, make_sphere, sphere_normal

__all__ = [
    "SHADOW_ACNE_TOLERANCE",
    "Sphere",
    "intersect_sphere",
    "make_sphere",
    "sphere_normal",
    "Plane",
    "intersect_plane",
    "plane_from_point",
    "plane_normal",
]
