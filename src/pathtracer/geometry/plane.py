"""Infinite plane primitive with ray-plane intersection.

A plane is stored in Hessian normal form: a unit normal n and the signed
distance d of the plane from the world origin, so that every point p on the
plane satisfies n . p = d.

Example:
    >>> from src.pathtracer.geometry.plane import plane_from_point
    >>> unit_normal, distance = plane_from_point((0.0, 2.0, 0.0), (0.0, -0.5, 0.0))
    >>> unit_normal, distance
    ((0.0, 1.0, 0.0), -0.5)
"""

import math

import taichi as ti

from src.pathtracer.core.vector import dot, vec3

# Range of positive normal (non-subnormal, finite) double-precision values
_MIN_NORMAL_F64 = 2.2250738585072014e-308
_MAX_FINITE_F64 = 1.7976931348623157e308


@ti.dataclass
class Plane:
    """An infinite plane n . p = d.

    Attributes:
        unit_normal: The plane normal (unit length, vec3).
        origin_distance: Signed distance of the plane from the origin.
    """

    unit_normal: vec3
    origin_distance: ti.f64


@ti.func
def intersect_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane):
    """Find where a ray meets a plane.

    Solves n . (origin + t * direction) = d for t. A ray parallel to the plane
    never meets it; non-positive, subnormal and non-finite values of t are
    reported as misses as well.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        plane: The plane to test.

    Returns:
        A tuple (hit, t).
    """
    denom = dot(plane.unit_normal, ray_direction)

    did_hit = 0
    t = 0.0
    # Parallel rays never divide; fast math gives no inf/NaN guarantees
    if denom != 0.0:
        t = (plane.origin_distance - dot(plane.unit_normal, ray_origin)) / denom
        if t >= _MIN_NORMAL_F64 and t <= _MAX_FINITE_F64:
            did_hit = 1

    return did_hit, t


@ti.func
def plane_normal(plane: Plane) -> vec3:
    """The plane normal; the same at every point of the plane."""
    return plane.unit_normal


def plane_from_point(
    normal: tuple[float, float, float],
    point_in_plane: tuple[float, float, float],
) -> tuple[tuple[float, float, float], float]:
    """Compute the stored form of a plane from a normal and a point on it.

    Args:
        normal: A normal direction (need not be unit length).
        point_in_plane: Any point lying in the plane.

    Returns:
        A tuple (unit_normal, origin_distance).

    Raises:
        ValueError: If the normal has zero length.
    """
    norm = math.sqrt(sum(c * c for c in normal))
    if norm == 0.0:
        raise ValueError("Plane normal must be non-zero")
    unit = (normal[0] / norm, normal[1] / norm, normal[2] / norm)
    distance = sum(u * p for u, p in zip(unit, point_in_plane))
    return unit, distance
