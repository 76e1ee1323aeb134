"""Sphere primitive with ray-sphere intersection.

The intersection solves

    |origin + t * direction - centre|^2 = radius^2

using the half-b form of the quadratic, which keeps the arithmetic small and
works for direction vectors of any length.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.geometry.sphere import Sphere, intersect_sphere
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti

from src.pathtracer.core.vector import dot, normalize, vec3

# Intersections closer than this to the ray origin are ignored. A bounced ray
# starts exactly on the surface it left, and rounding can make it re-hit that
# surface at a tiny positive t ("shadow acne").
SHADOW_ACNE_TOLERANCE = 1e-4


@ti.dataclass
class Sphere:
    """A sphere defined by centre point and radius.

    Attributes:
        centre: The centre point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    centre: vec3
    radius: ti.f64


@ti.func
def intersect_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere):
    """Find where a ray first meets a sphere.

    With oc = origin - centre the quadratic coefficients are

        a = direction . direction
        h = direction . oc          (half of the usual b)
        c = oc . oc - radius^2

    and the roots are (-h -/+ sqrt(h^2 - a c)) / a. The near root is preferred;
    the far root is used only when the near one is within the shadow-acne
    tolerance (or behind the origin), which happens when the ray starts inside
    or on the sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (any non-zero length).
        sphere: The sphere to test.

    Returns:
        A tuple (hit, t): hit is 1 when an intersection beyond
        SHADOW_ACNE_TOLERANCE exists, and t is its ray parameter.
    """
    oc = ray_origin - sphere.centre

    a = dot(ray_direction, ray_direction)
    h = dot(ray_direction, oc)
    c = dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    did_hit = 0
    hit_t = 0.0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a

        if t0 > SHADOW_ACNE_TOLERANCE:
            did_hit = 1
            hit_t = t0
        elif t1 > SHADOW_ACNE_TOLERANCE:
            did_hit = 1
            hit_t = t1

    return did_hit, hit_t


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Outward unit normal of a sphere at a point on its surface."""
    return normalize(point - sphere.centre)


@ti.func
def make_sphere(centre: vec3, radius: ti.f64) -> Sphere:
    """Create a sphere from centre and radius."""
    return Sphere(centre=centre, radius=radius)
