"""Ray data structure for the path tracing kernels.

A ray carries, besides its origin and direction, the colour weight of the
light path it belongs to. The weight starts as white when the camera emits
the ray and is attenuated multiplicatively by every surface the path bounces
off, so the integrator never needs a separate throughput variable.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> # Inside a kernel:
    >>> # ray = make_ray(origin, direction, vec3(1.0, 1.0, 1.0))
    >>> # point = ray_at(ray, 5.0)
"""

import taichi as ti

from src.pathtracer.core.vector import vec3


@ti.dataclass
class Ray:
    """A ray with an origin point, a direction and a carried colour.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It is not required
            to be unit length; intersection routines account for its magnitude.
        colour: The linear RGB weight carried along the path (vec3).
    """

    origin: vec3
    direction: vec3
    colour: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + ray.direction * t


@ti.func
def make_ray(origin: vec3, direction: vec3, colour: vec3) -> Ray:
    """Create a ray from origin, direction and carried colour."""
    return Ray(origin=origin, direction=direction, colour=colour)
