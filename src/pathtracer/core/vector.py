"""Three-component vector type and vector utilities for the kernels.

All geometry in the renderer is expressed with ``vec3``, a 64-bit Taichi
vector. Taichi already provides the arithmetic operators (negation, addition,
subtraction, scaling by a scalar from either side, and in-place ``+=``), so
this module only adds the named operations the renderer relies on.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.core.vector import vec3, normalize
    >>> @ti.kernel
    ... def unit_x() -> vec3:
    ...     return normalize(vec3(3.0, 0.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors in double precision
vec3 = ti.types.vector(3, ti.f64)

# Components smaller than this count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product of two vectors."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return dot(v, v)


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Precondition: ``length(v) > 0``. The precondition is checked only when
    Taichi runs with ``debug=True``; otherwise a zero vector yields NaNs.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
    """
    assert length_squared(v) > 0.0, "normalize() called with a zero-length vector"
    return v / length(v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror a direction about a normal: d - 2 (d . n) n.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction, with the same length as incident.
    """
    return incident - 2.0 * dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of a vector is close to zero.

    Used to catch scatter directions that collapsed through floating-point
    cancellation.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def max_component(v: vec3) -> ti.f64:
    """Return the largest component of a vector."""
    return tm.max(v.x, tm.max(v.y, v.z))
