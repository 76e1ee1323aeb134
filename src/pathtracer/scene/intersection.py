"""Scene-level surface storage and nearest-hit queries.

The scene is one ordered table of surfaces. Each row holds a kind tag
(SurfaceKind), two shape parameters, and a material ID:

    kind     vector param     scalar param
    SPHERE   centre           radius
    PLANE    unit normal      origin distance

Rows are tested in insertion order and the strictly nearest hit wins, so when
two surfaces report the same distance the one added first is kept.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.scene.intersection import (
    ...     add_sphere, add_plane, clear_scene, intersect_scene
    ... )
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> add_plane((0.0, 1.0, 0.0), -0.5, material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging
import math
from enum import IntEnum

import taichi as ti

from src.pathtracer.core.vector import vec3
from src.pathtracer.geometry.plane import Plane, intersect_plane, plane_normal
from src.pathtracer.geometry.sphere import (
    SHADOW_ACNE_TOLERANCE,
    Sphere,
    intersect_sphere,
    sphere_normal,
)

logger = logging.getLogger(__name__)


class SurfaceKind(IntEnum):
    """Closed set of surface variants stored in the scene table."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The outward unit normal of the surface at the point.
            Only valid if hit == 1.
        material_id: The material ID of the surface. -1 on a miss.
        surface_index: Row of the surface in the scene table. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    material_id: ti.i32
    surface_index: ti.i32


# Maximum number of surfaces supported in the scene
MAX_SURFACES = 1024

# Allowed deviation of a stored plane normal from unit length
UNIT_NORMAL_TOLERANCE = 1e-9

# Surface table: Structure of Arrays layout
surface_kinds = ti.field(dtype=ti.i32, shape=MAX_SURFACES)
surface_vectors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SURFACES)
surface_scalars = ti.field(dtype=ti.f64, shape=MAX_SURFACES)
surface_material_ids = ti.field(dtype=ti.i32, shape=MAX_SURFACES)
num_surfaces = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all surfaces from the scene.

    Resets the surface count to zero. Old rows are overwritten when new
    surfaces are added.
    """
    num_surfaces[None] = 0


def _add_surface(
    kind: SurfaceKind,
    vector: tuple[float, float, float],
    scalar: float,
    material_id: int,
) -> int:
    idx = num_surfaces[None]
    if idx >= MAX_SURFACES:
        raise RuntimeError(f"Maximum number of surfaces ({MAX_SURFACES}) exceeded")
    surface_kinds[idx] = int(kind)
    surface_vectors[idx] = [vector[0], vector[1], vector[2]]
    surface_scalars[idx] = scalar
    surface_material_ids[idx] = material_id
    num_surfaces[None] = idx + 1
    logger.debug("Added %s surface %d (material %d)", kind.name, idx, material_id)
    return idx


def add_sphere(
    centre: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    Args:
        centre: The centre point of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID to associate with this sphere.

    Returns:
        The row index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of surfaces is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    return _add_surface(SurfaceKind.SPHERE, centre, radius, material_id)


def add_plane(
    unit_normal: tuple[float, float, float],
    origin_distance: float,
    material_id: int = 0,
) -> int:
    """Add an infinite plane n . p = d to the scene.

    Args:
        unit_normal: The plane normal. Must already be unit length; use
            geometry.plane.plane_from_point() to build one from any normal.
        origin_distance: Signed distance of the plane from the origin.
        material_id: The material ID to associate with this plane.

    Returns:
        The row index of the added plane.

    Raises:
        ValueError: If the normal is not unit length.
        RuntimeError: If the maximum number of surfaces is exceeded.
    """
    length = math.sqrt(sum(c * c for c in unit_normal))
    if abs(length - 1.0) > UNIT_NORMAL_TOLERANCE:
        raise ValueError(f"Plane normal must be unit length, got length {length}")
    return _add_surface(SurfaceKind.PLANE, unit_normal, origin_distance, material_id)


def get_surface_count() -> int:
    """Get the number of surfaces in the scene."""
    return int(num_surfaces[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
        surface_index=-1,
    )


@ti.func
def intersect_surface(ray_origin: vec3, ray_direction: vec3, index: ti.i32):
    """Intersect a ray with one row of the surface table.

    Returns:
        A tuple (hit, t) from the variant's intersection routine.
    """
    did_hit = 0
    hit_t = 0.0
    if surface_kinds[index] == int(SurfaceKind.SPHERE):
        sphere = Sphere(centre=surface_vectors[index], radius=surface_scalars[index])
        did_hit, hit_t = intersect_sphere(ray_origin, ray_direction, sphere)
    else:
        plane = Plane(unit_normal=surface_vectors[index], origin_distance=surface_scalars[index])
        did_hit, hit_t = intersect_plane(ray_origin, ray_direction, plane)
    return did_hit, hit_t


@ti.func
def surface_normal(index: ti.i32, point: vec3) -> vec3:
    """Outward unit normal of a surface row at a point on it."""
    normal = vec3(0.0, 0.0, 0.0)
    if surface_kinds[index] == int(SurfaceKind.SPHERE):
        sphere = Sphere(centre=surface_vectors[index], radius=surface_scalars[index])
        normal = sphere_normal(sphere, point)
    else:
        plane = Plane(unit_normal=surface_vectors[index], origin_distance=surface_scalars[index])
        normal = plane_normal(plane)
    return normal


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest surface hit along a ray.

    Scans every surface in insertion order, discards misses and hits within
    SHADOW_ACNE_TOLERANCE of the origin, and keeps the strictly smallest t.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    result = _make_miss_record()
    closest_index = -1
    closest_t = 0.0

    n = num_surfaces[None]
    for i in range(n):
        did_hit, t = intersect_surface(ray_origin, ray_direction, i)
        if did_hit == 1 and t > SHADOW_ACNE_TOLERANCE:
            if closest_index == -1 or t < closest_t:
                closest_index = i
                closest_t = t

    if closest_index != -1:
        point = ray_origin + ray_direction * closest_t
        result = SceneHitRecord(
            hit=1,
            t=closest_t,
            point=point,
            normal=surface_normal(closest_index, point),
            material_id=surface_material_ids[closest_index],
            surface_index=closest_index,
        )

    return result
