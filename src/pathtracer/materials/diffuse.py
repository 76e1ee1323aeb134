"""Diffuse (Lambertian) material implementation.

A diffuse surface re-emits an incoming ray in a random direction biased
toward the surface normal: the outgoing direction is the normal plus a unit
vector drawn uniformly from the sphere, which yields a cosine-weighted
distribution over the hemisphere. The carried colour is tinted by the
surface's absorb colour on every bounce.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.materials.diffuse import scatter_diffuse
    >>> # Use within a Taichi kernel:
    >>> # direction, colour, state = scatter_diffuse(absorb, incoming, normal, state)
"""

import taichi as ti

from src.pathtracer.core.colour import attenuate
from src.pathtracer.core.rng import random_unit_vector
from src.pathtracer.core.vector import near_zero, vec3
from src.pathtracer.materials.validation import check_unit_colour


@ti.dataclass
class DiffuseMaterial:
    """Diffuse material properties.

    Attributes:
        absorb: The surface colour (RGB, each component in [0, 1]). The
            carried colour of a ray is multiplied by it on every bounce.
    """

    absorb: vec3


@ti.func
def diffuse_direction(normal: vec3, random_direction: vec3) -> vec3:
    """Offset the normal by a random unit vector, falling back to the normal.

    When the two nearly cancel the sum is a (near) zero vector that would
    produce a degenerate ray, so the normal itself is used instead.
    """
    direction = normal + random_direction
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_diffuse(absorb: vec3, incoming_colour: vec3, normal: vec3, state: ti.u32):
    """Scatter a ray off a diffuse surface.

    The new direction is diffuse_direction(normal, random_unit_vector()).

    Args:
        absorb: The surface colour.
        incoming_colour: The colour carried by the incoming ray.
        normal: The outward unit normal at the hit point.
        state: The generator state.

    Returns:
        A tuple of (direction, colour, new_state) where colour is
        incoming_colour * absorb.
    """
    random_direction, new_state = random_unit_vector(state)
    direction = diffuse_direction(normal, random_direction)
    return direction, attenuate(incoming_colour, absorb), new_state


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of diffuse materials in the scene
MAX_DIFFUSE_MATERIALS = 256

# Storage for diffuse material properties
diffuse_absorbs = ti.Vector.field(3, dtype=ti.f64, shape=MAX_DIFFUSE_MATERIALS)
num_diffuse_materials = ti.field(dtype=ti.i32, shape=())


def clear_diffuse_materials() -> None:
    """Clear all diffuse materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_diffuse_materials[None] = 0


def add_diffuse_material(absorb: tuple[float, float, float]) -> int:
    """Add a diffuse material to the material registry.

    Args:
        absorb: The surface colour as (R, G, B). Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any absorb component is outside [0, 1].
    """
    check_unit_colour("Absorb", absorb)

    idx = num_diffuse_materials[None]
    if idx >= MAX_DIFFUSE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of diffuse materials ({MAX_DIFFUSE_MATERIALS}) exceeded"
        )

    diffuse_absorbs[idx] = [absorb[0], absorb[1], absorb[2]]
    num_diffuse_materials[None] = idx + 1
    return idx


def get_diffuse_material_count() -> int:
    """Get the number of diffuse materials in the registry."""
    return int(num_diffuse_materials[None])


@ti.func
def get_diffuse_absorb(material_idx: ti.i32) -> vec3:
    """Get the absorb colour for a diffuse material by index."""
    return diffuse_absorbs[material_idx]


@ti.func
def scatter_diffuse_by_id(
    material_idx: ti.i32,
    incoming_colour: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Scatter off a diffuse material looked up by registry index.

    Returns:
        A tuple of (direction, colour, new_state).
    """
    absorb = get_diffuse_absorb(material_idx)
    return scatter_diffuse(absorb, incoming_colour, normal, state)
