"""Reflective (fuzzy mirror) material implementation.

The incoming direction is mirrored about the surface normal,

    R = D - 2 (D . N) N,

and then perturbed by a random point in the unit sphere scaled by the
material's roughness. Roughness 0 is a perfect mirror; larger values blur
the reflection.

A large perturbation can push the reflected direction below the surface. Such
a ray would immediately travel into the object, so it is sent out exactly
along the normal instead.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.materials.reflective import scatter_reflective
    >>> # Use within a Taichi kernel:
    >>> # direction, colour, state = scatter_reflective(
    >>> #     absorb, roughness, incident, incoming_colour, normal, state
    >>> # )
"""

import taichi as ti

from src.pathtracer.core.colour import attenuate
from src.pathtracer.core.rng import random_in_unit_sphere
from src.pathtracer.core.vector import dot, reflect, vec3
from src.pathtracer.materials.validation import check_roughness, check_unit_colour


@ti.dataclass
class ReflectiveMaterial:
    """Reflective material properties.

    Attributes:
        absorb: The reflective tint (RGB, each component in [0, 1]).
        roughness: The fuzziness of the reflection in [0, 1].
            0 = perfect mirror, 1 = maximum fuzz.
    """

    absorb: vec3
    roughness: ti.f64


@ti.func
def scatter_reflective(
    absorb: vec3,
    roughness: ti.f64,
    incident_direction: vec3,
    incoming_colour: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Reflect a ray off a fuzzy mirror.

    Args:
        absorb: The reflective tint.
        roughness: The fuzz factor in [0, 1].
        incident_direction: The incoming ray direction (any length).
        incoming_colour: The colour carried by the incoming ray.
        normal: The unit normal on the side the ray arrives from.
        state: The generator state.

    Returns:
        A tuple of (direction, colour, new_state). The direction is along the
        normal when the fuzzed reflection points below the surface. The colour
        is incoming_colour * absorb in both cases.
    """
    fuzz, new_state = random_in_unit_sphere(state)
    direction = reflect(incident_direction, normal) + roughness * fuzz

    # Keeps incoming * absorb here too rather than resetting the colour to absorb
    if dot(direction, normal) < 0.0:
        direction = normal

    return direction, attenuate(incoming_colour, absorb), new_state


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of reflective materials in the scene
MAX_REFLECTIVE_MATERIALS = 256

# Storage for reflective material properties
reflective_absorbs = ti.Vector.field(3, dtype=ti.f64, shape=MAX_REFLECTIVE_MATERIALS)
reflective_roughnesses = ti.field(dtype=ti.f64, shape=MAX_REFLECTIVE_MATERIALS)
num_reflective_materials = ti.field(dtype=ti.i32, shape=())


def clear_reflective_materials() -> None:
    """Clear all reflective materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_reflective_materials[None] = 0


def add_reflective_material(
    absorb: tuple[float, float, float],
    roughness: float = 0.0,
) -> int:
    """Add a reflective material to the material registry.

    Args:
        absorb: The reflective tint as (R, G, B). Each component must be in [0, 1].
        roughness: The fuzz factor in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any absorb component is outside [0, 1].
        ValueError: If roughness is outside [0, 1].
    """
    check_unit_colour("Absorb", absorb)
    check_roughness(roughness)

    idx = num_reflective_materials[None]
    if idx >= MAX_REFLECTIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of reflective materials ({MAX_REFLECTIVE_MATERIALS}) exceeded"
        )

    reflective_absorbs[idx] = [absorb[0], absorb[1], absorb[2]]
    reflective_roughnesses[idx] = roughness
    num_reflective_materials[None] = idx + 1
    return idx


def get_reflective_material_count() -> int:
    """Get the number of reflective materials in the registry."""
    return int(num_reflective_materials[None])


@ti.func
def get_reflective_absorb(material_idx: ti.i32) -> vec3:
    """Get the tint for a reflective material by index."""
    return reflective_absorbs[material_idx]


@ti.func
def get_reflective_roughness(material_idx: ti.i32) -> ti.f64:
    """Get the roughness for a reflective material by index."""
    return reflective_roughnesses[material_idx]


@ti.func
def scatter_reflective_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    incoming_colour: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Reflect off a reflective material looked up by registry index.

    Returns:
        A tuple of (direction, colour, new_state).
    """
    absorb = get_reflective_absorb(material_idx)
    roughness = get_reflective_roughness(material_idx)
    return scatter_reflective(
        absorb, roughness, incident_direction, incoming_colour, normal, state
    )
