"""Dielectric (glass/water) material implementation.

A dielectric transmits light across its surface, bending it according to
Snell's law:

    n1 sin(theta_i) = n2 sin(theta_t)

The side of the surface the ray arrives from decides the media. Normals
always point out of the object, so a ray with D . N > 0 is leaving the
material (glass to air) and one with D . N <= 0 is entering it (air to
glass).

When sin^2(theta_t) would exceed 1 no transmitted ray exists (total internal
reflection) and the ray is reflected instead, with the material's roughness
and absorb colour, exactly like a reflective surface. Transmission itself
does not tint: the carried colour passes through unchanged.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, colour, state = scatter_dielectric(
    >>> #     absorb, roughness, ior, incident, incoming_colour, normal, state
    >>> # )
"""

import taichi as ti

from src.pathtracer.core.vector import dot, normalize, vec3
from src.pathtracer.materials.reflective import scatter_reflective
from src.pathtracer.materials.validation import check_roughness, check_unit_colour

# Refractive index of the medium surrounding every object
AIR_REFRACTIVE_INDEX = 1.0


@ti.dataclass
class DielectricMaterial:
    """Dielectric material properties.

    Attributes:
        absorb: Tint applied to internally reflected rays (RGB in [0, 1]).
        roughness: Fuzz applied to internally reflected rays, in [0, 1].
        refractive_index: Index of refraction. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    absorb: vec3
    roughness: ti.f64
    refractive_index: ti.f64


@ti.func
def refraction_ratio(refractive_index: ti.f64, exiting: ti.i32) -> ti.f64:
    """Index of the medium being entered over the index of the medium left.

    Entering: material / air. Exiting: air / material.
    """
    ratio = refractive_index / AIR_REFRACTIVE_INDEX
    if exiting == 1:
        ratio = AIR_REFRACTIVE_INDEX / refractive_index
    return ratio


@ti.func
def is_exiting(incident_direction: vec3, normal: vec3) -> ti.i32:
    """1 if a ray with this direction is leaving the object, 0 if entering."""
    result = 0
    if dot(incident_direction, normal) > 0.0:
        result = 1
    return result


@ti.func
def scatter_dielectric(
    absorb: vec3,
    roughness: ti.f64,
    refractive_index: ti.f64,
    incident_direction: vec3,
    incoming_colour: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Refract (or totally internally reflect) a ray at a dielectric surface.

    With unit incident direction D, the normal N_f on the side the ray comes
    from, and ratio = n2 / n1:

        cos_i      = -D . N_f
        sin^2_t    = (1 - cos_i^2) / ratio^2
        transmitted = (D + cos_i N_f) / ratio - cos_t N_f

    The first term is the tangential component (length sin_t), the second the
    normal component (length cos_t).

    Args:
        absorb: Tint for internally reflected rays.
        roughness: Fuzz for internally reflected rays.
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any non-zero length).
        incoming_colour: The colour carried by the incoming ray.
        normal: The outward unit normal of the surface.
        state: The generator state.

    Returns:
        A tuple of (direction, colour, new_state).
    """
    unit_direction = normalize(incident_direction)
    exiting = is_exiting(unit_direction, normal)
    ratio = refraction_ratio(refractive_index, exiting)

    facing_normal = normal
    if exiting == 1:
        facing_normal = -normal

    cos_incident = -dot(unit_direction, facing_normal)
    sin2_transmitted = (1.0 - cos_incident * cos_incident) / (ratio * ratio)

    direction = unit_direction
    colour = incoming_colour
    new_state = state

    if sin2_transmitted > 1.0:
        # Total internal reflection
        direction, colour, new_state = scatter_reflective(
            absorb, roughness, incident_direction, incoming_colour, facing_normal, state
        )
    else:
        cos_transmitted = ti.sqrt(1.0 - sin2_transmitted)
        tangential = (unit_direction + cos_incident * facing_normal) / ratio
        direction = tangential - cos_transmitted * facing_normal

    return direction, colour, new_state


@ti.func
def total_internal_reflection(
    refractive_index: ti.f64,
    incident_direction: vec3,
    normal: vec3,
) -> ti.i32:
    """Determine whether a ray is totally internally reflected.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The outward unit normal of the surface.

    Returns:
        1 if no transmitted ray exists, 0 otherwise.
    """
    unit_direction = normalize(incident_direction)
    ratio = refraction_ratio(refractive_index, is_exiting(unit_direction, normal))
    cos_incident = ti.abs(dot(unit_direction, normal))
    sin2_transmitted = (1.0 - cos_incident * cos_incident) / (ratio * ratio)
    result = 0
    if sin2_transmitted > 1.0:
        result = 1
    return result


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_absorbs = ti.Vector.field(3, dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
dielectric_roughnesses = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
dielectric_refractive_indices = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(
    refractive_index: float = 1.5,
    absorb: tuple[float, float, float] = (1.0, 1.0, 1.0),
    roughness: float = 0.0,
) -> int:
    """Add a dielectric material to the material registry.

    Args:
        refractive_index: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.
        absorb: Tint for internally reflected rays. Default is white.
        roughness: Fuzz for internally reflected rays. Default is 0.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the refractive index is not positive.
        ValueError: If any absorb component or the roughness is outside [0, 1].
    """
    if refractive_index <= 0.0:
        raise ValueError(
            f"Index of refraction = {refractive_index} is not positive."
        )
    check_unit_colour("Absorb", absorb)
    check_roughness(roughness)

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_absorbs[idx] = [absorb[0], absorb[1], absorb[2]]
    dielectric_roughnesses[idx] = roughness
    dielectric_refractive_indices[idx] = refractive_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_material(material_idx: ti.i32) -> DielectricMaterial:
    """Get the properties of a dielectric material by index."""
    return DielectricMaterial(
        absorb=dielectric_absorbs[material_idx],
        roughness=dielectric_roughnesses[material_idx],
        refractive_index=dielectric_refractive_indices[material_idx],
    )


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    incoming_colour: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Scatter off a dielectric material looked up by registry index.

    Returns:
        A tuple of (direction, colour, new_state).
    """
    material = get_dielectric_material(material_idx)
    return scatter_dielectric(
        material.absorb,
        material.roughness,
        material.refractive_index,
        incident_direction,
        incoming_colour,
        normal,
        state,
    )
