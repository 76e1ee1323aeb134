"""Materials module for ray-surface interaction.

Each material turns an incoming ray at a hit point into one outgoing ray:

Components:
    diffuse: Lambertian scatter about the surface normal
    reflective: Mirror reflection with optional roughness (fuzz)
    dielectric: Snell refraction with total internal reflection
    validation: Parameter checks shared by the registries

Each material provides:
    - A dataclass describing its parameters
    - scatter_*(): The transition (direction, colour, rng state)
    - A type-local field registry with add_*/clear_*/count helpers
    - scatter_*_by_id(): The transition looked up by registry index

Absorb colours are restricted to [0, 1], so the colour carried by a ray never
increases from one bounce to the next.
"""

from .dielectric import (
    DielectricMaterial,
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_material,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    total_internal_reflection,
)
from .diffuse import (
    DiffuseMaterial,
    add_diffuse_material,
    clear_diffuse_materials,
    diffuse_direction,
    get_diffuse_absorb,
    get_diffuse_material_count,
    scatter_diffuse,
    scatter_diffuse_by_id,
)
from .reflective import (
    ReflectiveMaterial,
    add_reflective_material,
    clear_reflective_materials,
    get_reflective_absorb,
    get_reflective_material_count,
    get_reflective_roughness,
    scatter_reflective,
    scatter_reflective_by_id,
)

__all__ = [
    # Diffuse
    "DiffuseMaterial",
    "add_diffuse_material",
    "clear_diffuse_materials",
    "diffuse_direction",
    "get_diffuse_absorb",
    "get_diffuse_material_count",
    "scatter_diffuse",
    "scatter_diffuse_by_id",
    # Reflective
    "ReflectiveMaterial",
    "add_reflective_material",
    "clear_reflective_materials",
    "get_reflective_absorb",
    "get_reflective_material_count",
    "get_reflective_roughness",
    "scatter_reflective",
    "scatter_reflective_by_id",
    # Dielectric
    "DielectricMaterial",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material",
    "get_dielectric_material_count",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "total_internal_reflection",
]
