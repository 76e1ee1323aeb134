"""Unified scene manager for coordinating surfaces and materials.

This module provides a high-level scene management API that coordinates
surface storage (spheres, planes) with material assignment. It tracks which
material type (Diffuse, Reflective, Dielectric) each material ID corresponds
to, enabling proper material dispatch in the path integrator.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- High-level methods for adding objects with materials in one call
- Scene serialization/configuration support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_diffuse_material(absorb=(0.5, 0.5, 0.5))
    >>> scene.add_sphere(centre=(0, 0, -1), radius=0.5, material_id=mat_id)
    >>> # Use get_material_type(mat_id) in the integrator for dispatch
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from src.pathtracer.geometry.plane import plane_from_point
from src.pathtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from src.pathtracer.materials.diffuse import (
    add_diffuse_material,
    clear_diffuse_materials,
)
from src.pathtracer.materials.reflective import (
    add_reflective_material,
    clear_reflective_materials,
)
from src.pathtracer.scene.intersection import (
    MAX_SURFACES,
    add_plane,
    add_sphere,
    clear_scene,
    get_surface_count,
)

logger = logging.getLogger(__name__)

Vector = tuple[float, float, float]


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    interaction to apply at a hit.
    """

    DIFFUSE = 0
    REFLECTIVE = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 768  # 256 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd reflective material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    registries (e.g., diffuse_absorbs[type_index]).

    Returns:
        The index into the type-specific material array, or -1 for invalid
        material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _as_vector(values: Any, name: str) -> Vector:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific material array.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        surface_index: The row of the sphere in the surface table.
        centre: The centre of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    surface_index: int
    centre: Vector
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        surface_index: The row of the plane in the surface table.
        unit_normal: The unit normal of the plane.
        origin_distance: Signed distance of the plane from the origin.
        material_id: The material ID assigned to the plane.
    """

    surface_index: int
    unit_normal: Vector
    origin_distance: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        planes: List of plane configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Unified scene manager coordinating surfaces and materials.

    The SceneManager provides a high-level API for building scenes with
    automatic material tracking. It maintains a unified material_id space
    that maps to type-specific material registries, enabling the integrator
    to dispatch to the correct interaction.

    Surfaces are stored in the order they are added. That order matters: when
    two surfaces are hit at exactly the same distance, the earlier one wins.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.
        planes: List of PlaneInfo for all planes in the scene.

    Example:
        >>> scene = SceneManager()
        >>> grey = scene.add_diffuse_material(absorb=(0.5, 0.5, 0.5))
        >>> mirror = scene.add_reflective_material(absorb=(0.8, 0.8, 0.8))
        >>> glass = scene.add_dielectric_material(refractive_index=1.5)
        >>> scene.add_sphere((0, 0, -1), 0.5, grey)
        >>> scene.add_sphere((1, 0, -1), 0.5, mirror)
        >>> scene.add_plane_through_point((0, 1, 0), (0, -0.5, 0), grey)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_diffuse_materials()
        clear_reflective_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self.planes.clear()

    def clear(self) -> None:
        """Clear the entire scene (surfaces and materials).

        Resets all Taichi fields and internal tracking structures.
        """
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Registered %s material %d: %s", material_type.name, material_id, params)
        return material_id

    def add_diffuse_material(self, absorb: Vector) -> int:
        """Add a diffuse material to the scene.

        Args:
            absorb: The surface colour as (R, G, B), each component in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any absorb component is outside [0, 1].
        """
        type_index = add_diffuse_material(absorb)
        return self._register_material(
            MaterialType.DIFFUSE, type_index, {"absorb": tuple(absorb)}
        )

    def add_reflective_material(self, absorb: Vector, roughness: float = 0.0) -> int:
        """Add a reflective material to the scene.

        Args:
            absorb: The reflective tint as (R, G, B), each component in [0, 1].
            roughness: The fuzz factor in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any absorb component or roughness is outside [0, 1].
        """
        type_index = add_reflective_material(absorb, roughness)
        return self._register_material(
            MaterialType.REFLECTIVE,
            type_index,
            {"absorb": tuple(absorb), "roughness": roughness},
        )

    def add_dielectric_material(
        self,
        refractive_index: float = 1.5,
        absorb: Vector = (1.0, 1.0, 1.0),
        roughness: float = 0.0,
    ) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            refractive_index: Index of refraction. Default is 1.5 (typical glass).
                Common values: Water=1.33, Glass=1.5, Diamond=2.4
            absorb: Tint for totally internally reflected rays.
            roughness: Fuzz for totally internally reflected rays.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the refractive index is not positive.
        """
        type_index = add_dielectric_material(refractive_index, absorb, roughness)
        return self._register_material(
            MaterialType.DIELECTRIC,
            type_index,
            {
                "absorb": tuple(absorb),
                "roughness": roughness,
                "refractive_index": refractive_index,
            },
        )

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For kernel-side lookup, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    # =========================================================================
    # Surface Management
    # =========================================================================

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

    def add_sphere(self, centre: Vector, radius: float, material_id: int) -> int:
        """Add a sphere to the scene.

        Args:
            centre: The centre point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be positive.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The row index of the sphere in the surface table.

        Raises:
            RuntimeError: If the maximum number of surfaces is exceeded.
            ValueError: If material_id is invalid or the radius is not positive.
        """
        self._check_material_id(material_id)
        centre = _as_vector(centre, "Sphere centre")
        surface_index = add_sphere(centre, radius, material_id)
        self.spheres.append(
            SphereInfo(
                surface_index=surface_index,
                centre=centre,
                radius=radius,
                material_id=material_id,
            )
        )
        return surface_index

    def add_plane(
        self,
        unit_normal: Vector,
        origin_distance: float,
        material_id: int,
    ) -> int:
        """Add a plane n . p = d given its unit normal and origin distance.

        Raises:
            RuntimeError: If the maximum number of surfaces is exceeded.
            ValueError: If material_id is invalid or the normal is not unit length.
        """
        self._check_material_id(material_id)
        unit_normal = _as_vector(unit_normal, "Plane normal")
        surface_index = add_plane(unit_normal, origin_distance, material_id)
        self.planes.append(
            PlaneInfo(
                surface_index=surface_index,
                unit_normal=unit_normal,
                origin_distance=origin_distance,
                material_id=material_id,
            )
        )
        return surface_index

    def add_plane_through_point(
        self,
        normal: Vector,
        point_in_plane: Vector,
        material_id: int,
    ) -> int:
        """Add a plane from a (not necessarily unit) normal and a point on it.

        Raises:
            ValueError: If the normal is the zero vector or material_id is invalid.
        """
        unit_normal, origin_distance = plane_from_point(
            _as_vector(normal, "Plane normal"), _as_vector(point_in_plane, "Plane point")
        )
        return self.add_plane(unit_normal, origin_distance, material_id)

    # =========================================================================
    # Convenience Methods (add object with material in one call)
    # =========================================================================

    def add_diffuse_sphere(
        self,
        centre: Vector,
        radius: float,
        absorb: Vector,
    ) -> tuple[int, int]:
        """Add a sphere with a new diffuse material.

        Returns:
            Tuple of (surface_index, material_id).
        """
        material_id = self.add_diffuse_material(absorb)
        surface_index = self.add_sphere(centre, radius, material_id)
        return surface_index, material_id

    def add_reflective_sphere(
        self,
        centre: Vector,
        radius: float,
        absorb: Vector,
        roughness: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new reflective material.

        Returns:
            Tuple of (surface_index, material_id).
        """
        material_id = self.add_reflective_material(absorb, roughness)
        surface_index = self.add_sphere(centre, radius, material_id)
        return surface_index, material_id

    def add_dielectric_sphere(
        self,
        centre: Vector,
        radius: float,
        refractive_index: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (surface_index, material_id).
        """
        material_id = self.add_dielectric_material(refractive_index)
        surface_index = self.add_sphere(centre, radius, material_id)
        return surface_index, material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return len(self.spheres)

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return len(self.planes)

    def get_surface_count(self) -> int:
        """Get the total number of surfaces in the scene."""
        return get_surface_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials and surfaces.
        """
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "centre": list(sphere.centre),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for plane in self.planes:
            config.planes.append(
                {
                    "unit_normal": list(plane.unit_normal),
                    "origin_distance": plane.origin_distance,
                    "material_id": plane.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Planes may be
        given either as {"unit_normal", "origin_distance"} or as
        {"normal", "point"}.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, surfaces refer to them by index
        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "diffuse":
                self.add_diffuse_material(
                    _as_vector(mat_config.get("absorb", [0.5, 0.5, 0.5]), "Absorb")
                )
            elif mat_type == "reflective":
                self.add_reflective_material(
                    _as_vector(mat_config.get("absorb", [0.8, 0.8, 0.8]), "Absorb"),
                    float(mat_config.get("roughness", 0.0)),
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(
                    float(mat_config.get("refractive_index", 1.5)),
                    _as_vector(mat_config.get("absorb", [1.0, 1.0, 1.0]), "Absorb"),
                    float(mat_config.get("roughness", 0.0)),
                )
            else:
                raise ValueError(f"Unknown material type: {mat_type!r}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_vector(sphere_config.get("centre", [0.0, 0.0, 0.0]), "Sphere centre"),
                float(sphere_config.get("radius", 1.0)),
                int(sphere_config.get("material_id", 0)),
            )

        for plane_config in config.planes:
            material_id = int(plane_config.get("material_id", 0))
            if "point" in plane_config:
                self.add_plane_through_point(
                    plane_config.get("normal", [0.0, 1.0, 0.0]),
                    plane_config["point"],
                    material_id,
                )
            else:
                self.add_plane(
                    _as_vector(plane_config.get("unit_normal", [0.0, 1.0, 0.0]), "Plane normal"),
                    float(plane_config.get("origin_distance", 0.0)),
                    material_id,
                )

        logger.info(
            "Loaded scene: %d materials, %d spheres, %d planes",
            len(self.materials),
            len(self.spheres),
            len(self.planes),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "planes": config.planes,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres', 'planes' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            planes=data.get("planes", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_surfaces() -> int:
        """Get the maximum number of surfaces supported."""
        return MAX_SURFACES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
