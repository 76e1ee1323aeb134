"""Scene module for scene storage and ray-scene queries.

Components:
    intersection: Ordered surface table (spheres, planes) and nearest-hit query
    manager: Unified scene manager coordinating surfaces and materials
    default_scene: Ready-made scenes

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for surface data
    - A unified material ID space mapped onto per-type registries
"""

from .default_scene import (
    DefaultSceneParams,
    create_default_scene,
    create_single_sphere_scene,
)
from .intersection import (
    MAX_SURFACES,
    SceneHitRecord,
    SurfaceKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_surface_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    PlaneInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "SurfaceKind",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_surface_count",
    "intersect_scene",
    "MAX_SURFACES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "PlaneInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Ready-made scenes
    "DefaultSceneParams",
    "create_default_scene",
    "create_single_sphere_scene",
]
