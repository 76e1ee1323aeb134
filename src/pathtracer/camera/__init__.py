"""Camera module for view and ray generation.

Components:
    camera: Axis-aligned camera looking down -Z

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .camera import (
    CameraConfig,
    compute_camera_geometry,
    default_camera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    jittered_uv,
    setup_camera,
)

__all__ = [
    "CameraConfig",
    "compute_camera_geometry",
    "default_camera",
    "setup_camera",
    "get_ray",
    "jittered_uv",
    "get_camera_origin",
    "get_camera_info",
]
