"""Axis-aligned camera for primary ray generation.

The camera sits at `origin` and looks down -Z with +Y up. A virtual viewport
of size viewport_width x viewport_height is placed focal_length in front of
it; rays are shot from the origin through points of that viewport.

    horizontal  = (viewport_width, 0, 0)
    vertical    = (0, viewport_height, 0)
    bottom_left = origin - horizontal/2 - vertical/2 - (0, 0, focal_length)

The viewport geometry is computed once on the host with NumPy and stored in
Taichi fields that kernels only read.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.camera.camera import CameraConfig, setup_camera, get_ray
    >>>
    >>> setup_camera(CameraConfig(aspect_ratio=16.0 / 9.0))
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image centre
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.pathtracer.config import CameraConfig
from src.pathtracer.core.colour import WHITE
from src.pathtracer.core.ray import Ray, make_ray
from src.pathtracer.core.rng import random_f64
from src.pathtracer.core.vector import vec3

logger = logging.getLogger(__name__)


def default_camera() -> CameraConfig:
    """The 16:9 camera at the origin with a 2-unit viewport 1 unit away."""
    return CameraConfig()


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full height
_bottom_left_corner = ti.Vector.field(3, dtype=ti.f64, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def compute_camera_geometry(config: CameraConfig) -> dict[str, npt.NDArray[np.float64]]:
    """Compute the viewport vectors for a camera configuration.

    Args:
        config: The camera configuration.

    Returns:
        Dictionary with origin, horizontal, vertical and bottom_left as
        float64 arrays of shape (3,).
    """
    viewport_height = config.effective_viewport_height
    viewport_width = config.viewport_width

    origin = np.array(config.origin, dtype=np.float64)
    horizontal = np.array([viewport_width, 0.0, 0.0], dtype=np.float64)
    vertical = np.array([0.0, viewport_height, 0.0], dtype=np.float64)
    depth = np.array([0.0, 0.0, config.focal_length], dtype=np.float64)

    bottom_left = origin - horizontal / 2.0 - vertical / 2.0 - depth

    return {
        "origin": origin,
        "horizontal": horizontal,
        "vertical": vertical,
        "bottom_left": bottom_left,
    }


def setup_camera(config: CameraConfig) -> None:
    """Initialize camera state from configuration.

    This must be called before rendering. It writes to Taichi fields and
    should be called from Python (not from within a Taichi kernel).

    Args:
        config: Camera configuration.
    """
    geometry = compute_camera_geometry(config)

    _camera_origin[None] = geometry["origin"].tolist()
    _viewport_horizontal[None] = geometry["horizontal"].tolist()
    _viewport_vertical[None] = geometry["vertical"].tolist()
    _bottom_left_corner[None] = geometry["bottom_left"].tolist()

    logger.debug(
        "Camera set up: origin=%s viewport=%.4fx%.4f focal_length=%.4f",
        tuple(geometry["origin"]),
        geometry["horizontal"][0],
        geometry["vertical"][1],
        config.focal_length,
    )


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f64, v: ti.f64) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    Jittered samples may fall slightly outside [0, 1]; the ray is still valid.
    The direction is not normalized. The ray carries white.

    Args:
        u: Horizontal coordinate (left to right).
        v: Vertical coordinate (bottom to top).

    Returns:
        A Ray from the camera origin toward the viewport point (u, v).
    """
    origin = _camera_origin[None]
    point_on_viewport = (
        _bottom_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    return make_ray(origin, point_on_viewport - origin, WHITE)


@ti.func
def jittered_uv(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, state: ti.u32):
    """Pick a random point of pixel (i, j) in image coordinates.

    u = (i + xi) / (width - 1) and v = (j + xi') / (height - 1), where j = 0
    is the bottom row. Pass the result to get_ray().

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        state: The generator state for this sample.

    Returns:
        A tuple of (u, v, new_state).
    """
    jitter_u, s = random_f64(state)
    jitter_v, s2 = random_f64(s)

    u = (ti.cast(pixel_i, ti.f64) + jitter_u) / ti.cast(width - 1, ti.f64)
    v = (ti.cast(pixel_j, ti.f64) + jitter_v) / ti.cast(height - 1, ti.f64)

    return u, v, s2


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera origin (position) in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical, bottom_left.
    """
    info = {}
    for name, field in (
        ("origin", _camera_origin),
        ("horizontal", _viewport_horizontal),
        ("vertical", _viewport_vertical),
        ("bottom_left", _bottom_left_corner),
    ):
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
