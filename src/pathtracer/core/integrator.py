"""Path integrator and per-pixel render kernel.

A camera ray carries a colour that starts out white. At every surface it hits,
the surface's material turns it into a new ray and usually darkens the
carried colour. The path ends when:

1. the carried colour is too dark to affect an 8-bit pixel (every channel
   below 1/255): the carried colour is returned as is;
2. the bounce budget is used up: black is returned;
3. the ray escapes the scene: the carried colour times the sky gradient,
   a blend from white at the horizon to sky blue overhead, is returned.

There are no light sources other than the sky. The integrator is iterative
and so always takes at most max_depth bounces.

Every pixel sample draws its random numbers from its own stream, seeded from
(seed, pixel index, sample index). Samples are summed per pixel in sample
order, so the image only depends on the scene, camera, seed and sample count.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.core.integrator import (
    ...     render_image, setup_render_target, get_image_numpy
    ... )
    >>> from src.pathtracer.scene.default_scene import create_default_scene
    >>> from src.pathtracer.camera.camera import default_camera, setup_camera
    >>>
    >>> scene = create_default_scene()
    >>> setup_camera(default_camera())
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100, seed=0)
    >>> image = get_image_numpy()  # (225, 400, 3), top row first
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.pathtracer.camera.camera import get_ray, jittered_uv
from src.pathtracer.core.colour import (
    MAX_CHANNEL_VALUE,
    SKY_BLUE,
    WHITE,
    attenuate,
    blend,
    max_channel,
)
from src.pathtracer.core.ray import Ray, make_ray
from src.pathtracer.core.rng import seed_stream
from src.pathtracer.core.vector import normalize, vec3
from src.pathtracer.materials.dielectric import scatter_dielectric_by_id
from src.pathtracer.materials.diffuse import scatter_diffuse_by_id
from src.pathtracer.materials.reflective import scatter_reflective_by_id
from src.pathtracer.scene.intersection import intersect_scene
from src.pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Default bounce budget per path
MAX_DEPTH = 50

# Paths whose every channel drops below this cannot change an 8-bit pixel
WEIGHT_CUTOFF = 1.0 / MAX_CHANNEL_VALUE

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of all sample colours per pixel, indexed [i, j] with j = 0 the bottom row
_colour_sum = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Single-path probe used by the Python-side tracing helpers
_probe_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f64, shape=())
_probe_colour = ti.Vector.field(3, dtype=ti.f64, shape=())
_probe_bounces = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (2 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (2 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are below 2 or exceed the maximum supported size.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    # Sample placement divides by (width - 1) and (height - 1)
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 2x2")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()
    logger.debug("Render target set up: %dx%d", width, height)


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _colour_sum.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def interact(
    material_id: ti.i32,
    incident_direction: vec3,
    incoming_colour: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Apply the material of a hit surface to an incoming ray.

    Args:
        material_id: The unified material ID of the hit surface.
        incident_direction: The incoming ray direction.
        incoming_colour: The colour carried by the incoming ray.
        normal: The outward unit normal at the hit point.
        state: The generator state.

    Returns:
        A tuple of (direction, colour, new_state). An unknown material ID
        absorbs the ray (black colour), which ends the path.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    direction = normal
    colour = vec3(0.0, 0.0, 0.0)
    new_state = state

    if mat_type == int(MaterialType.DIFFUSE):
        direction, colour, new_state = scatter_diffuse_by_id(
            type_index, incoming_colour, normal, state
        )
    elif mat_type == int(MaterialType.REFLECTIVE):
        direction, colour, new_state = scatter_reflective_by_id(
            type_index, incident_direction, incoming_colour, normal, state
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        direction, colour, new_state = scatter_dielectric_by_id(
            type_index, incident_direction, incoming_colour, normal, state
        )

    return direction, colour, new_state


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def sky_colour(direction: vec3) -> vec3:
    """Background seen along a direction: white below, sky blue straight up."""
    t = 0.5 * (normalize(direction).y + 1.0)
    return blend(WHITE, SKY_BLUE, t)


@ti.func
def trace_ray(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Follow a ray through the scene until its path terminates.

    Args:
        ray: The starting ray, carrying its initial colour.
        max_depth: Maximum number of bounces.
        state: The generator state.

    Returns:
        A tuple of (colour, bounces, new_state) where bounces <= max_depth.
    """
    origin = ray.origin
    direction = ray.direction
    colour = ray.colour
    result = vec3(0.0, 0.0, 0.0)
    remaining = max_depth
    bounces = 0
    s = state

    # Taichi funcs cannot break out of loops, so finished paths idle
    active = 1
    for _ in range(max_depth + 1):
        if active == 1:
            if max_channel(colour) < WEIGHT_CUTOFF:
                result = colour
                active = 0
            elif remaining == 0:
                result = vec3(0.0, 0.0, 0.0)
                active = 0
            else:
                record = intersect_scene(origin, direction)
                if record.hit == 0:
                    result = attenuate(colour, sky_colour(direction))
                    active = 0
                else:
                    direction, colour, s = interact(
                        record.material_id, direction, colour, record.normal, s
                    )
                    origin = record.point
                    remaining -= 1
                    bounces += 1

    return result, bounces, s


@ti.func
def ray_colour(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Colour seen along a ray.

    Returns:
        A tuple of (colour, new_state).
    """
    colour, _, new_state = trace_ray(ray, max_depth, state)
    return colour, new_state


@ti.func
def render_pixel_sample(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    seed: ti.u32,
    sample_index: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Render one jittered sample of a pixel with its own random stream."""
    state = seed_stream(seed, pixel_j * width + pixel_i, sample_index)
    u, v, s = jittered_uv(pixel_i, pixel_j, width, height, state)
    colour, _ = ray_colour(get_ray(u, v), max_depth, s)
    return colour


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_samples(
    width: ti.i32,
    height: ti.i32,
    seed: ti.u32,
    first_sample: ti.i32,
    num_samples: ti.i32,
    max_depth: ti.i32,
):
    """Add samples first_sample .. first_sample + num_samples - 1 to every pixel."""
    for i, j in ti.ndrange(width, height):
        # Added one at a time so the rounding does not depend on batching
        for k in range(num_samples):
            _colour_sum[i, j] += render_pixel_sample(
                i, j, width, height, seed, first_sample + k, max_depth
            )
        _sample_count[i, j] += num_samples


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    seed: ti.u32,
    sample_index: ti.i32,
    max_depth: ti.i32,
):
    _probe_colour[None] = render_pixel_sample(
        pixel_i, pixel_j, width, height, seed, sample_index, max_depth
    )


@ti.kernel
def _trace_probe(max_depth: ti.i32, seed: ti.u32):
    ray = make_ray(_probe_origin[None], _probe_direction[None], _probe_colour[None])
    colour, bounces, _ = trace_ray(ray, max_depth, seed_stream(seed, 0, 0))
    _probe_colour[None] = colour
    _probe_bounces[None] = bounces


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray_python(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    colour: tuple[float, float, float] = (1.0, 1.0, 1.0),
    max_depth: int = MAX_DEPTH,
    seed: int = 0,
) -> tuple[tuple[float, float, float], int]:
    """Trace one ray from Python.

    Intended for tests and debugging; rendering goes through render_image().

    Returns:
        Tuple of ((R, G, B), bounces).
    """
    _probe_origin[None] = list(origin)
    _probe_direction[None] = list(direction)
    _probe_colour[None] = list(colour)
    _trace_probe(max_depth, seed)
    result = _probe_colour[None]
    return (float(result[0]), float(result[1]), float(result[2])), int(_probe_bounces[None])


def render_sample(
    pixel_i: int,
    pixel_j: int,
    sample_index: int = 0,
    seed: int = 0,
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    Does not touch the accumulation buffers. For production rendering, use
    render_image() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        sample_index: Which sample of the pixel to render.
        seed: The render seed.
        max_depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) colour values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_single_pixel(pixel_i, pixel_j, width, height, seed, sample_index, max_depth)
    colour = _probe_colour[None]
    return (float(colour[0]), float(colour[1]), float(colour[2]))


def render_image(num_samples: int = 1, seed: int = 0, max_depth: int = MAX_DEPTH) -> None:
    """Add samples to every pixel of the render target.

    Can be called repeatedly; each call continues from the current sample
    count, so any split of N samples into calls gives the same image.

    Args:
        num_samples: Number of samples to render per pixel.
        seed: The render seed. Use the same seed for every call of one render.
        max_depth: Maximum number of bounces per path.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If num_samples is negative or max_depth is negative.
    """
    _check_render_target_initialized()
    if num_samples < 0:
        raise ValueError(f"num_samples must be non-negative, got {num_samples}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")

    width, height = get_image_dimensions()
    first_sample = get_total_samples()
    _render_samples(width, height, seed, first_sample, num_samples, max_depth)
    logger.debug(
        "Rendered samples %d..%d (%dx%d)",
        first_sample,
        first_sample + num_samples - 1,
        width,
        height,
    )


def get_total_samples() -> int:
    """Get the number of samples rendered per pixel so far.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Get the averaged linear colour image as a NumPy array.

    The array has shape (height, width, 3) with the top row first, as images
    are stored. Values are not clamped. Pixels without samples are black.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    colour_sum = _colour_sum.to_numpy()[:width, :height, :]
    counts = _sample_count.to_numpy()[:width, :height].astype(np.float64)

    image = colour_sum / np.maximum(counts, 1.0)[:, :, np.newaxis]

    # (width, height, 3) -> (height, width, 3), then bottom-up -> top-down
    image = np.transpose(image, (1, 0, 2))
    return np.flipud(image).copy()
