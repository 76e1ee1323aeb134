"""Core rendering module.

Components:
    vector: vec3 type and vector helpers
    rng: Explicit per-sample random streams
    ray: Ray data structure carrying a colour weight
    colour: Colour blending and gamma-corrected quantization
    integrator: Path integrator and render kernels
    progressive: Batched, deterministic sample accumulation

All compute-intensive operations use Taichi kernels.
"""

from .colour import Colour, format_colour, quantize_image
from .ray import Ray, make_ray, ray_at
from .rng import random_f64, random_in_unit_sphere, random_unit_vector, seed_stream
from .vector import dot, length, length_squared, near_zero, normalize, reflect, vec3

# integrator and progressive are NOT imported here; they pull in the camera,
# scene and material modules. Import them directly:
#   from src.pathtracer.core.progressive import ProgressiveRenderer

__all__ = [
    "Colour",
    "format_colour",
    "quantize_image",
    "Ray",
    "make_ray",
    "ray_at",
    "random_f64",
    "random_in_unit_sphere",
    "random_unit_vector",
    "seed_stream",
    "vec3",
    "dot",
    "length",
    "length_squared",
    "near_zero",
    "normalize",
    "reflect",
]
