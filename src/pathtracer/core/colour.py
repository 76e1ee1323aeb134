"""Linear RGB colour helpers and gamma-corrected serialization.

Colours are plain ``vec3`` values in linear radiance space. They are never
clamped while light is being accumulated; clamping and the approximate
gamma-2 correction (a square root) happen only when a finished pixel is
serialized.

Kernel-side (``@ti.func``):
    blend, attenuate, max_channel

Host-side:
    Colour (value type used by drivers and tests), format_colour,
    quantize_image
"""

import math
from typing import NamedTuple

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.pathtracer.core.vector import max_component, vec3

# =============================================================================
# Constants
# =============================================================================

WHITE = vec3(1.0, 1.0, 1.0)
BLACK = vec3(0.0, 0.0, 0.0)

# Top of the sky gradient used as the implicit light source
SKY_BLUE = vec3(0.5, 0.7, 1.0)

# Largest integer value of an output channel
MAX_CHANNEL_VALUE = 255


# =============================================================================
# Kernel-side Operations
# =============================================================================


@ti.func
def blend(a: vec3, b: vec3, t: ti.f64) -> vec3:
    """Linearly interpolate between two colours: a (1 - t) + b t.

    ``t`` is expected in [0, 1] but not clamped.
    """
    return a * (1.0 - t) + b * t


@ti.func
def attenuate(a: vec3, b: vec3) -> vec3:
    """Component-wise product, the absorption model of a tinted surface."""
    return a * b


@ti.func
def max_channel(c: vec3) -> ti.f64:
    """Brightest channel of a colour."""
    return max_component(c)


# =============================================================================
# Host-side Colour Value
# =============================================================================


class Colour(NamedTuple):
    """An RGB colour in linear space, for use outside of kernels."""

    r: float
    g: float
    b: float

    def __add__(self, other: "Colour") -> "Colour":  # type: ignore[override]
        return Colour(self.r + other.r, self.g + other.g, self.b + other.b)

    def scale(self, factor: float) -> "Colour":
        return Colour(self.r * factor, self.g * factor, self.b * factor)

    def attenuate(self, other: "Colour") -> "Colour":
        return Colour(self.r * other.r, self.g * other.g, self.b * other.b)

    @staticmethod
    def blend(a: "Colour", b: "Colour", t: float) -> "Colour":
        return a.scale(1.0 - t) + b.scale(t)


def _quantize_channel(value: float) -> int:
    """Clamp, gamma-correct and round one channel to 0-255.

    Rounds half away from zero, which for the non-negative values seen here
    is ``floor(x)`` unless the fraction is at least one half.
    """
    clamped = min(max(value, 0.0), 1.0)
    scaled = math.sqrt(clamped) * MAX_CHANNEL_VALUE
    whole = math.floor(scaled)
    if scaled - whole >= 0.5:
        whole += 1
    return int(whole)


def format_colour(colour: tuple[float, float, float] | Colour) -> str:
    """Serialize a finished pixel colour as a PPM text line.

    Each channel is clamped to [0, 1], square-rooted (gamma 2), scaled by 255
    and rounded to the nearest integer.

    Args:
        colour: The linear RGB colour.

    Returns:
        Three space-separated integers followed by a newline, e.g. "255 0 0\\n".
    """
    r, g, b = (_quantize_channel(float(c)) for c in colour)
    return f"{r} {g} {b}\n"


def quantize_image(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Apply the format_colour() mapping to a whole image.

    Args:
        image: Linear RGB array of shape (..., 3).

    Returns:
        An array of the same shape with dtype uint8.
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)
    scaled = np.sqrt(clamped) * MAX_CHANNEL_VALUE
    whole = np.floor(scaled)
    rounded = np.where(scaled - whole >= 0.5, whole + 1.0, whole)
    return rounded.astype(np.uint8)
