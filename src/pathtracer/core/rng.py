"""Explicit, seedable random streams for Monte Carlo sampling.

The renderer never touches Taichi's global generator (``ti.random``). Instead
every (pixel, sample) pair derives its own 32-bit state from the render seed,
and that state is threaded through each sampling function: the function takes
the current state and returns the drawn value together with the advanced
state. Because no state is shared between pixels, the image is identical no
matter how many threads the backend uses or how samples are batched.

The generator is a 32-bit linear congruential step followed by the PCG
RXS-M-XS output permutation.

Example:
    >>> @ti.kernel
    ... def draw(seed: ti.u32) -> ti.f64:
    ...     state = seed_stream(seed, 0, 0)
    ...     value, state = random_f64(state)
    ...     return value
"""

import taichi as ti

from src.pathtracer.core.vector import length_squared, normalize, vec3

# LCG constants (Numerical Recipes); arithmetic wraps modulo 2^32
_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223

# PCG RXS-M-XS output multiplier
_PCG_OUTPUT_MULTIPLIER = 277803737

# Maps a u32 onto [0, 1)
_INV_2_POW_32 = 1.0 / 4294967296.0

# Upper bound on rejection-sampling rounds. Each round succeeds with
# probability ~0.52, so the bound is never reached in practice.
MAX_REJECTION_ATTEMPTS = 64


@ti.func
def _advance(state: ti.u32) -> ti.u32:
    """One LCG step."""
    return state * ti.cast(_LCG_MULTIPLIER, ti.u32) + ti.cast(_LCG_INCREMENT, ti.u32)


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    """PCG RXS-M-XS output permutation of an LCG state."""
    shift = ti.bit_shr(state, 28) + ti.cast(4, ti.u32)
    word = (ti.bit_shr(state, shift) ^ state) * ti.cast(_PCG_OUTPUT_MULTIPLIER, ti.u32)
    return ti.bit_shr(word, 22) ^ word


@ti.func
def hash_u32(value: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (used to derive stream states)."""
    return _permute(_advance(value))


@ti.func
def seed_stream(seed: ti.u32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the initial generator state for one pixel sample.

    Args:
        seed: The global render seed.
        pixel_index: Linear pixel index (row * width + column).
        sample_index: Index of the sample within the pixel.

    Returns:
        The initial 32-bit state for this (pixel, sample) stream.
    """
    h = hash_u32(seed)
    h = hash_u32(h ^ ti.cast(pixel_index, ti.u32))
    h = hash_u32(h ^ ti.cast(sample_index, ti.u32))
    return h


@ti.func
def random_f64(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current generator state.

    Returns:
        A tuple of (value, new_state).
    """
    new_state = _advance(state)
    value = ti.cast(_permute(new_state), ti.f64) * _INV_2_POW_32
    return value, new_state


@ti.func
def random_range(state: ti.u32, low: ti.f64, high: ti.f64):
    """Draw a uniform float in [low, high).

    Returns:
        A tuple of (value, new_state).
    """
    unit, new_state = random_f64(state)
    return low + (high - low) * unit, new_state


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Draw a point uniformly distributed inside the unit sphere.

    Rejection sampling: candidates are drawn from the cube [-1, 1]^3 and
    rejected when their squared length is >= 1 or exactly 0.

    Args:
        state: The current generator state.

    Returns:
        A tuple of (point, new_state) with 0 < |point| < 1.
    """
    s = state
    p = vec3(0.0, 0.0, 0.5)
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            x, s = random_range(s, -1.0, 1.0)
            y, s = random_range(s, -1.0, 1.0)
            z, s = random_range(s, -1.0, 1.0)
            candidate = vec3(x, y, z)
            len_sq = length_squared(candidate)
            if len_sq < 1.0 and len_sq > 0.0:
                p = candidate
                found = 1
    return p, s


@ti.func
def random_unit_vector(state: ti.u32):
    """Draw a unit vector uniformly distributed over the sphere.

    Returns:
        A tuple of (unit_vector, new_state).
    """
    p, new_state = random_in_unit_sphere(state)
    return normalize(p), new_state
