"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks or a generator for UI updates
- Easy reset and re-render functionality

Splitting a render into batches never changes the result: sample k of a pixel
always uses the same random stream, so 100 samples rendered as 10 batches of
10 give exactly the image of one batch of 100.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>> from src.pathtracer.scene.default_scene import create_default_scene
    >>> from src.pathtracer.camera.camera import default_camera, setup_camera
    >>>
    >>> scene = create_default_scene()
    >>> setup_camera(default_camera())
    >>>
    >>> renderer = ProgressiveRenderer(400, 225, seed=7)
    >>> renderer.render(100, batch_size=10)
    >>> renderer.save_image("render.ppm")
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.pathtracer.config import RenderSettings
from src.pathtracer.core.colour import quantize_image
from src.pathtracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from src.pathtracer.output.export import save_image

logger = logging.getLogger(__name__)

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer maintains its own width/height, seed and bounce budget and
    delegates to the global integrator buffers (which are Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Render seed shared by every batch.
        max_depth: Maximum number of bounces per path.
    """

    def __init__(
        self,
        width: int,
        height: int,
        seed: int = 0,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize the progressive renderer.

        Raises:
            ValueError: If dimensions are outside the supported range.
        """
        self._width = width
        self._height = height
        self.seed = seed
        self.max_depth = max_depth
        setup_render_target(width, height)

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> "ProgressiveRenderer":
        """Create a renderer sized and seeded from render settings."""
        return cls(
            settings.image_width,
            settings.image_height,
            seed=settings.seed,
            max_depth=settings.max_depth,
        )

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulator without changing the image dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions are outside the supported range.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    def _render_batch(self, batch: int) -> None:
        render_image(batch, seed=self.seed, max_depth=self.max_depth)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if num_samples <= 0:
            return

        target_samples = self.sample_count + num_samples
        logger.info(
            "Rendering %dx%d, %d samples per pixel (seed %d, max depth %d)",
            self.width,
            self.height,
            num_samples,
            self.seed,
            self.max_depth,
        )

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            self._render_batch(batch)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the averaged linear image, shape (height, width, 3), top row first."""
        return get_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image, shape (height, width, 3)."""
        return quantize_image(self.get_image_numpy())

    def save_image(self, filepath: str | Path) -> Path:
        """Save the rendered image; the format follows the file extension.

        Returns:
            The path written to.
        """
        return save_image(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}, seed={self.seed})"
        )
