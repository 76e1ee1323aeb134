"""Image export utilities for rendered images.

Rendered images are linear RGB arrays of shape (height, width, 3), top row
first. Every writer applies the same per-channel mapping (clamp to [0, 1],
square root for gamma 2, scale to 255, round half away from zero), so a PPM
and a PNG of one render hold identical pixel values.

Supported formats:
    - PPM P3 (plain text, written directly)
    - PNG (8-bit via Pillow)

Example:
    >>> from src.pathtracer.output.export import save_image
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> save_image(renderer.get_image_numpy(), "output.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.pathtracer.core.colour import MAX_CHANNEL_VALUE, quantize_image

logger = logging.getLogger(__name__)

PPM_EXTENSIONS = (".ppm",)
PNG_EXTENSIONS = (".png",)


def _check_image_shape(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {image.shape}")


def ppm_header(width: int, height: int) -> str:
    """The P3 header: magic number, dimensions and maximum channel value."""
    return f"P3\n{width} {height}\n{MAX_CHANNEL_VALUE}\n"


def image_to_ppm_text(image: npt.NDArray[np.floating]) -> str:
    """Serialize a linear image as PPM P3 text.

    Pixels are written one per line, rows top-to-bottom and columns
    left-to-right.

    Args:
        image: Linear RGB array of shape (height, width, 3), top row first.

    Returns:
        The complete PPM document.

    Raises:
        ValueError: If the image does not have shape (height, width, 3).
    """
    _check_image_shape(image)
    height, width, _ = image.shape
    pixels = quantize_image(image).reshape(-1, 3)
    lines = [f"{r} {g} {b}\n" for r, g, b in pixels.tolist()]
    return ppm_header(width, height) + "".join(lines)


def write_ppm(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Write a linear image as a PPM P3 file.

    Returns:
        The path written to.
    """
    path = Path(filepath)
    text = image_to_ppm_text(image)
    # newline="" keeps "\n" line endings on every platform
    with path.open("w", encoding="ascii", newline="") as f:
        f.write(text)
    logger.info("Wrote PPM image %s (%dx%d)", path, image.shape[1], image.shape[0])
    return path


def save_png(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Write a linear image as an 8-bit RGB PNG via Pillow.

    Returns:
        The path written to.
    """
    _check_image_shape(image)
    path = Path(filepath)
    pil_image = PILImage.fromarray(quantize_image(image))
    pil_image.save(path)
    logger.info("Wrote PNG image %s (%dx%d)", path, image.shape[1], image.shape[0])
    return path


def save_image(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Save an image, choosing the format from the file extension.

    Raises:
        ValueError: If the extension is neither .ppm nor .png.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()
    if suffix in PPM_EXTENSIONS:
        return write_ppm(image, path)
    if suffix in PNG_EXTENSIONS:
        return save_png(image, path)
    raise ValueError(f"Unsupported image format {suffix!r}; use .ppm or .png")


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
