"""Output module for writing rendered images.

Components:
    export: PPM (P3 text) and PNG writers sharing one quantization
"""

from .export import (
    compute_rmse,
    image_to_ppm_text,
    ppm_header,
    save_image,
    save_png,
    write_ppm,
)

__all__ = [
    "compute_rmse",
    "image_to_ppm_text",
    "ppm_header",
    "save_image",
    "save_png",
    "write_ppm",
]
