"""Taichi runtime initialisation.

Kernels use 64-bit floats throughout, so the runtime must be started with
``default_fp=ti.f64``. Call init_taichi() before importing any module that
owns Taichi fields (camera, integrator, scene, materials).
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)

ARCHITECTURES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


def init_taichi(arch: str = "cpu", debug: bool = False, **kwargs) -> None:
    """Start the Taichi runtime for rendering.

    Args:
        arch: Backend name, one of ARCHITECTURES. "gpu" lets Taichi pick
            any available GPU backend and falls back to the CPU otherwise.
        debug: Enable Taichi's debug mode, which turns on bounds checks and
            the assertions inside kernels.
        **kwargs: Further ti.init() options.

    Raises:
        ValueError: If the backend name is unknown.
    """
    try:
        backend = ARCHITECTURES[arch.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown Taichi backend {arch!r}; expected one of {sorted(ARCHITECTURES)}"
        ) from None

    ti.init(arch=backend, default_fp=ti.f64, debug=debug, **kwargs)
    logger.info("Taichi initialised (arch=%s, debug=%s)", arch, debug)
