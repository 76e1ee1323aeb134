"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Kernels use 64-bit
    floats, so the default float type is f64.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before any field is created
    from src.pathtracer.core.integrator import clear_render_target
    from src.pathtracer.materials.dielectric import clear_dielectric_materials
    from src.pathtracer.materials.diffuse import clear_diffuse_materials
    from src.pathtracer.materials.reflective import clear_reflective_materials
    from src.pathtracer.scene.intersection import clear_scene
    from src.pathtracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_diffuse_materials()
        clear_reflective_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()
