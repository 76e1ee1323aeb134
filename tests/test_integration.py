"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through the final
PPM or PNG file. It verifies that all components work together and that the
output meets basic quality criteria.

Tests are designed to be fast (low resolution, few samples) while still
exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
import taichi as ti


def _render_single_sphere(width: int, height: int, samples: int, seed: int = 0):
    from src.pathtracer.camera.camera import setup_camera
    from src.pathtracer.core.progressive import ProgressiveRenderer
    from src.pathtracer.scene.default_scene import create_single_sphere_scene

    _, camera = create_single_sphere_scene()
    setup_camera(camera)
    renderer = ProgressiveRenderer(width, height, seed=seed)
    renderer.render(samples, batch_size=samples)
    return renderer


class TestSingleSphere:
    """The grey sphere of radius 0.5 straight in front of the camera."""

    def test_centre_ray_hits_front_of_sphere(self) -> None:
        """Test that the ray through the image centre hits the sphere at t = 0.5."""
        from src.pathtracer.camera.camera import default_camera, get_ray, setup_camera
        from src.pathtracer.core.vector import vec3
        from src.pathtracer.scene.default_scene import create_single_sphere_scene
        from src.pathtracer.scene.intersection import intersect_scene

        create_single_sphere_scene()
        setup_camera(default_camera())

        t_out = ti.field(dtype=ti.f64, shape=())
        normal_out = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def probe():
            ray = get_ray(0.5, 0.5)
            rec = intersect_scene(ray.origin, ray.direction)
            t_out[None] = rec.t
            normal_out[None] = rec.normal

        probe()
        assert t_out[None] == pytest.approx(0.5)
        assert tuple(normal_out[None].to_numpy()) == pytest.approx((0.0, 0.0, 1.0))

    def test_centre_darker_than_corners(self) -> None:
        """Test that the grey sphere is darker than the open sky around it."""
        renderer = _render_single_sphere(21, 11, samples=16)
        image = renderer.get_image_numpy()

        centre = image[5, 10].mean()
        corners = [image[0, 0], image[0, -1], image[-1, 0], image[-1, -1]]
        assert all(centre < corner.mean() for corner in corners)

    def test_output_is_finite_and_non_negative(self) -> None:
        """Test that no pixel is NaN, infinite or negative."""
        renderer = _render_single_sphere(16, 9, samples=4)
        image = renderer.get_image_numpy()

        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)
        assert np.all(image <= 1.0)

    def test_ppm_is_byte_identical_for_fixed_seed(self, tmp_path: Path) -> None:
        """Test that rendering twice with one seed writes identical files."""
        first = _render_single_sphere(16, 9, samples=4, seed=42)
        path_a = first.save_image(tmp_path / "a.ppm")

        second = _render_single_sphere(16, 9, samples=4, seed=42)
        path_b = second.save_image(tmp_path / "b.ppm")

        assert path_a.read_bytes() == path_b.read_bytes()
        assert path_a.read_bytes().startswith(b"P3\n16 9\n255\n")


class TestDefaultScene:
    """The default scene with all three material types."""

    def test_all_material_types_render(self) -> None:
        """Test a full render of diffuse, reflective and glass spheres on the ground."""
        from src.pathtracer.camera.camera import setup_camera
        from src.pathtracer.core.progressive import ProgressiveRenderer
        from src.pathtracer.scene.default_scene import create_default_scene

        _, camera = create_default_scene()
        setup_camera(camera)

        renderer = ProgressiveRenderer(32, 18, seed=1)
        renderer.render(8, batch_size=4)
        image = renderer.get_image_numpy()

        assert image.shape == (18, 32, 3)
        assert np.all(np.isfinite(image))
        assert image.mean() > 0.05
        # Sky at the top, ground at the bottom
        assert image[0].mean() > image[-1].mean()

    def test_save_png(self, tmp_path: Path) -> None:
        """Test that the default scene saves as a PNG."""
        from PIL import Image as PILImage

        from src.pathtracer.camera.camera import setup_camera
        from src.pathtracer.core.progressive import ProgressiveRenderer
        from src.pathtracer.scene.default_scene import create_default_scene

        _, camera = create_default_scene()
        setup_camera(camera)
        renderer = ProgressiveRenderer(16, 9)
        renderer.render(2)

        path = renderer.save_image(tmp_path / "default.png")
        with PILImage.open(path) as img:
            assert img.size == (16, 9)
            np.testing.assert_array_equal(np.array(img), renderer.get_image_uint8())


class TestSceneFileRendering:
    """Rendering a JSON scene file through the example script."""

    def test_render_scene_file(self, tmp_path: Path) -> None:
        """Test loading a scene file and rendering it to a PPM."""
        from examples.render_scene import render_scene

        from src.pathtracer.config import load_scene_file

        scene_path = tmp_path / "scene.json"
        scene_path.write_text(
            json.dumps(
                {
                    "materials": [
                        {"type": "diffuse", "absorb": [0.5, 0.5, 0.5]},
                        {"type": "reflective", "absorb": [0.8, 0.8, 0.8], "roughness": 0.0},
                    ],
                    "spheres": [{"centre": [0, 0, -1], "radius": 0.5, "material_id": 1}],
                    "planes": [{"normal": [0, 1, 0], "point": [0, -0.5, 0], "material_id": 0}],
                    "render": {"image_width": 12, "aspect_ratio": 1.5, "samples_per_pixel": 2},
                }
            ),
            encoding="utf-8",
        )
        scene_file = load_scene_file(scene_path)

        output = render_scene(
            scene_file, scene_file.settings, tmp_path / "out.ppm", batch_size=1, quiet=True
        )

        lines = output.read_text(encoding="ascii").splitlines()
        assert lines[:3] == ["P3", "12 8", "255"]
        assert len(lines) == 3 + 12 * 8

    def test_main_reports_bad_scene_file(self, tmp_path: Path) -> None:
        """Test that the script exits with status 1 on an invalid scene file."""
        from examples.render_scene import main

        scene_path = tmp_path / "bad.json"
        scene_path.write_text("{", encoding="utf-8")

        assert main(["--scene", str(scene_path), "--quiet", "--log-level", "ERROR"]) == 1
