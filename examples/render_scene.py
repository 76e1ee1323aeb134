#!/usr/bin/env python3
"""Render a scene to a PPM or PNG image.

Renders either the built-in default scene or a JSON scene file (see
src/pathtracer/config.py for the format) with progressive refinement and a
progress bar.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene PATH        JSON scene file (default: built-in default scene)
    --width WIDTH       Image width in pixels (overrides the scene file)
    --samples SAMPLES   Number of samples per pixel (overrides the scene file)
    --max-depth DEPTH   Maximum bounces per path (overrides the scene file)
    --seed SEED         Render seed (overrides the scene file)
    --output OUTPUT     Output file path, .ppm or .png (default: render.ppm)
    --batch-size SIZE   Samples per progress update (default: 10)
    --arch ARCH         Taichi backend (default: cpu)
    --log-level LEVEL   Logging level (default: INFO)
    --quiet             Suppress the progress bar

Example:
    python -m examples.render_scene --scene scenes/default.json --samples 50 --output out.png
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

from tqdm import tqdm

from src.pathtracer.backend import ARCHITECTURES, init_taichi
from src.pathtracer.config import RenderSettings, SceneFile, load_scene_file
from src.pathtracer.utilities.logconfig import setup_logging

logger = logging.getLogger("src.pathtracer.examples.render_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", type=Path, default=None, help="JSON scene file")
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--samples", type=int, default=None, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum bounces per path")
    parser.add_argument("--seed", type=int, default=None, help="Render seed")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("render.ppm"),
        help="Output file path, .ppm or .png (default: render.ppm)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(ARCHITECTURES),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress the progress bar")
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace, settings: RenderSettings) -> RenderSettings:
    """Apply command-line overrides to the render settings."""
    overrides = {
        "image_width": args.width,
        "samples_per_pixel": args.samples,
        "max_depth": args.max_depth,
        "seed": args.seed,
    }
    return dataclasses.replace(
        settings, **{key: value for key, value in overrides.items() if value is not None}
    )


def render_scene(
    scene_file: SceneFile | None,
    settings: RenderSettings,
    output_path: Path,
    batch_size: int = 10,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it.

    Args:
        scene_file: Parsed scene file, or None for the default scene.
        settings: Render settings.
        output_path: Output file path (.ppm or .png).
        batch_size: Number of samples to render between progress updates.
        quiet: If True, do not show a progress bar.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.camera.camera import setup_camera
    from src.pathtracer.core.progressive import ProgressiveRenderer
    from src.pathtracer.scene.default_scene import create_default_scene
    from src.pathtracer.scene.manager import SceneManager

    if scene_file is None:
        scene, camera = create_default_scene()
        camera = dataclasses.replace(camera, aspect_ratio=settings.aspect_ratio)
    else:
        scene = SceneManager()
        scene.from_dict(scene_file.scene)
        camera = scene_file.camera

    setup_camera(camera)

    renderer = ProgressiveRenderer.from_settings(settings)
    logger.info(
        "Scene: %d spheres, %d planes, %d materials",
        scene.get_sphere_count(),
        scene.get_plane_count(),
        scene.get_material_count(),
    )

    start_time = time.time()
    with tqdm(
        total=settings.samples_per_pixel, desc="Rendering", unit="spp", disable=quiet
    ) as pbar:
        done = 0
        for current, _ in renderer.render_progressive(
            settings.samples_per_pixel, batch_size=batch_size
        ):
            pbar.update(current - done)
            done = current

    output_file = renderer.save_image(output_path)
    logger.info("Saved %s in %.2fs", output_file.absolute(), time.time() - start_time)
    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level))

    try:
        scene_file = load_scene_file(args.scene) if args.scene is not None else None
        base_settings = scene_file.settings if scene_file is not None else RenderSettings()
        settings = resolve_settings(args, base_settings)

        init_taichi(args.arch)

        render_scene(
            scene_file,
            settings,
            args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except Exception:
        logger.exception("Render failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
