"""Render configuration and JSON scene files.

Everything here is plain Python: no Taichi fields are created, so settings
can be parsed and validated before the Taichi runtime is initialised.

A scene file is a JSON object with these optional keys:

    {
        "materials": [{"type": "diffuse", "absorb": [0.5, 0.5, 0.5]}, ...],
        "spheres":   [{"centre": [0, 0, -1], "radius": 0.5, "material_id": 0}],
        "planes":    [{"normal": [0, 1, 0], "point": [0, -0.5, 0], "material_id": 0}],
        "camera":    {"aspect_ratio": 1.7778, "viewport_height": 2.0, ...},
        "render":    {"image_width": 400, "samples_per_pixel": 100, ...}
    }

Surfaces refer to materials by their position in the "materials" list.

Example:
    >>> from src.pathtracer.config import load_scene_file
    >>> scene_file = load_scene_file("scenes/spheres.json")
    >>> scene_file.settings.image_height
    225
"""

import json
import logging
import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 16.0 / 9.0
DEFAULT_VIEWPORT_HEIGHT = 2.0
DEFAULT_FOCAL_LENGTH = 1.0


@dataclass
class CameraConfig:
    """Configuration for the axis-aligned camera.

    Attributes:
        aspect_ratio: Width divided by height of the viewport.
        viewport_height: Height of the viewport in world units. Ignored when
            vfov is given.
        focal_length: Distance from the origin to the viewport.
        origin: Camera position in world space (x, y, z).
        vfov: Optional vertical field of view in degrees. When set, the
            viewport height is 2 * tan(vfov / 2) * focal_length.
    """

    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    viewport_height: float = DEFAULT_VIEWPORT_HEIGHT
    focal_length: float = DEFAULT_FOCAL_LENGTH
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vfov: float | None = None

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.viewport_height <= 0.0:
            raise ValueError(f"viewport_height must be positive, got {self.viewport_height}")
        if self.focal_length <= 0.0:
            raise ValueError(f"focal_length must be positive, got {self.focal_length}")
        if self.vfov is not None and not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if len(self.origin) != 3:
            raise ValueError(f"origin must have 3 components, got {len(self.origin)}")
        self.origin = (float(self.origin[0]), float(self.origin[1]), float(self.origin[2]))

    @property
    def effective_viewport_height(self) -> float:
        """Viewport height after applying vfov, if any."""
        if self.vfov is None:
            return self.viewport_height
        return 2.0 * math.tan(math.radians(self.vfov) / 2.0) * self.focal_length

    @property
    def viewport_width(self) -> float:
        return self.aspect_ratio * self.effective_viewport_height


@dataclass
class RenderSettings:
    """Image size, sampling and termination settings for a render.

    Attributes:
        image_width: Image width in pixels.
        aspect_ratio: Width divided by height; the height is derived from it.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
        seed: Seed of the per-sample random streams.
    """

    image_width: int = 400
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 0

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width < 2 or self.image_height < 2:
            raise ValueError(
                f"Image must be at least 2x2 pixels, got {self.image_width}x{self.image_height}"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0 <= self.seed < 2**32:
            raise ValueError(f"seed must fit in 32 bits, got {self.seed}")

    @property
    def image_height(self) -> int:
        """Image height in pixels, truncated from width / aspect ratio."""
        return int(self.image_width / self.aspect_ratio)


@dataclass
class SceneFile:
    """Contents of a JSON scene file.

    Attributes:
        scene: Materials and surfaces, in the form SceneManager.from_dict() takes.
        camera: The camera configuration.
        settings: The render settings.
    """

    scene: dict[str, Any] = field(default_factory=dict)
    camera: CameraConfig = field(default_factory=CameraConfig)
    settings: RenderSettings = field(default_factory=RenderSettings)


def _build(cls: type, data: Any, section: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"Scene file section {section!r} must be an object")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown keys in scene file section {section!r}: {unknown}")
    kwargs = dict(data)
    if "origin" in kwargs:
        kwargs["origin"] = tuple(kwargs["origin"])
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid scene file section {section!r}: {e}") from e


def parse_scene_data(data: Any) -> SceneFile:
    """Split a decoded scene file into scene, camera and settings.

    When the camera section gives no aspect ratio, the render aspect ratio is
    used so the viewport matches the image.

    Raises:
        ValueError: If the data is not a valid scene description.
    """
    if not isinstance(data, dict):
        raise ValueError("Scene file must contain a JSON object")

    settings = _build(RenderSettings, data.get("render", {}), "render")
    camera_data = data.get("camera", {})
    if not isinstance(camera_data, dict):
        raise ValueError("Scene file section 'camera' must be an object")
    camera_data = dict(camera_data)
    camera_data.setdefault("aspect_ratio", settings.aspect_ratio)
    camera = _build(CameraConfig, camera_data, "camera")

    scene = {}
    for section in ("materials", "spheres", "planes"):
        entries = data.get(section, [])
        if not isinstance(entries, list):
            raise ValueError(f"Scene file section {section!r} must be a list")
        scene[section] = list(entries)
    return SceneFile(scene=scene, camera=camera, settings=settings)


def load_scene_file(path: str | Path) -> SceneFile:
    """Read and validate a JSON scene file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or not a valid scene.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Scene file {path} is not valid JSON: {e}") from e

    scene_file = parse_scene_data(data)
    logger.info(
        "Loaded scene file %s: %d materials, %d spheres, %d planes",
        path,
        len(scene_file.scene["materials"]),
        len(scene_file.scene["spheres"]),
        len(scene_file.scene["planes"]),
    )
    return scene_file
