"""Ready-made scenes.

The default scene is a pair of spheres floating above a ground plane under
the sky gradient, seen by the default 16:9 camera from the origin:

- Left sphere: diffuse (reddish)
- Right sphere: reflective, slightly rough
- Front sphere: glass, resting on the ground
- Ground plane y = -1: diffuse grey

The single sphere scene is the smallest useful scene: one diffuse grey ball
of radius 0.5 straight in front of the camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.scene.default_scene import create_default_scene
    >>> from src.pathtracer.camera.camera import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

from dataclasses import dataclass

from src.pathtracer.camera.camera import default_camera
from src.pathtracer.config import CameraConfig
from src.pathtracer.scene.manager import SceneManager

Vector = tuple[float, float, float]


@dataclass
class DefaultSceneParams:
    """Parameters for the default scene.

    Attributes:
        left_colour: Absorb colour of the diffuse sphere.
        right_colour: Absorb colour of the reflective sphere.
        right_roughness: Roughness of the reflective sphere.
        glass_refractive_index: Index of refraction of the glass sphere.
        ground_colour: Absorb colour of the ground plane.
        include_glass: Whether to add the glass sphere.

    Example:
        >>> params = DefaultSceneParams(right_roughness=0.0)  # Perfect mirror
        >>> scene, camera = create_default_scene(params)
    """

    left_colour: Vector = (0.7, 0.3, 0.3)
    right_colour: Vector = (0.8, 0.8, 0.8)
    right_roughness: float = 0.1
    glass_refractive_index: float = 1.5
    ground_colour: Vector = (0.5, 0.5, 0.5)
    include_glass: bool = True


SPHERE_RADIUS = 0.3
GROUND_HEIGHT = -1.0


def create_default_scene(
    params: DefaultSceneParams | None = None,
    scene: SceneManager | None = None,
) -> tuple[SceneManager, CameraConfig]:
    """Build the default scene.

    Args:
        params: Optional colours and materials. Defaults to DefaultSceneParams().
        scene: Scene manager to fill. It is cleared first. A new one is
            created if omitted.

    Returns:
        A tuple of (SceneManager, CameraConfig).
    """
    if params is None:
        params = DefaultSceneParams()
    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    scene.add_diffuse_sphere((-0.4, 0.0, -1.0), SPHERE_RADIUS, params.left_colour)
    scene.add_reflective_sphere(
        (0.4, 0.0, -1.0), SPHERE_RADIUS, params.right_colour, params.right_roughness
    )
    if params.include_glass:
        scene.add_dielectric_sphere(
            (0.0, GROUND_HEIGHT + SPHERE_RADIUS, -0.7),
            SPHERE_RADIUS,
            params.glass_refractive_index,
        )

    ground = scene.add_diffuse_material(params.ground_colour)
    scene.add_plane_through_point((0.0, 1.0, 0.0), (0.0, GROUND_HEIGHT, 0.0), ground)

    return scene, default_camera()


def create_single_sphere_scene(
    absorb: Vector = (0.5, 0.5, 0.5),
    scene: SceneManager | None = None,
) -> tuple[SceneManager, CameraConfig]:
    """Build a scene with one diffuse sphere of radius 0.5 at (0, 0, -1).

    Returns:
        A tuple of (SceneManager, CameraConfig).
    """
    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    scene.add_diffuse_sphere((0.0, 0.0, -1.0), 0.5, absorb)
    return scene, default_camera()
