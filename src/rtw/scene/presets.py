"""Ready-made scenes with matching cameras.

Each factory builds its spheres and materials through a fresh SceneManager
and returns it together with the camera that frames the scene:

    three_sphere: a mirror, a blue diffuse ball and a small glass bead
    glass_sphere: five large balls behind a glass sphere
    random: the "final scene" of scattered small spheres around three large
        ones, generated from a seed

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.scene.presets import create_scene
    >>> scene, camera = create_scene("glass_sphere", aspect_ratio=16 / 9)
"""

import logging
from collections.abc import Callable
from typing import Any

import numpy as np

from rtw.camera.thin_lens import ThinLensCamera
from rtw.core.config import DEFAULT_ASPECT_RATIO
from rtw.scene.manager import SceneManager

logger = logging.getLogger(__name__)


def _rgb8(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Scale an 8-bit color to [0, 1]."""
    return (r / 255.0, g / 255.0, b / 255.0)


def default_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> ThinLensCamera:
    """Camera framing the three_sphere and glass_sphere scenes."""
    return ThinLensCamera(
        lookfrom=(0.0, 0.5, 4.0),
        lookat=(0.0, 0.0, -3.0),
        vup=(0.0, 1.0, 0.0),
        vfov=45.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=10.0,
    )


_CAMERA_VECTOR_KEYS = ("lookfrom", "lookat", "vup")
_CAMERA_SCALAR_KEYS = ("vfov", "aperture", "focus_dist")


def camera_from_dict(
    data: dict[str, Any],
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> ThinLensCamera:
    """Build a camera from the "camera" entry of a scene file.

    Keys that are missing keep their default_camera values. The aspect
    ratio always comes from the render settings so the camera matches the
    image.

    Args:
        data: Mapping with any of lookfrom, lookat, vup (three numbers each),
            vfov, aperture and focus_dist.
        aspect_ratio: Aspect ratio of the image being rendered.

    Returns:
        The validated camera.

    Raises:
        ValueError: If a key is unknown, a vector does not have three
            components, or the resulting camera is degenerate.
    """
    unknown = set(data) - set(_CAMERA_VECTOR_KEYS) - set(_CAMERA_SCALAR_KEYS)
    if unknown:
        raise ValueError(f"Unknown camera keys: {sorted(unknown)}")

    camera = default_camera(aspect_ratio)
    for key in _CAMERA_VECTOR_KEYS:
        if key in data:
            values = data[key]
            if len(values) != 3:
                raise ValueError(f"Camera {key} needs three components, got {values!r}")
            setattr(camera, key, (float(values[0]), float(values[1]), float(values[2])))
    for key in _CAMERA_SCALAR_KEYS:
        if key in data:
            setattr(camera, key, float(data[key]))

    camera.validate()
    return camera


def random_scene_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> ThinLensCamera:
    """Wide view of the random scene from above the ground plane."""
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=10.0,
    )


def three_sphere_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build a small scene: mirror, blue diffuse and glass spheres on dark ground."""
    scene = SceneManager()

    blue = scene.add_lambertian_material(_rgb8(122.0, 175.0, 238.0))
    ground = scene.add_lambertian_material(_rgb8(28.0, 28.0, 28.0))
    mirror = scene.add_metal_material(_rgb8(224.0, 232.0, 245.0), fuzz=0.0)
    glass = scene.add_dielectric_material(ir=1.5)

    scene.add_sphere((1.10, 0.6, -4.0), 1.0, mirror)
    scene.add_sphere((-1.3, 0.60, -2.9), 1.0, blue)
    scene.add_sphere((0.01, 0.83, -0.1), 0.22, glass)
    scene.add_sphere((0.0, -1000.45, -1.2), 1000.0, ground)

    return scene, default_camera(aspect_ratio)


def glass_sphere_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build five large spheres in an arc behind a glass sphere."""
    scene = SceneManager()

    blue = scene.add_lambertian_material(_rgb8(122.0, 175.0, 238.0))
    white = scene.add_lambertian_material((1.0, 1.0, 1.0))
    ground = scene.add_lambertian_material(_rgb8(72.0, 72.0, 72.0))
    metal = scene.add_metal_material(_rgb8(64.0, 64.0, 64.0), fuzz=0.1)
    mirror = scene.add_metal_material(_rgb8(253.0, 253.0, 255.0), fuzz=0.0)
    red_metal = scene.add_metal_material(_rgb8(208.0, 66.0, 70.0), fuzz=0.3)
    glass = scene.add_dielectric_material(ir=1.5)

    scene.add_sphere((-3.363, 0.45, -3.205), 0.9, white)
    scene.add_sphere((-1.84, 0.45, -4.528), 0.9, metal)
    scene.add_sphere((0.0, 0.45, -4.8), 0.9, blue)
    scene.add_sphere((1.84, 0.45, -4.528), 0.9, mirror)
    scene.add_sphere((3.363, 0.45, -3.205), 0.9, red_metal)
    scene.add_sphere((0.0, 0.45, -1.0), 0.9, glass)
    scene.add_sphere((0.0, -1000.45, -1.2), 1000.0, ground)

    return scene, default_camera(aspect_ratio)


def random_scene(
    seed: int = 0,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build the scattered-spheres scene.

    Small spheres of radius 0.2 are dropped on a 22x22 grid with random
    offsets. Each is diffuse (66%), metal (19%) or glass (15%), and none is
    placed within 0.9 of (4, 0.2, 0) so the large metal sphere stays clear.

    Args:
        seed: Seed of the NumPy generator placing the small spheres.
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        Tuple of (scene, camera).
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    ground = scene.add_lambertian_material(_rgb8(80.0, 144.0, 22.0))
    scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, ir=1.5, albedo=_rgb8(242.0, 111.0, 112.0))
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, _rgb8(111.0, 165.0, 242.0))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), fuzz=0.0)

    boundary = np.array([4.0, 0.2, 0.0])
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])
            if np.linalg.norm(center - boundary) <= 0.9:
                continue

            center_tuple = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < 0.66:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(center_tuple, 0.2, tuple(albedo.tolist()))
            elif choose_mat < 0.85:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metal_sphere(center_tuple, 0.2, tuple(albedo.tolist()), fuzz=fuzz)
            else:
                albedo = rng.uniform(0.8, 1.0, 3)
                scene.add_dielectric_sphere(
                    center_tuple, 0.2, ir=1.5, albedo=tuple(albedo.tolist())
                )

    logger.debug(f"Random scene (seed {seed}) has {scene.get_sphere_count()} spheres")
    return scene, random_scene_camera(aspect_ratio)


SCENES: dict[str, Callable[..., tuple[SceneManager, ThinLensCamera]]] = {
    "three_sphere": three_sphere_scene,
    "glass_sphere": glass_sphere_scene,
    "random": random_scene,
}


def create_scene(
    name: str,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    seed: int = 0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build a preset scene by name.

    Args:
        name: One of the keys of SCENES.
        aspect_ratio: Aspect ratio of the returned camera.
        seed: Seed for scenes with random layout (ignored by the others).

    Returns:
        Tuple of (scene, camera).

    Raises:
        ValueError: If the name is unknown.
    """
    if name not in SCENES:
        raise ValueError(f"Unknown scene {name!r}, expected one of {sorted(SCENES)}")
    if name == "random":
        return random_scene(seed=seed, aspect_ratio=aspect_ratio)
    return SCENES[name](aspect_ratio=aspect_ratio)
