"""Scene module for scene management and queries.

Components:
    intersection: Sphere storage and nearest-hit queries (the sphere list)
    background: Sky gradient for rays that escape the scene
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes with matching cameras

Scene data is organized for parallel access:
    - Structure-of-Arrays layout for sphere data
    - Unified material IDs mapped to per-type material arrays
"""

from .background import (
    DEFAULT_BOTTOM_COLOR,
    DEFAULT_TOP_COLOR,
    background_color,
    get_background,
    reset_background,
    set_background,
)
from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import (
    SCENES,
    camera_from_dict,
    create_scene,
    default_camera,
    glass_sphere_scene,
    random_scene,
    random_scene_camera,
    three_sphere_scene,
)

__all__ = [
    # Background
    "DEFAULT_BOTTOM_COLOR",
    "DEFAULT_TOP_COLOR",
    "background_color",
    "get_background",
    "reset_background",
    "set_background",
    # Intersection
    "MAX_SPHERES",
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "intersect_scene",
    # Manager
    "MAX_MATERIALS",
    "MaterialInfo",
    "MaterialType",
    "SceneConfig",
    "SceneManager",
    "SphereInfo",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "SCENES",
    "camera_from_dict",
    "create_scene",
    "default_camera",
    "random_scene_camera",
    "three_sphere_scene",
    "glass_sphere_scene",
    "random_scene",
]
