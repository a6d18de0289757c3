"""Unified scene manager coordinating spheres and materials.

This module provides a high-level scene building API. Materials of every
type share one material_id space; Taichi fields map each material_id to
its (material_type, type_local_index) pair so the path tracer can dispatch
to the right scatter function. Many spheres may share one material_id.

The SceneManager maintains:
- A unified material_id space across Lambertian, metal and dielectric
- Python-side records of materials and spheres for inspection
- The background gradient of the scene
- Scene serialization to and from plain dictionaries (JSON-compatible)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtw.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from rtw.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from rtw.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from rtw.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from rtw.scene.background import get_background, reset_background, set_background
from rtw.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 1536  # 512 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The index into the type-specific material arrays.
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific material arrays.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        background: Optional {"bottom": rgb, "top": rgb} override.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    background: dict[str, list[float]] | None = None


# (bottom, top) colors of the sky gradient
_Gradient = tuple[tuple[float, float, float], tuple[float, float, float]]


def _as_rgb(values: Any) -> tuple[float, float, float]:
    """Convert a three-element sequence to an (R, G, B) float tuple."""
    if len(values) != 3:
        raise ValueError(f"Expected three components, got {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Unified scene manager coordinating spheres and materials.

    Creating a SceneManager resets the global scene state (spheres,
    material registries and background), so only one scene is live at a time.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red_diffuse = scene.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold_metal = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(ir=1.5)
        >>> scene.add_sphere((0, 0, -1), 0.5, red_diffuse)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold_metal)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._background: _Gradient | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        reset_background()
        self.materials.clear()
        self.spheres.clear()
        self._background = None

    def clear(self) -> None:
        """Clear the entire scene (spheres, materials and background)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Assign a unified material ID to a type-local material."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B), components in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B), components in [0, 1].
            fuzz: The reflection perturbation in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or fuzz is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(
        self,
        ir: float = 1.5,
        albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            ir: Index of refraction. Default is 1.5 (typical glass).
            albedo: The color tint as (R, G, B). Default is clear (white).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If ir is not positive or an albedo component is outside [0, 1].
        """
        type_index = add_dielectric_material(ir, albedo)
        return self._register_material(
            MaterialType.DIELECTRIC, type_index, {"ir": ir, "albedo": tuple(albedo)}
        )

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID.

        Returns:
            MaterialInfo for the material, or None if not found.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The unified material ID from add_*_material().

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        center_tuple = (float(center[0]), float(center[1]), float(center[2]))
        sphere_index = add_sphere(center_tuple, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center_tuple,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ir: float = 1.5,
        albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ir, albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Background
    # =========================================================================

    def set_background(
        self,
        bottom: tuple[float, float, float],
        top: tuple[float, float, float],
    ) -> None:
        """Override the sky gradient colors for this scene.

        Raises:
            ValueError: If any component is negative.
        """
        set_background(bottom, top)
        self._background = (tuple(bottom), tuple(top))

    def get_background(self) -> _Gradient:
        """Get the active (bottom, top) gradient colors."""
        return get_background()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        if self._background is not None:
            bottom, top = self._background
            config.background = {"bottom": list(bottom), "top": list(top)}

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, spheres refer to them by ID
        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                self.add_lambertian_material(_as_rgb(mat_config.get("albedo", [0.5, 0.5, 0.5])))
            elif mat_type == "metal":
                self.add_metal_material(
                    _as_rgb(mat_config.get("albedo", [0.8, 0.8, 0.8])),
                    float(mat_config.get("fuzz", 0.0)),
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(
                    float(mat_config.get("ir", 1.5)),
                    _as_rgb(mat_config.get("albedo", [1.0, 1.0, 1.0])),
                )
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_rgb(sphere_config.get("center", [0.0, 0.0, 0.0])),
                float(sphere_config.get("radius", 1.0)),
                int(sphere_config.get("material_id", 0)),
            )

        if config.background is not None:
            self.set_background(
                _as_rgb(config.background["bottom"]),
                _as_rgb(config.background["top"]),
            )

        logger.debug(
            f"Loaded scene with {len(self.materials)} materials and {len(self.spheres)} spheres"
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        data: dict[str, Any] = {
            "materials": config.materials,
            "spheres": config.spheres,
        }
        if config.background is not None:
            data["background"] = config.background
        return data

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres' and optional
                'background' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            background=data.get("background"),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
