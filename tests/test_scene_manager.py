"""Tests for the unified scene manager.

Tests cover:
- Unified material IDs across material types
- Material type lookup from Taichi scope
- Sphere creation and validation
- Background overrides
- Serialization to and from dictionaries

Note: Imports are done inside test methods to avoid Taichi initialization issues.
"""

import json

import pytest
import taichi as ti


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_material_ids_are_sequential_across_types(self):
        """Test that every material type shares one ID space."""
        from rtw.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        lam = scene.add_lambertian_material((0.5, 0.5, 0.5))
        met = scene.add_metal_material((0.8, 0.8, 0.8), fuzz=0.1)
        glass = scene.add_dielectric_material(1.5)
        lam2 = scene.add_lambertian_material((0.1, 0.2, 0.3))

        assert (lam, met, glass, lam2) == (0, 1, 2, 3)
        assert scene.get_material_count() == 4

        info = scene.get_material_info(lam2)
        assert info is not None
        assert info.material_type == MaterialType.LAMBERTIAN
        # Second Lambertian in its own registry
        assert info.type_index == 1
        assert scene.get_material_info(99) is None

    def test_material_type_lookup_in_kernel(self):
        """Test get_material_type and get_material_type_index from Taichi scope."""
        from rtw.scene.manager import (
            MaterialType,
            SceneManager,
            get_material_type,
            get_material_type_index,
        )

        scene = SceneManager()
        scene.add_metal_material((0.8, 0.8, 0.8))
        scene.add_dielectric_material(1.5)
        scene.add_metal_material((0.5, 0.5, 0.5))

        types = ti.field(dtype=ti.i32, shape=4)
        indices = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            for i in range(4):
                types[i] = get_material_type(i)
                indices[i] = get_material_type_index(i)

        test_kernel()
        assert types[0] == int(MaterialType.METAL)
        assert types[1] == int(MaterialType.DIELECTRIC)
        assert types[2] == int(MaterialType.METAL)
        assert indices[0] == 0
        assert indices[1] == 0
        assert indices[2] == 1
        # Unregistered ID
        assert types[3] == -1
        assert indices[3] == -1

    def test_invalid_material_parameters_raise(self):
        """Test that registry validation errors propagate."""
        from rtw.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.add_metal_material((0.5, 0.5, 0.5), fuzz=2.0)
        with pytest.raises(ValueError):
            scene.add_dielectric_material(ir=0.0)
        assert scene.get_material_count() == 0


class TestSphereManagement:
    """Tests for sphere creation."""

    def test_add_sphere_with_material(self):
        """Test that spheres reference existing materials."""
        from rtw.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_lambertian_material((0.5, 0.5, 0.5))
        idx0 = scene.add_sphere((0, 0, -1), 0.5, mat)
        idx1 = scene.add_sphere((1, 0, -1), 0.5, mat)

        assert (idx0, idx1) == (0, 1)
        assert scene.get_sphere_count() == 2
        assert scene.spheres[1].center == (1.0, 0.0, -1.0)
        assert scene.spheres[1].material_id == mat

    @pytest.mark.parametrize("material_id", [-1, 1, 5])
    def test_add_sphere_invalid_material(self, material_id):
        """Test that unknown material IDs raise ValueError."""
        from rtw.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_material((0.5, 0.5, 0.5))
        with pytest.raises(ValueError, match="material_id"):
            scene.add_sphere((0, 0, 0), 1.0, material_id)

    def test_convenience_sphere_methods(self):
        """Test add_*_sphere helpers return (sphere_index, material_id)."""
        from rtw.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        assert scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.5, 0.5, 0.5)) == (0, 0)
        assert scene.add_metal_sphere((1, 0, -1), 0.5, (0.8, 0.8, 0.8), fuzz=0.2) == (1, 1)
        assert scene.add_dielectric_sphere((-1, 0, -1), 0.5, ir=1.33) == (2, 2)
        assert scene.get_material_info(2).material_type == MaterialType.DIELECTRIC

    def test_new_manager_clears_scene(self):
        """Test that constructing a manager resets global scene state."""
        from rtw.scene.intersection import get_sphere_count
        from rtw.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.5, 0.5, 0.5))
        scene.set_background((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))

        fresh = SceneManager()
        assert get_sphere_count() == 0
        assert fresh.get_material_count() == 0
        assert fresh.materials == []

        from rtw.scene.background import DEFAULT_BOTTOM_COLOR, DEFAULT_TOP_COLOR

        assert fresh.get_background() == (DEFAULT_BOTTOM_COLOR, DEFAULT_TOP_COLOR)

    def test_capacity_information(self):
        """Test that capacities are reported."""
        from rtw.scene.manager import MAX_MATERIALS, SceneManager

        assert SceneManager.get_max_spheres() >= 500
        assert SceneManager.get_max_materials() == MAX_MATERIALS


class TestSerialization:
    """Tests for dictionary serialization."""

    def test_to_dict(self):
        """Test exporting materials, spheres and background."""
        from rtw.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
        scene.add_sphere((1, 2, 3), 0.5, mat)
        scene.set_background((1.0, 1.0, 1.0), (0.5, 0.7, 1.0))

        data = scene.to_dict()
        assert data["materials"] == [{"type": "metal", "albedo": [0.8, 0.6, 0.2], "fuzz": 0.3}]
        assert data["spheres"] == [{"center": [1.0, 2.0, 3.0], "radius": 0.5, "material_id": 0}]
        assert data["background"] == {"bottom": [1.0, 1.0, 1.0], "top": [0.5, 0.7, 1.0]}
        # JSON compatible
        json.dumps(data)

    def test_to_dict_without_background(self):
        """Test that the default background is not exported."""
        from rtw.scene.manager import SceneManager

        scene = SceneManager()
        assert "background" not in scene.to_dict()

    def test_from_dict_rebuilds_scene(self):
        """Test loading a scene from a dictionary."""
        from rtw.scene.manager import MaterialType, SceneManager

        data = {
            "materials": [
                {"type": "lambertian", "albedo": [0.1, 0.2, 0.3]},
                {"type": "dielectric", "ir": 1.33},
            ],
            "spheres": [
                {"center": [0, 0, -1], "radius": 0.5, "material_id": 1},
                {"center": [0, -100.5, -1], "radius": 100, "material_id": 0},
            ],
            "background": {"bottom": [1, 1, 1], "top": [0, 0, 1]},
        }
        scene = SceneManager()
        scene.from_dict(data)

        assert scene.get_material_count() == 2
        assert scene.get_sphere_count() == 2
        assert scene.get_material_info(1).material_type == MaterialType.DIELECTRIC
        assert scene.get_material_info(1).params["albedo"] == (1.0, 1.0, 1.0)
        assert scene.get_background() == ((1.0, 1.0, 1.0), (0.0, 0.0, 1.0))

        exported = scene.to_dict()
        assert exported["spheres"][1]["radius"] == 100.0
        assert exported["materials"][1] == {
            "type": "dielectric",
            "ir": 1.33,
            "albedo": [1.0, 1.0, 1.0],
        }

    def test_from_dict_unknown_type(self):
        """Test that unknown material types raise ValueError."""
        from rtw.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Unknown material type"):
            scene.from_dict({"materials": [{"type": "emissive"}], "spheres": []})

    def test_from_dict_bad_vector(self):
        """Test that malformed vectors raise ValueError."""
        from rtw.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.from_dict({"materials": [{"type": "lambertian", "albedo": [0.5, 0.5]}]})
