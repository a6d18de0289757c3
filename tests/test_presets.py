"""Tests for the ready-made scenes.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
"""

import pytest


class TestThreeSphereScene:
    """Tests for the three_sphere preset."""

    def test_contents(self):
        """Test the sphere and material layout."""
        from rtw.scene.manager import MaterialType
        from rtw.scene.presets import three_sphere_scene

        scene, camera = three_sphere_scene()
        assert scene.get_sphere_count() == 4
        assert scene.get_material_count() == 4

        types = [scene.get_material_info(s.material_id).material_type for s in scene.spheres]
        assert types == [
            MaterialType.METAL,
            MaterialType.LAMBERTIAN,
            MaterialType.DIELECTRIC,
            MaterialType.LAMBERTIAN,
        ]
        # Ground sphere
        assert scene.spheres[3].radius == 1000.0

    def test_camera(self):
        """Test the camera framing."""
        from rtw.scene.presets import three_sphere_scene

        _, camera = three_sphere_scene(aspect_ratio=16.0 / 9.0)
        assert camera.lookfrom == (0.0, 0.5, 4.0)
        assert camera.vfov == 45.0
        assert camera.aspect_ratio == pytest.approx(16.0 / 9.0)
        camera.validate()


class TestGlassSphereScene:
    """Tests for the glass_sphere preset."""

    def test_contents(self):
        """Test the sphere count and the glass sphere."""
        from rtw.scene.manager import MaterialType
        from rtw.scene.presets import glass_sphere_scene

        scene, _ = glass_sphere_scene()
        assert scene.get_sphere_count() == 7
        glass = [
            s
            for s in scene.spheres
            if scene.get_material_info(s.material_id).material_type == MaterialType.DIELECTRIC
        ]
        assert len(glass) == 1
        assert glass[0].center == (0.0, 0.45, -1.0)


class TestRandomScene:
    """Tests for the random preset."""

    def test_layout_is_seeded(self):
        """Test that equal seeds give the same scene."""
        from rtw.scene.presets import random_scene

        first, _ = random_scene(seed=7)
        first_dict = first.to_dict()
        second, _ = random_scene(seed=7)
        assert second.to_dict() == first_dict

        other, _ = random_scene(seed=8)
        assert other.to_dict() != first_dict

    def test_sphere_count_and_clearance(self):
        """Test the number of spheres and the clearing around the metal sphere."""
        import numpy as np

        from rtw.scene.presets import random_scene

        scene, camera = random_scene(seed=0)
        count = scene.get_sphere_count()
        # Ground plus three large spheres plus up to 22 * 22 small ones
        assert 4 + 400 < count <= 4 + 22 * 22
        assert scene.get_material_count() == count

        for sphere in scene.spheres[4:]:
            assert sphere.radius == 0.2
            distance = np.linalg.norm(np.subtract(sphere.center, (4.0, 0.2, 0.0)))
            assert distance > 0.9

        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.vfov == 20.0

    def test_material_parameters_are_valid(self):
        """Test that generated materials respect their parameter ranges."""
        from rtw.scene.manager import MaterialType
        from rtw.scene.presets import random_scene

        scene, _ = random_scene(seed=3)
        for info in scene.materials:
            albedo = info.params["albedo"]
            assert all(0.0 <= c <= 1.0 for c in albedo)
            if info.material_type == MaterialType.METAL:
                assert 0.0 <= info.params["fuzz"] <= 0.5


class TestCreateScene:
    """Tests for create_scene."""

    @pytest.mark.parametrize("name", ["three_sphere", "glass_sphere", "random"])
    def test_known_names(self, name):
        """Test that every registered preset builds."""
        from rtw.scene.presets import create_scene

        scene, camera = create_scene(name, aspect_ratio=1.5, seed=1)
        assert scene.get_sphere_count() > 0
        assert camera.aspect_ratio == 1.5

    def test_unknown_name(self):
        """Test that unknown names raise ValueError."""
        from rtw.scene.presets import create_scene

        with pytest.raises(ValueError, match="Unknown scene"):
            create_scene("checkerboard")


class TestCameraFromDict:
    """Tests for cameras described in scene files."""

    def test_empty_entry_is_default_camera(self):
        """Test that no keys give the default camera at the render aspect ratio."""
        from rtw.scene.presets import camera_from_dict, default_camera

        assert camera_from_dict({}, aspect_ratio=2.0) == default_camera(2.0)

    def test_overrides_keep_other_defaults(self):
        """Test that given keys replace defaults and the rest are kept."""
        from rtw.scene.presets import camera_from_dict, default_camera

        camera = camera_from_dict(
            {"lookfrom": [13, 2, 3], "lookat": [0, 0, 0], "vfov": 20, "aperture": 0.1},
            aspect_ratio=1.5,
        )

        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.lookat == (0.0, 0.0, 0.0)
        assert camera.vfov == 20.0
        assert camera.aperture == pytest.approx(0.1)
        assert camera.vup == default_camera().vup
        assert camera.focus_dist == default_camera().focus_dist
        assert camera.aspect_ratio == 1.5

    @pytest.mark.parametrize(
        "data, match",
        [
            ({"fov": 30.0}, "Unknown camera keys"),
            ({"aspect_ratio": 2.0}, "Unknown camera keys"),
            ({"lookat": [0.0, 1.0]}, "three components"),
            ({"vfov": 0.0}, "vfov"),
            ({"lookfrom": [0.0, 0.0, -3.0]}, "different points"),
        ],
    )
    def test_invalid_entries_raise(self, data, match):
        """Test that bad camera entries raise ValueError."""
        from rtw.scene.presets import camera_from_dict

        with pytest.raises(ValueError, match=match):
            camera_from_dict(data)
