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
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the fields are created after Taichi is initialized
    from rtw.core.integrator import clear_render_target
    from rtw.materials.dielectric import clear_dielectric_materials
    from rtw.materials.lambertian import clear_lambertian_materials
    from rtw.materials.metal import clear_metal_materials
    from rtw.scene.background import reset_background
    from rtw.scene.intersection import clear_scene
    from rtw.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        reset_background()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()
