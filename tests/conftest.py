"""Pytest configuration for raytracer tests.

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
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the shape store, material registry and render target around each test."""
    # Import here so Taichi is initialized before any field is declared
    from raytracer.core.integrator import reset_render_target
    from raytracer.materials.material import clear_materials
    from raytracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        reset_render_target()

    _clear_all()
    yield
    _clear_all()
