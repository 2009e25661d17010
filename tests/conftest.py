"""Pytest configuration for mirrorball tests.

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
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def red_sphere_scene():
    """A unit red sphere at the origin seen from (0, 0, 5) through a 2x2 plane."""
    from mirrorball.scene.model import Camera, Scene, SphereObject

    scene = Scene(
        objects=(
            SphereObject(center=(0.0, 0.0, 0.0), radius=1.0, color=(1.0, 0.0, 0.0)),
        )
    )
    camera = Camera(position=(0.0, 0.0, 5.0), width=2.0, height=2.0)
    return scene, camera
