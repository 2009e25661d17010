"""Tests for the immutable scene model.

This module tests:
- SphereObject validation and reflectivity default
- Camera validation
- Scene packing into the primitive table
- Dictionary round trips
- The showcase scene
"""

import math

import numpy as np
import pytest


class TestSphereObject:
    """Test SphereObject construction and validation."""

    def test_defaults(self):
        """Test default roughness and reflectivity."""
        from mirrorball.scene.model import SphereObject

        sphere = SphereObject(center=(1, 2, 3), radius=2, color=(0.5, 0.5, 0.5))

        assert sphere.center == (1.0, 2.0, 3.0)
        assert sphere.radius == 2.0
        assert sphere.roughness == 0.0
        assert sphere.reflectivity is None
        assert sphere.effective_reflectivity == pytest.approx(0.8)
        assert sphere.kind == "sphere"

    def test_explicit_zero_reflectivity_is_kept(self):
        """Test that reflectivity 0 is not replaced by the default."""
        from mirrorball.scene.model import SphereObject

        sphere = SphereObject((0, 0, 0), 1.0, (1, 1, 1), reflectivity=0.0)
        assert sphere.effective_reflectivity == 0.0

    @pytest.mark.parametrize("radius", [0.0, -1.0, math.inf, math.nan])
    def test_rejects_bad_radius(self, radius):
        """Test that non-positive or non-finite radii are rejected."""
        from mirrorball.scene.model import SphereObject

        with pytest.raises(ValueError, match="radius"):
            SphereObject((0, 0, 0), radius, (1, 1, 1))

    def test_rejects_out_of_range_roughness(self):
        """Test that roughness outside [0, 1] is rejected."""
        from mirrorball.scene.model import SphereObject

        with pytest.raises(ValueError, match="Roughness"):
            SphereObject((0, 0, 0), 1.0, (1, 1, 1), roughness=1.5)
        with pytest.raises(ValueError, match="Roughness"):
            SphereObject((0, 0, 0), 1.0, (1, 1, 1), roughness=-0.1)

    def test_rejects_out_of_range_reflectivity(self):
        """Test that reflectivity outside [0, 1] is rejected."""
        from mirrorball.scene.model import SphereObject

        with pytest.raises(ValueError, match="Reflectivity"):
            SphereObject((0, 0, 0), 1.0, (1, 1, 1), reflectivity=2.0)

    def test_rejects_negative_color(self):
        """Test that negative color components are rejected."""
        from mirrorball.scene.model import SphereObject

        with pytest.raises(ValueError, match="negative"):
            SphereObject((0, 0, 0), 1.0, (1, -0.5, 1))

    def test_rejects_non_finite_center(self):
        """Test that NaN or infinite coordinates are rejected."""
        from mirrorball.scene.model import SphereObject

        with pytest.raises(ValueError, match="not finite"):
            SphereObject((0, math.nan, 0), 1.0, (1, 1, 1))

    def test_rejects_wrong_component_count(self):
        """Test that vectors must have three components."""
        from mirrorball.scene.model import SphereObject

        with pytest.raises(ValueError, match="3 components"):
            SphereObject((0, 0), 1.0, (1, 1, 1))

    def test_is_immutable(self):
        """Test that attributes cannot be reassigned."""
        from dataclasses import FrozenInstanceError

        from mirrorball.scene.model import SphereObject

        sphere = SphereObject((0, 0, 0), 1.0, (1, 1, 1))
        with pytest.raises(FrozenInstanceError):
            sphere.radius = 2.0  # type: ignore[misc]


class TestCamera:
    """Test Camera validation."""

    def test_valid_camera(self):
        """Test that a valid camera stores float attributes."""
        from mirrorball.scene.model import Camera

        camera = Camera(position=(0, 0, 5), width=10, height=8)
        assert camera.position == (0.0, 0.0, 5.0)
        assert camera.width == 10.0
        assert camera.height == 8.0

    def test_rejects_non_positive_view_plane(self):
        """Test that a zero or negative view plane is rejected."""
        from mirrorball.scene.model import Camera

        with pytest.raises(ValueError, match="width"):
            Camera(position=(0, 0, 5), width=0.0, height=1.0)
        with pytest.raises(ValueError, match="height"):
            Camera(position=(0, 0, 5), width=1.0, height=-1.0)


class TestScenePacking:
    """Test Scene packing into the primitive table."""

    def test_pack_layout(self):
        """Test that each sphere becomes one row with the documented columns."""
        from mirrorball.scene.model import (
            COL_CENTER_X,
            COL_COLOR_G,
            COL_KIND,
            COL_RADIUS,
            COL_REFLECTIVITY,
            COL_ROUGHNESS,
            KIND_SPHERE,
            PRIMITIVE_STRIDE,
            Scene,
            SphereObject,
        )

        scene = Scene(
            objects=(
                SphereObject((1, 2, 3), 0.5, (0.1, 0.2, 0.3), roughness=0.4),
                SphereObject((-1, 0, 0), 2.0, (1, 1, 1), reflectivity=0.25),
            )
        )
        table = scene.pack()

        assert table.shape == (2, PRIMITIVE_STRIDE)
        assert table.dtype == np.float32
        assert table[0, COL_KIND] == KIND_SPHERE
        assert table[0, COL_CENTER_X] == pytest.approx(1.0)
        assert table[0, COL_RADIUS] == pytest.approx(0.5)
        assert table[0, COL_COLOR_G] == pytest.approx(0.2)
        assert table[0, COL_ROUGHNESS] == pytest.approx(0.4)
        # Default reflectivity is applied when packing
        assert table[0, COL_REFLECTIVITY] == pytest.approx(0.8)
        assert table[1, COL_REFLECTIVITY] == pytest.approx(0.25)

    def test_empty_scene_packs_one_padding_row(self):
        """Test that an empty scene still yields a kernel-compatible table."""
        from mirrorball.scene.model import PRIMITIVE_STRIDE, Scene

        scene = Scene()
        assert len(scene) == 0
        assert scene.pack().shape == (1, PRIMITIVE_STRIDE)

    def test_rejects_non_primitive_objects(self):
        """Test that unsupported objects are rejected."""
        from mirrorball.scene.model import Scene

        with pytest.raises(ValueError, match="not a supported primitive"):
            Scene(objects=("sphere",))  # type: ignore[arg-type]


class TestSceneSerialization:
    """Test to_dict/from_dict."""

    def test_round_trip(self):
        """Test that a scene survives export and import."""
        from mirrorball.scene.model import Scene, SphereObject

        scene = Scene(
            objects=(
                SphereObject((1, 2, 3), 0.5, (0.1, 0.2, 0.3), roughness=0.4),
                SphereObject((-1, 0, 0), 2.0, (1, 1, 1), reflectivity=0.25),
            )
        )
        restored = Scene.from_dict(scene.to_dict())
        assert restored == scene

    def test_from_dict_rejects_unknown_type(self):
        """Test that unknown primitive types are rejected."""
        from mirrorball.scene.model import Scene

        with pytest.raises(ValueError, match="Unknown primitive type"):
            Scene.from_dict({"objects": [{"type": "quad"}]})


class TestShowcaseScene:
    """Test the showcase scene factory."""

    def test_showcase_contents(self):
        """Test the five spheres and camera of the showcase scene."""
        from mirrorball.scene.showcase import create_showcase_scene

        scene, camera = create_showcase_scene()

        assert len(scene) == 5
        assert camera.position == (0.0, 0.0, 5.0)
        assert camera.width == 10.0 and camera.height == 10.0
        red = scene.objects[0]
        assert red.color == (1.0, 0.0, 0.0)
        assert red.radius == 3.0
        assert red.roughness == 0.0
        assert all(obj.effective_reflectivity == 1.0 for obj in scene.objects)
        assert sum(obj.roughness > 0.0 for obj in scene.objects) == 3
