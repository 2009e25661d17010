"""Immutable scene description: spheres, camera, and the packed primitive table.

The scene is supplied once, before rendering, and never changes during a
render. It is validated on construction so that an invalid configuration is
rejected before any kernel runs.

For the GPU side, the scene is packed into a dense float32 table with one row
per primitive. Column 0 holds the primitive kind tag, which the intersection
engine dispatches on; the remaining columns hold geometry and material
attributes.

Example:
    >>> from mirrorball.scene.model import Camera, Scene, SphereObject
    >>> scene = Scene(
    ...     objects=(
    ...         SphereObject(center=(0, 0, 0), radius=1.0, color=(1, 0, 0)),
    ...     )
    ... )
    >>> camera = Camera(position=(0, 0, 5), width=2.0, height=2.0)
    >>> table = scene.pack()
    >>> table.shape
    (1, 10)
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar

import numpy as np
import numpy.typing as npt

from mirrorball.core.color import DEFAULT_REFLECTIVITY
from mirrorball.core.ray import Color, Vector3

# =============================================================================
# Packed Primitive Table Layout
# =============================================================================

# Primitive kind tags
KIND_SPHERE = 0

# Column indices of the packed primitive table
COL_KIND = 0
COL_CENTER_X = 1
COL_CENTER_Y = 2
COL_CENTER_Z = 3
COL_RADIUS = 4
COL_COLOR_R = 5
COL_COLOR_G = 6
COL_COLOR_B = 7
COL_ROUGHNESS = 8
COL_REFLECTIVITY = 9

PRIMITIVE_STRIDE = 10


def _as_vector(name: str, value: Iterable[float]) -> tuple[float, float, float]:
    """Coerce a 3-component sequence to a tuple of finite floats.

    Raises:
        ValueError: If the value does not have exactly three finite components.
    """
    components = tuple(float(c) for c in value)
    if len(components) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(components)}")
    for i, component in enumerate(components):
        if not math.isfinite(component):
            raise ValueError(f"{name} component {i} = {component} is not finite")
    return components  # type: ignore[return-value]


def _check_unit_interval(name: str, value: float) -> None:
    """Raise ValueError unless value lies in [0, 1]."""
    if not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} = {value} is outside [0, 1]")


@dataclass(frozen=True)
class SphereObject:
    """A sphere with its material attributes.

    Attributes:
        center: The center of the sphere in world space (x, y, z).
        radius: The radius of the sphere (positive).
        color: Linear RGB color the sphere pulls accumulated color toward.
            Components must be non-negative.
        roughness: Random perturbation of the reflected direction in [0, 1].
            0 is a perfect mirror.
        reflectivity: Reflectance at normal incidence in [0, 1], or None to
            use DEFAULT_REFLECTIVITY.
    """

    kind: ClassVar[str] = "sphere"

    center: Vector3
    radius: float
    color: Color
    roughness: float = 0.0
    reflectivity: float | None = None

    def __post_init__(self) -> None:
        """Validate and normalize the attributes.

        Raises:
            ValueError: If any attribute is out of range.
        """
        object.__setattr__(self, "center", _as_vector("center", self.center))
        object.__setattr__(self, "color", _as_vector("color", self.color))

        radius = float(self.radius)
        if not math.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(self, "radius", radius)

        for i, component in enumerate(self.color):
            if component < 0.0:
                raise ValueError(f"Color component {i} = {component} is negative")

        roughness = float(self.roughness)
        _check_unit_interval("Roughness", roughness)
        object.__setattr__(self, "roughness", roughness)

        if self.reflectivity is not None:
            reflectivity = float(self.reflectivity)
            _check_unit_interval("Reflectivity", reflectivity)
            object.__setattr__(self, "reflectivity", reflectivity)

    @property
    def effective_reflectivity(self) -> float:
        """The reflectivity used for shading, with the default applied."""
        if self.reflectivity is None:
            return DEFAULT_REFLECTIVITY
        return self.reflectivity

    def to_row(self) -> list[float]:
        """Pack this sphere into one row of the primitive table."""
        row = [0.0] * PRIMITIVE_STRIDE
        row[COL_KIND] = float(KIND_SPHERE)
        row[COL_CENTER_X], row[COL_CENTER_Y], row[COL_CENTER_Z] = self.center
        row[COL_RADIUS] = self.radius
        row[COL_COLOR_R], row[COL_COLOR_G], row[COL_COLOR_B] = self.color
        row[COL_ROUGHNESS] = self.roughness
        row[COL_REFLECTIVITY] = self.effective_reflectivity
        return row

    def to_dict(self) -> dict[str, Any]:
        """Export the sphere to a dictionary."""
        return {
            "type": self.kind,
            "center": list(self.center),
            "radius": self.radius,
            "color": list(self.color),
            "roughness": self.roughness,
            "reflectivity": self.reflectivity,
        }


@dataclass(frozen=True)
class Camera:
    """Camera position and the size of the fixed view plane.

    The view plane is a width x height rectangle centered at the world origin
    in the plane z = 0. It does not move with the camera; the position only
    sets the ray origin.

    Attributes:
        position: Camera position in world space (x, y, z).
        width: View-plane width in world units (positive).
        height: View-plane height in world units (positive).
    """

    position: Vector3
    width: float
    height: float

    def __post_init__(self) -> None:
        """Validate the camera.

        Raises:
            ValueError: If the position is not finite or the view plane is
                not positive in both dimensions.
        """
        object.__setattr__(self, "position", _as_vector("position", self.position))
        for name in ("width", "height"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value <= 0.0:
                raise ValueError(f"View-plane {name} must be positive, got {value}")
            object.__setattr__(self, name, value)


@dataclass(frozen=True)
class Scene:
    """An ordered, immutable collection of spheres.

    Order only matters for breaking exact distance ties during nearest-hit
    selection: the earlier sphere wins.

    Attributes:
        objects: The spheres in scan order.
    """

    objects: tuple[SphereObject, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Freeze the object sequence and check element types.

        Raises:
            ValueError: If an element is not a SphereObject.
        """
        objects = tuple(self.objects)
        for i, obj in enumerate(objects):
            if not isinstance(obj, SphereObject):
                raise ValueError(f"Scene object {i} is not a supported primitive: {obj!r}")
        object.__setattr__(self, "objects", objects)

    def __len__(self) -> int:
        """Return the number of primitives."""
        return len(self.objects)

    def pack(self) -> npt.NDArray[np.float32]:
        """Pack the scene into the float32 primitive table.

        The table always has at least one row so that it can be handed to a
        kernel; the primitive count passed alongside it decides how many rows
        are read.

        Returns:
            Array of shape (max(len(scene), 1), PRIMITIVE_STRIDE).
        """
        table = np.zeros((max(len(self.objects), 1), PRIMITIVE_STRIDE), dtype=np.float32)
        for i, obj in enumerate(self.objects):
            table[i, :] = obj.to_row()
        return table

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary with an "objects" list.
        """
        return {"objects": [obj.to_dict() for obj in self.objects]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scene:
        """Build a scene from a dictionary produced by to_dict().

        Args:
            data: Dictionary with an "objects" key.

        Returns:
            The validated scene.

        Raises:
            ValueError: If an object has an unknown type or invalid attributes.
        """
        objects = []
        for obj_config in data.get("objects", []):
            obj_type = obj_config.get("type", "sphere").lower()
            if obj_type != SphereObject.kind:
                raise ValueError(f"Unknown primitive type: {obj_type}")
            objects.append(
                SphereObject(
                    center=obj_config.get("center", [0.0, 0.0, 0.0]),
                    radius=obj_config.get("radius", 1.0),
                    color=obj_config.get("color", [1.0, 1.0, 1.0]),
                    roughness=obj_config.get("roughness", 0.0),
                    reflectivity=obj_config.get("reflectivity"),
                )
            )
        return cls(objects=tuple(objects))
