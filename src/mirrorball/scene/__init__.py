"""Scene module for scene description and ray-scene queries.

Components:
    model: Immutable SphereObject, Camera, and Scene with primitive packing
    intersection: Nearest-hit linear scan over the packed primitive table
    showcase: The five-sphere demo scene and its camera

Scene data is organized for kernel access:
    - One float32 row per primitive, tagged with its kind
    - Geometry and material attributes side by side in the row
    - The table is rebuilt from the immutable Scene for every render
"""

from .intersection import Intersection, SceneHitRecord, intersect, intersect_scene
from .model import KIND_SPHERE, PRIMITIVE_STRIDE, Camera, Scene, SphereObject
from .showcase import create_showcase_scene

__all__ = [
    # Model
    "Camera",
    "Scene",
    "SphereObject",
    "KIND_SPHERE",
    "PRIMITIVE_STRIDE",
    # Intersection
    "Intersection",
    "SceneHitRecord",
    "intersect",
    "intersect_scene",
    # Showcase
    "create_showcase_scene",
]
