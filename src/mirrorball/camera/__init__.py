"""Camera module for primary ray generation.

Components:
    view_plane: Camera with a fixed view plane at z = 0

Camera responsibilities:
    - Map pixel coordinates to points on the view plane
    - Build unit primary rays from the camera position
    - Optionally jitter samples within a pixel for anti-aliasing
    - Report degenerate rays instead of emitting NaN directions
"""

from .view_plane import generate_ray, get_ray, get_ray_jittered, pixel_to_view_plane

__all__ = [
    "generate_ray",
    "get_ray",
    "get_ray_jittered",
    "pixel_to_view_plane",
]
