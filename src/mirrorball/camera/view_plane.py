"""Fixed view-plane camera for perspective ray generation.

Pixels map to normalized device coordinates in [-1, 1] x [-1, 1], with the
vertical axis flipped so that increasing pixel rows go down in world Y. The
NDC point is scaled by half the camera's view-plane size to land on the plane
z = 0, which stays centered at the world origin regardless of where the camera
is. Each primary ray starts at the camera position and points at that plane
point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrorball.camera.view_plane import generate_ray
    >>> from mirrorball.scene.model import Camera
    >>> camera = Camera(position=(0, 0, 5), width=2.0, height=2.0)
    >>> origin, direction = generate_ray(camera, 1, 1, 2, 2)
    >>> direction
    (0.0, 0.0, -1.0)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from mirrorball.core.ray import Vector3, is_degenerate, safe_normalize
from mirrorball.scene.model import Camera

vec3 = tm.vec3


@ti.func
def pixel_to_view_plane(
    px: ti.f32,
    py: ti.f32,
    viewport_width: ti.i32,
    viewport_height: ti.i32,
    plane_width: ti.f32,
    plane_height: ti.f32,
) -> vec3:
    """Map a (possibly fractional) pixel coordinate onto the z = 0 view plane.

    Args:
        px: Pixel column (0 = left).
        py: Pixel row (0 = top).
        viewport_width: Image width in pixels.
        viewport_height: Image height in pixels.
        plane_width: View-plane width in world units.
        plane_height: View-plane height in world units.

    Returns:
        The world-space point on the view plane.
    """
    ndc_x = (px / ti.cast(viewport_width, ti.f32)) * 2.0 - 1.0
    ndc_y = 1.0 - (py / ti.cast(viewport_height, ti.f32)) * 2.0
    return vec3(ndc_x * (plane_width / 2.0), ndc_y * (plane_height / 2.0), 0.0)


@ti.func
def get_ray(
    px: ti.f32,
    py: ti.f32,
    viewport_width: ti.i32,
    viewport_height: ti.i32,
    camera_position: vec3,
    plane_width: ti.f32,
    plane_height: ti.f32,
):
    """Generate the primary ray through a pixel.

    The ray origin is always the camera position, so only the direction is
    returned.

    Returns:
        A tuple (direction, valid). valid is 0 when the camera sits on the
        view-plane point and no direction exists; the direction is then zero.
    """
    target = pixel_to_view_plane(
        px, py, viewport_width, viewport_height, plane_width, plane_height
    )
    offset = target - camera_position
    valid = 1 - is_degenerate(offset)
    return safe_normalize(offset), valid


@ti.func
def get_ray_jittered(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    viewport_width: ti.i32,
    viewport_height: ti.i32,
    camera_position: vec3,
    plane_width: ti.f32,
    plane_height: ti.f32,
    jitter: ti.i32,
):
    """Generate a primary ray, optionally with a random sub-pixel offset.

    With jitter enabled the pixel coordinate receives a uniform [0, 1) offset
    on each axis, which anti-aliases edges once samples are averaged. Without
    it every sample of a pixel uses the same ray through the pixel corner.

    Returns:
        A tuple (direction, valid) as for get_ray().
    """
    px = ti.cast(pixel_i, ti.f32)
    py = ti.cast(pixel_j, ti.f32)
    if jitter != 0:
        px += ti.random(ti.f32)
        py += ti.random(ti.f32)
    return get_ray(
        px, py, viewport_width, viewport_height, camera_position, plane_width, plane_height
    )


# =============================================================================
# Python-Callable Ray Generation
# =============================================================================


@ti.kernel
def _generate_ray_kernel(
    px: ti.f32,
    py: ti.f32,
    viewport_width: ti.i32,
    viewport_height: ti.i32,
    camera_position: vec3,
    plane_width: ti.f32,
    plane_height: ti.f32,
    out: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Generate one primary ray and store (valid, origin, direction) in out."""
    direction, valid = get_ray(
        px, py, viewport_width, viewport_height, camera_position, plane_width, plane_height
    )
    out[0] = ti.cast(valid, ti.f32)
    for c in ti.static(range(3)):
        out[1 + c] = camera_position[c]
        out[4 + c] = direction[c]


def generate_ray(
    camera: Camera,
    px: float,
    py: float,
    width: int,
    height: int,
) -> tuple[Vector3, Vector3] | None:
    """Generate the primary ray through a pixel.

    This is a Python-callable function for testing and debugging.

    Args:
        camera: The camera configuration.
        px: Pixel column (0 = left).
        py: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Tuple of (origin, unit direction), or None when the camera position
        coincides with the view-plane point.
    """
    out = np.zeros(7, dtype=np.float32)
    _generate_ray_kernel(
        float(px),
        float(py),
        width,
        height,
        vec3(*camera.position),
        camera.width,
        camera.height,
        out,
    )
    if out[0] == 0.0:
        return None
    origin = (float(out[1]), float(out[2]), float(out[3]))
    direction = (float(out[4]), float(out[5]), float(out[6]))
    return origin, direction
