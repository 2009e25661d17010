"""Bounce integrator for stochastic mirror reflection.

This module implements the path loop that turns a primary ray into a linear
color, and the kernel that runs it once for every pixel of a frame.

Each path starts with full intensity and a black color. At every hit:
    1. A Fresnel-like reflectance F rises from the sphere's reflectivity
       toward 1 at grazing angles.
    2. The carried intensity is multiplied by F / (1 + distance^2).
    3. The color is pulled toward the sphere's color by
       intensity * min(distance, 1).
    4. The ray is mirror-reflected, perturbed by roughness, and restarted
       just above the hit point.

A path ends when it escapes the scene, when the bounce budget is spent, when
the carried intensity drops below MIN_INTENSITY, or when the scattered
direction degenerates to zero length.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrorball.core.integrator import trace_ray
    >>> from mirrorball.scene.model import Scene, SphereObject
    >>> scene = Scene((SphereObject((0, 0, 0), 1.0, (1, 0, 0), reflectivity=1.0),))
    >>> r, g, b = trace_ray(scene, (0, 0, 5), (0, 0, -1))
    >>> r > 0.0 and g == 0.0 and b == 0.0
    True
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from mirrorball.camera.view_plane import get_ray_jittered
from mirrorball.core.color import blend_colors, fresnel_reflectance, sanitize_color
from mirrorball.core.ray import (
    Color,
    Vector3,
    is_degenerate,
    random_in_unit_sphere,
    reflect,
    safe_normalize,
)
from mirrorball.core.settings import CHANNELS, MAX_BOUNCES, RenderSettings
from mirrorball.scene.intersection import (
    intersect_scene,
    primitive_color,
    primitive_reflectivity,
    primitive_roughness,
)
from mirrorball.scene.model import Camera, Scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Carried intensity below which a path stops
MIN_INTENSITY = 0.01

# Ray offset epsilon to avoid self-intersection
RAY_EPSILON = 1e-4


# =============================================================================
# Scattering
# =============================================================================


@ti.func
def scatter_reflection(direction: vec3, normal: vec3, roughness: ti.f32):
    """Mirror-reflect a direction and perturb it by roughness.

    With roughness 0 the mirror direction is returned as is (unit length for
    unit inputs). Otherwise roughness times a random point in the unit ball
    is added and the sum is renormalized.

    Args:
        direction: The incoming unit direction.
        normal: The unit surface normal.
        roughness: Perturbation scale in [0, 1].

    Returns:
        A tuple (scattered_direction, valid). valid is 0 when the scattered
        vector has no usable length; the direction is then zero.
    """
    scattered = reflect(direction, normal)
    if roughness > 0.0:
        scattered += roughness * random_in_unit_sphere()
    valid = 1 - is_degenerate(scattered)
    if roughness > 0.0:
        scattered = safe_normalize(scattered)
    elif valid == 0:
        scattered = vec3(0.0, 0.0, 0.0)
    return scattered, valid


# =============================================================================
# Path Loop
# =============================================================================


@ti.func
def trace_path(
    origin: vec3,
    direction: vec3,
    primitives: ti.template(),
    num_primitives: ti.i32,
    max_bounces: ti.i32,
) -> vec3:
    """Trace one path through the scene and return its linear color.

    Args:
        origin: The ray origin.
        direction: The unit ray direction.
        primitives: The packed primitive table.
        num_primitives: Number of valid rows in the table.
        max_bounces: Maximum number of hits to follow.

    Returns:
        The accumulated linear RGB color; black if the first ray misses.
    """
    ray_origin = origin
    ray_direction = direction
    color = vec3(0.0, 0.0, 0.0)
    intensity = 1.0

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for _ in range(max_bounces):
        if active == 1:
            hit_record = intersect_scene(ray_origin, ray_direction, primitives, num_primitives)

            if hit_record.hit == 0:
                # Ray escaped
                active = 0
            else:
                k = hit_record.index
                distance = hit_record.t
                normal = hit_record.normal

                fresnel = fresnel_reflectance(
                    normal, ray_direction, primitive_reflectivity(primitives, k)
                )
                intensity *= fresnel / (1.0 + distance * distance)

                blend_factor = intensity * ti.min(distance, 1.0)
                color = blend_colors(color, primitive_color(primitives, k), blend_factor)

                scattered, valid = scatter_reflection(
                    ray_direction, normal, primitive_roughness(primitives, k)
                )

                if valid == 0 or intensity < MIN_INTENSITY:
                    active = 0
                else:
                    ray_origin = hit_record.point + RAY_EPSILON * scattered
                    ray_direction = scattered

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_pass_kernel(
    frame: ti.types.ndarray(dtype=ti.f32, ndim=3),
    width: ti.i32,
    height: ti.i32,
    primitives: ti.types.ndarray(dtype=ti.f32, ndim=2),
    num_primitives: ti.i32,
    camera_position: vec3,
    plane_width: ti.f32,
    plane_height: ti.f32,
    max_bounces: ti.i32,
    jitter: ti.i32,
):
    """Trace one sample for every pixel and store it in the frame buffer.

    Pixels are independent and each writes only its own slot, so Taichi runs
    the outer loop in parallel.
    """
    for j, i in ti.ndrange(height, width):
        direction, valid = get_ray_jittered(
            i, j, width, height, camera_position, plane_width, plane_height, jitter
        )

        color = vec3(0.0, 0.0, 0.0)
        if valid == 1:
            color = trace_path(
                camera_position, direction, primitives, num_primitives, max_bounces
            )

        color = sanitize_color(color)

        frame[j, i, 0] = color.x
        frame[j, i, 1] = color.y
        frame[j, i, 2] = color.z
        frame[j, i, 3] = 1.0


@ti.kernel
def _trace_ray_kernel(
    primitives: ti.types.ndarray(dtype=ti.f32, ndim=2),
    num_primitives: ti.i32,
    origin: vec3,
    direction: vec3,
    max_bounces: ti.i32,
    out: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Trace a single path and store its color in out."""
    color = sanitize_color(
        trace_path(origin, direction, primitives, num_primitives, max_bounces)
    )
    for c in ti.static(range(3)):
        out[c] = color[c]


@ti.kernel
def _scatter_kernel(
    direction: vec3,
    normal: vec3,
    roughness: ti.f32,
    out: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Scatter one direction and store (valid, direction) in out."""
    scattered, valid = scatter_reflection(direction, normal, roughness)
    out[0] = ti.cast(valid, ti.f32)
    for c in ti.static(range(3)):
        out[1 + c] = scattered[c]


# =============================================================================
# Public Rendering API
# =============================================================================


def render_frame(
    scene: Scene,
    camera: Camera,
    settings: RenderSettings,
    frame: npt.NDArray[np.float32] | None = None,
) -> npt.NDArray[np.float32]:
    """Render one sample pass into a frame buffer.

    Args:
        scene: The scene to render.
        camera: The camera configuration.
        settings: Resolution, bounce budget, and jitter.
        frame: Optional preallocated float32 buffer of shape
            (height, width, 4) to overwrite. A new one is allocated otherwise.

    Returns:
        The frame buffer holding one linear RGBA sample per pixel.

    Raises:
        ValueError: If the given frame buffer has the wrong shape or dtype.
    """
    expected_shape = (settings.height, settings.width, CHANNELS)
    if frame is None:
        frame = np.zeros(expected_shape, dtype=np.float32)
    elif frame.shape != expected_shape or frame.dtype != np.float32:
        raise ValueError(
            f"Frame buffer must be float32 with shape {expected_shape}, "
            f"got {frame.dtype} {frame.shape}"
        )

    _render_pass_kernel(
        frame,
        settings.width,
        settings.height,
        scene.pack(),
        len(scene),
        vec3(*camera.position),
        camera.width,
        camera.height,
        settings.max_bounces,
        int(settings.jitter),
    )
    return frame


def trace_ray(
    scene: Scene,
    origin: Vector3,
    direction: Vector3,
    max_bounces: int = MAX_BOUNCES,
) -> Color:
    """Trace a single path and return its linear color.

    This is a Python-callable function for testing and debugging. For
    production rendering, use render_frame() which processes all pixels in
    parallel.

    Args:
        scene: The scene to trace against.
        origin: The ray origin.
        direction: The ray direction (should be unit length).
        max_bounces: Maximum number of hits to follow.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    out = np.zeros(3, dtype=np.float32)
    _trace_ray_kernel(
        scene.pack(),
        len(scene),
        vec3(*origin),
        vec3(*direction),
        max_bounces,
        out,
    )
    return (float(out[0]), float(out[1]), float(out[2]))


def reflect_with_roughness(
    direction: Vector3,
    normal: Vector3,
    roughness: float,
) -> Vector3 | None:
    """Reflect a direction about a normal with roughness perturbation.

    Python-callable counterpart of scatter_reflection().

    Returns:
        The scattered direction, or None if it degenerated to zero length.
    """
    out = np.zeros(4, dtype=np.float32)
    _scatter_kernel(vec3(*direction), vec3(*normal), roughness, out)
    if out[0] == 0.0:
        return None
    return (float(out[1]), float(out[2]), float(out[3]))
