"""Scene-level nearest-hit queries over the packed primitive table.

The scene arrives in kernels as a float32 ndarray (see
``mirrorball.scene.model.Scene.pack``) together with the number of rows to
read. ``intersect_scene`` scans every primitive, dispatches on the kind tag,
and keeps the hit with the smallest non-negative distance. On exact ties the
earlier primitive wins.

Adding a primitive kind means adding a tag, a hit function returning a
HitRecord, and a branch in ``_hit_primitive``; the integrator only consumes
SceneHitRecord and is untouched.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrorball.scene.intersection import intersect
    >>> from mirrorball.scene.model import Scene, SphereObject
    >>> scene = Scene((SphereObject((0, 0, 0), 1.0, (1, 0, 0)),))
    >>> hit = intersect(scene, (0, 0, 5), (0, 0, -1))
    >>> round(hit.distance, 4)
    4.0
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from mirrorball.core.ray import Vector3
from mirrorball.geometry.sphere import HitRecord, hit_sphere, make_miss_record
from mirrorball.scene.model import (
    COL_CENTER_X,
    COL_CENTER_Y,
    COL_CENTER_Z,
    COL_COLOR_B,
    COL_COLOR_G,
    COL_COLOR_R,
    COL_KIND,
    COL_RADIUS,
    COL_REFLECTIVITY,
    COL_ROUGHNESS,
    KIND_SPHERE,
    Scene,
)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance reported by a miss; larger than any hit
T_INFINITY = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Distance to the nearest hit. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit outward normal at the point. Only valid if hit == 1.
        index: Row of the hit primitive in the table, or -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    index: ti.i32


# =============================================================================
# Primitive Table Accessors
# =============================================================================


@ti.func
def primitive_center(primitives: ti.template(), k: ti.i32) -> vec3:
    """Center of primitive k."""
    return vec3(
        primitives[k, COL_CENTER_X],
        primitives[k, COL_CENTER_Y],
        primitives[k, COL_CENTER_Z],
    )


@ti.func
def primitive_color(primitives: ti.template(), k: ti.i32) -> vec3:
    """Linear RGB color of primitive k."""
    return vec3(
        primitives[k, COL_COLOR_R],
        primitives[k, COL_COLOR_G],
        primitives[k, COL_COLOR_B],
    )


@ti.func
def primitive_roughness(primitives: ti.template(), k: ti.i32) -> ti.f32:
    """Roughness of primitive k."""
    return primitives[k, COL_ROUGHNESS]


@ti.func
def primitive_reflectivity(primitives: ti.template(), k: ti.i32) -> ti.f32:
    """Base reflectivity of primitive k (default already applied)."""
    return primitives[k, COL_REFLECTIVITY]


# =============================================================================
# Nearest-Hit Query
# =============================================================================


@ti.func
def _hit_primitive(
    primitives: ti.template(), k: ti.i32, ray_origin: vec3, ray_direction: vec3
) -> HitRecord:
    """Dispatch a ray test to the hit function for primitive k's kind."""
    rec = make_miss_record()
    kind = ti.cast(primitives[k, COL_KIND], ti.i32)
    if kind == KIND_SPHERE:
        rec = hit_sphere(
            ray_origin,
            ray_direction,
            primitive_center(primitives, k),
            primitives[k, COL_RADIUS],
        )
    return rec


@ti.func
def _make_scene_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=T_INFINITY,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        index=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    primitives: ti.template(),
    num_primitives: ti.i32,
) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        primitives: The packed primitive table (float32 ndarray).
        num_primitives: Number of valid rows in the table.

    Returns:
        The nearest SceneHitRecord, or a miss record if nothing was hit.
    """
    result = _make_scene_miss_record()

    for k in range(num_primitives):
        rec = _hit_primitive(primitives, k, ray_origin, ray_direction)
        # Strict comparison keeps the first primitive on exact ties
        if rec.hit == 1 and rec.t < result.t:
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                index=k,
            )

    return result


# =============================================================================
# Python-Callable Query
# =============================================================================


@dataclass(frozen=True)
class Intersection:
    """Nearest hit of a ray against a scene, as seen from Python.

    Attributes:
        point: The intersection point.
        distance: Distance from the ray origin along the unit direction.
        normal: Unit outward normal at the point.
        index: Index of the hit object in Scene.objects.
    """

    point: Vector3
    distance: float
    normal: Vector3
    index: int


@ti.kernel
def _intersect_kernel(
    primitives: ti.types.ndarray(dtype=ti.f32, ndim=2),
    num_primitives: ti.i32,
    ray_origin: vec3,
    ray_direction: vec3,
    out: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Run intersect_scene for a single ray and store the record in out."""
    rec = intersect_scene(ray_origin, ray_direction, primitives, num_primitives)
    out[0] = ti.cast(rec.hit, ti.f32)
    out[1] = rec.t
    for c in ti.static(range(3)):
        out[2 + c] = rec.point[c]
        out[5 + c] = rec.normal[c]
    out[8] = ti.cast(rec.index, ti.f32)


def intersect(scene: Scene, origin: Vector3, direction: Vector3) -> Intersection | None:
    """Find the nearest intersection of one ray with a scene.

    This is a Python-callable function for testing and debugging. Rendering
    uses intersect_scene inside the pass kernel.

    Args:
        scene: The scene to query.
        origin: The ray origin.
        direction: The ray direction (should be unit length).

    Returns:
        The nearest Intersection, or None if the ray misses every object.
    """
    out = np.zeros(9, dtype=np.float32)
    _intersect_kernel(
        scene.pack(),
        len(scene),
        vec3(*origin),
        vec3(*direction),
        out,
    )
    if out[0] == 0.0:
        return None
    return Intersection(
        point=(float(out[2]), float(out[3]), float(out[4])),
        distance=float(out[1]),
        normal=(float(out[5]), float(out[6]), float(out[7])),
        index=int(out[8]),
    )
