"""Sphere primitive with analytic ray-sphere intersection.

The intersection solves the half-b quadratic

    a*t^2 + 2*b*t + c = 0

with a = |d|^2, b = d . (o - center), c = |o - center|^2 - radius^2. The
nearer root is taken when it lies in front of the origin; when the origin is
inside the sphere the exit root is taken instead. Rays whose both roots lie
behind the origin miss.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrorball.geometry.sphere import hit_sphere, vec3
    >>> # Within a kernel:
    >>> # rec = hit_sphere(vec3(0, 0, 5), vec3(0, 0, -1), vec3(0, 0, 0), 1.0)
    >>> # rec.t == 4.0
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The distance along the unit ray direction. Only valid if hit == 1.
        point: The 3D intersection point. Only valid if hit == 1.
        normal: Unit outward normal at the intersection point (points away
            from the sphere center even when the ray starts inside).
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def sphere_normal(point: vec3, center: vec3, radius: ti.f32) -> vec3:
    """Outward unit normal of a sphere at a surface point."""
    return (point - center) / radius


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized in practice;
            a zero vector never hits).
        center: The center of the sphere.
        radius: The radius of the sphere (positive).

    Returns:
        A HitRecord for the nearest intersection with t >= 0. Check the hit
        field to determine whether an intersection occurred.
    """
    oc = ray_origin - center

    a = tm.dot(ray_direction, ray_direction)
    b = tm.dot(ray_direction, oc)  # Half of the traditional linear coefficient
    c = tm.dot(oc, oc) - radius * radius
    delta = b * b - a * c

    result = make_miss_record()

    if a > 0.0 and delta >= 0.0:
        sqrt_delta = ti.sqrt(delta)
        t_min = (-b - sqrt_delta) / a
        t_max = (-b + sqrt_delta) / a

        # Both roots behind the origin means the sphere is behind the ray
        if t_max >= 0.0:
            t = t_max
            if t_min >= 0.0:
                t = t_min
            point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=sphere_normal(point, center, radius),
            )

    return result
