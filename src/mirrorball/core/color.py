"""Linear RGB color helpers used by the bounce integrator.

Colors are linear radiance stored in vec3 (r, g, b). They are never clamped
inside the integrator; compression into display range happens in
``mirrorball.preview.display``.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Reflectivity used when a sphere leaves it unset
DEFAULT_REFLECTIVITY = 0.8


@ti.func
def blend_colors(base: vec3, target: vec3, factor: ti.f32) -> vec3:
    """Linearly interpolate from base toward target.

    Args:
        base: The color accumulated so far.
        target: The color to pull toward.
        factor: Interpolation weight; 0 keeps base, 1 yields target.

    Returns:
        base + factor * (target - base).
    """
    return base + factor * (target - base)


@ti.func
def fresnel_reflectance(normal: vec3, direction: vec3, base_reflectivity: ti.f32) -> ti.f32:
    """Schlick-style reflectance that rises toward 1 at grazing angles.

    Computes R + (1 - R) * (1 - |normal . direction|)^5 where R is the base
    reflectivity of the surface.

    Args:
        normal: The unit surface normal.
        direction: The unit incoming ray direction.
        base_reflectivity: Reflectance at normal incidence, in [0, 1].

    Returns:
        The angle-dependent reflectance in [R, 1].
    """
    cos_theta = ti.min(ti.abs(tm.dot(normal, direction)), 1.0)
    return base_reflectivity + (1.0 - base_reflectivity) * (1.0 - cos_theta) ** 5


@ti.func
def sanitize_color(color: vec3) -> vec3:
    """Clamp negative components and replace NaN/Inf with zero."""
    result = tm.max(color, vec3(0.0, 0.0, 0.0))
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result
