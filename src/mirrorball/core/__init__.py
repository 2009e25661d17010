"""Core rendering module.

This module contains the building blocks of the progressive renderer:

Components:
    ray: Vector utilities and unit-ball sampling
    color: Color blending, Fresnel-like reflectance, and sample sanitizing
    settings: RenderSettings configuration
    integrator: The bounce loop and the per-pixel render-pass kernel
    accumulation: Accumulation buffer creation, summing, and averaging
    progressive: The ProgressiveRenderer pass driver

The integrator traces stochastic mirror reflections: every hit pulls the path
color toward the sphere's color, attenuates the carried intensity, and
reflects the ray with a roughness-dependent random perturbation.

Path tracing runs in Taichi kernels; accumulation and averaging are plain
NumPy array arithmetic.
"""

from .color import DEFAULT_REFLECTIVITY, blend_colors, fresnel_reflectance, sanitize_color
from .ray import (
    Color,
    Vector3,
    is_degenerate,
    length_squared,
    random_in_unit_sphere,
    reflect,
    safe_normalize,
    vec3,
)
from .settings import CHANNELS, DEFAULT_GAMMA, DEFAULT_SAMPLES, MAX_BOUNCES, RenderSettings
from .accumulation import (
    accumulate_frame,
    compute_average,
    create_color_buffer,
    create_frame_buffer,
)

# Note: integrator and progressive are NOT imported here to avoid
# circular imports (scene.model depends on core.color).
#
# For progressive rendering, use:
#   from mirrorball.core.progressive import ProgressiveRenderer

__all__ = [
    "vec3",
    "Vector3",
    "Color",
    "length_squared",
    "is_degenerate",
    "safe_normalize",
    "reflect",
    "random_in_unit_sphere",
    "DEFAULT_REFLECTIVITY",
    "blend_colors",
    "fresnel_reflectance",
    "sanitize_color",
    "RenderSettings",
    "MAX_BOUNCES",
    "DEFAULT_SAMPLES",
    "DEFAULT_GAMMA",
    "CHANNELS",
    "create_color_buffer",
    "create_frame_buffer",
    "accumulate_frame",
    "compute_average",
]
