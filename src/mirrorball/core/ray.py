"""Vector utilities for the Taichi ray tracer.

This module provides the vector helpers used by the camera, intersection
engine, and integrator. All functions are Taichi functions and must be
called from within kernels.

Python-side code describes points, directions, and colors as plain float
tuples; the ``Vector3`` and ``Color`` aliases name them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> @ti.kernel
    ... def mirror() -> ti.math.vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
    >>> mirror()  # (1, 1, 0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Python-side value types
Vector3 = tuple[float, float, float]
Color = tuple[float, float, float]

# Squared length below which a vector has no usable direction
DEGENERATE_LENGTH_SQUARED = 1e-16


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than a length when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def is_degenerate(v: vec3) -> ti.i32:
    """Check whether a vector is too short to define a direction.

    Returns:
        1 if the squared length is below DEGENERATE_LENGTH_SQUARED, 0 otherwise.
    """
    result = 0
    if length_squared(v) < DEGENERATE_LENGTH_SQUARED:
        result = 1
    return result


@ti.func
def safe_normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike tm.normalize, a degenerate input yields the zero vector instead of
    NaN components. Callers test the input with is_degenerate() first when
    they need to know.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or zero.
    """
    result = vec3(0.0, 0.0, 0.0)
    if is_degenerate(v) == 0:
        result = v / ti.sqrt(length_squared(v))
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror-reflect an incident vector about a normal.

    Computes incident - 2 (incident . normal) normal. The normal should be
    unit length; for a unit incident vector the result is unit length too.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit ball.

    Uses rejection sampling: candidates are drawn uniformly from [-1, 1]^3
    until one has squared length < 1.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
            )
            if length_squared(p) < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p
