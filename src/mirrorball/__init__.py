"""Progressive Taichi ray tracer for scenes of reflective spheres.

This package renders a fixed scene of spheres with stochastic recursive
reflection, accumulating one sample per pixel per pass and refining the image
progressively:

Subpackages:
    core: Vector utilities, the bounce integrator, accumulation, and the pass driver
    geometry: Sphere primitive and analytic ray intersection
    scene: Immutable scene model, nearest-hit queries, and the showcase scene
    camera: Fixed view-plane ray generation
    preview: Tone mapping, gamma encoding, and PNG export

Taichi must be initialized by the host (``ti.init``) before rendering.
"""

__version__ = "0.1.0"
