"""Showcase scene: five reflective spheres in front of a fixed camera.

Two smooth mirrors (a large red one and a small yellow one) sit between three
rough spheres, so a single render shows both sharp and blurred reflections.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from mirrorball.core.progressive import ProgressiveRenderer
    >>> from mirrorball.core.settings import RenderSettings
    >>> from mirrorball.scene.showcase import create_showcase_scene
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> renderer = ProgressiveRenderer(scene, camera, RenderSettings(500, 500, samples=50))
    >>> renderer.render()
"""

from mirrorball.scene.model import Camera, Scene, SphereObject

# =============================================================================
# Showcase Parameters
# =============================================================================

# Default output resolution and sample budget
SHOWCASE_WIDTH = 1000
SHOWCASE_HEIGHT = 1000
SHOWCASE_SAMPLES = 200

# Camera position and view-plane size
CAMERA_POSITION = (0.0, 0.0, 5.0)
VIEW_PLANE_SIZE = 10.0

RED = (1.0, 0.0, 0.0)
YELLOW = (1.0, 1.0, 0.0)
BLUE = (0.0, 0.0, 1.0)
BLACK = (0.0, 0.0, 0.0)

# Roughness of the blurred spheres
ROUGH = 0.9


def create_showcase_scene() -> tuple[Scene, Camera]:
    """Create the five-sphere showcase scene and its camera.

    Returns:
        Tuple of (scene, camera). Render it at SHOWCASE_WIDTH x SHOWCASE_HEIGHT
        with SHOWCASE_SAMPLES samples for the reference look.
    """
    spheres = (
        # Large smooth red mirror on the left
        SphereObject(center=(-3.0, 0.0, 0.0), radius=3.0, color=RED, roughness=0.0, reflectivity=1.0),
        # Small smooth yellow mirror in front
        SphereObject(center=(0.0, -2.5, 3.0), radius=1.0, color=YELLOW, roughness=0.0, reflectivity=1.0),
        # Large rough black sphere on the right
        SphereObject(center=(3.1, 0.0, 2.0), radius=3.0, color=BLACK, roughness=ROUGH, reflectivity=1.0),
        # Rough black sphere at the top
        SphereObject(center=(0.0, 5.0, 0.1), radius=2.0, color=BLACK, roughness=ROUGH, reflectivity=1.0),
        # Rough blue sphere at the top right
        SphereObject(center=(2.0, 5.0, 4.0), radius=2.0, color=BLUE, roughness=ROUGH, reflectivity=1.0),
    )

    camera = Camera(position=CAMERA_POSITION, width=VIEW_PLANE_SIZE, height=VIEW_PLANE_SIZE)
    return Scene(objects=spheres), camera
