"""Preview module for display encoding and output.

Components:
    display: Tone mapping, gamma encoding, and RGBA8 quantization
    export: PNG export via Pillow and a PNG display sink

The renderer hands an RGBA8 image to a caller-supplied sink after every
pass; this package provides the encoding and a file-backed sink. Presenting
images on screen is left to the host.

Example:
    >>> from mirrorball.preview import PngSink, save_png
    >>> renderer.render(sink=PngSink("progress.png"))
    >>> save_png(renderer, "final.png")
"""

from mirrorball.preview.display import (
    ToneMapMethod,
    apply_gamma,
    encode_rgba8,
    process_image_for_display,
    tone_map_reinhard,
)
from mirrorball.preview.export import (
    PngSink,
    compute_rmse,
    save_png,
    save_png_from_array,
)

__all__ = [
    # Display functions
    "tone_map_reinhard",
    "apply_gamma",
    "process_image_for_display",
    "encode_rgba8",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "save_png_from_array",
    "PngSink",
    "compute_rmse",
]
