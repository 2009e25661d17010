"""Image export utilities for rendered images.

This module writes encoded renders to disk and provides a PNG sink that the
progressive renderer can hand every intermediate image to.

Supported formats:
    - PNG (8-bit RGBA via Pillow)

Example:
    >>> from mirrorball.preview.export import PngSink, save_png
    >>> from mirrorball.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(scene, camera, settings)
    >>> renderer.render(sink=PngSink("preview.png"))
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from mirrorball.core.settings import DEFAULT_GAMMA
from mirrorball.preview.display import ToneMapMethod, encode_rgba8

if TYPE_CHECKING:
    from mirrorball.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)


def save_png(
    renderer: ProgressiveRenderer,
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "reinhard",
    gamma: float | None = None,
) -> None:
    """Save the renderer's current estimate as an RGBA PNG file.

    Args:
        renderer: The ProgressiveRenderer instance to save.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none" or "reinhard").
        gamma: Gamma correction value. Defaults to the renderer's settings.

    Raises:
        RuntimeError: If the renderer has not completed any pass.
    """
    image_uint8 = renderer.get_image_uint8(tone_map=tone_map, gamma=gamma)
    save_png_from_array(image_uint8, filepath)


def save_png_from_array(
    image: npt.NDArray[np.generic],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "reinhard",
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save an RGBA array as a PNG file.

    A uint8 array is written as is. A floating-point array is treated as an
    averaged linear buffer and encoded with encode_rgba8() first.

    Args:
        image: Array of shape (H, W, 4), either uint8 or linear float.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method for float input.
        gamma: Gamma correction value for float input.

    Raises:
        ValueError: If the array is not (H, W, 4).
    """
    if image.ndim != 3 or image.shape[2] != 4:
        raise ValueError(f"Expected an (H, W, 4) image, got shape {image.shape}")

    if image.dtype != np.uint8:
        image = encode_rgba8(image.astype(np.float32), tone_map=tone_map, gamma=gamma)

    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(filepath)


class PngSink:
    """Display sink that writes every received image to one PNG file.

    Each call overwrites the file, so it always holds the latest estimate.

    Args:
        filepath: Output file path (should end in .png).
    """

    def __init__(self, filepath: str | Path) -> None:
        self.filepath = Path(filepath)
        self.writes = 0

    def __call__(self, image: npt.NDArray[np.uint8]) -> None:
        save_png_from_array(image, self.filepath)
        self.writes += 1
        logger.debug("Wrote %s (update %d)", self.filepath, self.writes)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
