"""Tone mapping and gamma encoding for rendered images.

Averaged linear radiance is unbounded; before it can be shown or stored it is
compressed into [0, 1] by a tone mapping operator, gamma encoded for display,
and quantized to 8 bits. The order is fixed: tone map first, gamma second.

Features:
    - Reinhard tone mapping
    - Gamma correction (sRGB 2.2)
    - RGBA8 encoding of averaged accumulation buffers

Example:
    >>> import numpy as np
    >>> from mirrorball.preview.display import encode_rgba8
    >>> averaged = np.array([[[1.0, 0.0, 0.0, 1.0]]], dtype=np.float32)
    >>> encode_rgba8(averaged)[0, 0]
    array([186,   0,   0, 255], dtype=uint8)
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

from mirrorball.core.settings import DEFAULT_GAMMA

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard"]


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Compress linear radiance into [0, 1) with c / (1 + c).

    Negative input is treated as black. The curve is strictly increasing on
    non-negative values, so brighter pixels never come out darker.
    """
    radiance = np.maximum(image, 0.0)
    return (radiance / (1.0 + radiance)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding for display: v^(1/gamma).

    Args:
        image: Values in [0, 1]; anything outside is clamped first.
        gamma: Gamma value (default 2.2 for sRGB).

    Returns:
        Gamma encoded values in [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)

    if gamma == 1.0:
        return image.astype(np.float32)

    result = np.power(image, 1.0 / gamma)
    return result.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "reinhard",
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float32]:
    """Turn linear RGB into display values in [0, 1].

    Args:
        image: Linear RGB values, typically of shape (H, W, 3).
        tone_map: "reinhard" to compress highlights, or "none" to only clamp.
        gamma: Display gamma applied after tone mapping.

    Returns:
        A new float32 array in [0, 1].

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    if tone_map == "reinhard":
        mapped = tone_map_reinhard(image)
    elif tone_map == "none":
        mapped = image
    else:
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    # apply_gamma clamps to [0, 1] and always returns a fresh array
    return apply_gamma(mapped, gamma)


def encode_rgba8(
    averaged: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "reinhard",
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.uint8]:
    """Encode an averaged RGBA buffer as displayable 8-bit RGBA.

    RGB goes through process_image_for_display(); alpha is only clamped to
    [0, 1]. Each channel is then scaled by 255 and rounded to nearest.

    Args:
        averaged: Averaged linear buffer of shape (H, W, 4).
        tone_map: Tone mapping method for the RGB channels.
        gamma: Gamma correction value.

    Returns:
        uint8 array of shape (H, W, 4).

    Raises:
        ValueError: If the buffer does not have four channels.
    """
    if averaged.ndim != 3 or averaged.shape[2] != 4:
        raise ValueError(f"Expected an (H, W, 4) buffer, got shape {averaged.shape}")

    encoded = np.empty(averaged.shape, dtype=np.float32)
    encoded[..., :3] = process_image_for_display(
        averaged[..., :3], tone_map=tone_map, gamma=gamma
    )
    encoded[..., 3] = np.clip(averaged[..., 3], 0.0, 1.0)

    return np.round(encoded * 255.0).astype(np.uint8)
