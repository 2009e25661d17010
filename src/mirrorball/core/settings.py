"""Render settings: resolution, sample budget, and integrator limits."""

from __future__ import annotations

import math
from dataclasses import dataclass

# Default bounce budget of the integrator
MAX_BOUNCES = 5

# Default sample budget of a progressive render
DEFAULT_SAMPLES = 200

# Display gamma for sRGB-like output
DEFAULT_GAMMA = 2.2

# Channels per buffer pixel (R, G, B, A)
CHANNELS = 4


@dataclass(frozen=True)
class RenderSettings:
    """Configuration for one progressive render.

    Attributes:
        width: Image width in pixels (positive).
        height: Image height in pixels (positive).
        samples: Sample budget, the number of full-frame passes (at least 1).
        max_bounces: Maximum reflections traced per path (at least 1).
        jitter: Offset each sample randomly within its pixel. Off by default,
            which traces every sample through the pixel corner.
        gamma: Display gamma used when encoding 8-bit output (positive).

    Example:
        >>> settings = RenderSettings(width=320, height=240, samples=16)
        >>> settings.max_bounces
        5
    """

    width: int
    height: int
    samples: int = DEFAULT_SAMPLES
    max_bounces: int = MAX_BOUNCES
    jitter: bool = False
    gamma: float = DEFAULT_GAMMA

    def __post_init__(self) -> None:
        """Validate the settings.

        Raises:
            ValueError: If the resolution is not positive, the sample budget or
                bounce budget is below 1, or gamma is not positive.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Resolution must be positive, got {self.width}x{self.height}"
            )
        if self.samples < 1:
            raise ValueError(f"Sample budget must be at least 1, got {self.samples}")
        if self.max_bounces < 1:
            raise ValueError(f"Bounce budget must be at least 1, got {self.max_bounces}")
        if not math.isfinite(self.gamma) or self.gamma <= 0.0:
            raise ValueError(f"Gamma must be positive, got {self.gamma}")
