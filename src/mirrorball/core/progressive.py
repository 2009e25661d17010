"""Progressive renderer for iterative sample accumulation.

This module drives a render as a sequence of full-frame sample passes:
- Each pass traces one sample per pixel into a frame buffer
- The frame is added into the accumulation buffer
- The running average is encoded as RGBA8 and handed to the host

The ProgressiveRenderer owns the render target state for one scene, camera,
and settings triple. Hosts either iterate render_progressive(), which yields
after every pass and may be abandoned at any point, or call render() with an
optional display sink and progress callback.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from mirrorball.core.progressive import ProgressiveRenderer
    >>> from mirrorball.core.settings import RenderSettings
    >>> from mirrorball.scene.showcase import create_showcase_scene
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> renderer = ProgressiveRenderer(scene, camera, RenderSettings(256, 256, samples=32))
    >>> for result in renderer.render_progressive():
    ...     print(f"{result.sample_index}/{result.sample_budget}")
    >>> image = renderer.get_image_uint8()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt

from mirrorball.core.accumulation import (
    accumulate_frame,
    compute_average,
    create_color_buffer,
    create_frame_buffer,
)
from mirrorball.core.integrator import render_frame
from mirrorball.core.settings import RenderSettings
from mirrorball.preview.display import ToneMapMethod, encode_rgba8
from mirrorball.scene.model import Camera, Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (sample_index, sample_budget), both counted from 1
ProgressCallback = Callable[[int, int], None]

# Type alias for display sink
# Sink receives an RGBA8 array of shape (height, width, 4)
DisplaySink = Callable[[npt.NDArray[np.uint8]], None]


@dataclass(frozen=True)
class PassResult:
    """Outcome of one completed sample pass.

    Attributes:
        sample_index: Number of passes accumulated so far (1-based).
        sample_budget: Total number of passes requested.
        pixels: The current estimate encoded as RGBA8, shape (height, width, 4).
    """

    sample_index: int
    sample_budget: int
    pixels: npt.NDArray[np.uint8]


class ProgressiveRenderer:
    """A progressive renderer that accumulates sample passes over time.

    The renderer keeps its own accumulation buffer, so several renderers can
    coexist. Scene, camera, and settings are immutable inputs fixed at
    construction.

    Attributes:
        scene: The scene being rendered.
        camera: The camera configuration.
        settings: Resolution, sample budget, and integrator limits.
    """

    def __init__(self, scene: Scene, camera: Camera, settings: RenderSettings) -> None:
        """Initialize the progressive renderer.

        Args:
            scene: The scene to render.
            camera: The camera configuration.
            settings: Resolution, sample budget, and integrator limits.

        Raises:
            ValueError: If an argument has the wrong type.
        """
        if not isinstance(scene, Scene):
            raise ValueError(f"Expected a Scene, got {type(scene).__name__}")
        if not isinstance(camera, Camera):
            raise ValueError(f"Expected a Camera, got {type(camera).__name__}")
        if not isinstance(settings, RenderSettings):
            raise ValueError(f"Expected RenderSettings, got {type(settings).__name__}")

        self.scene = scene
        self.camera = camera
        self.settings = settings

        self._buffer = create_color_buffer(settings.width, settings.height)
        self._frame = create_frame_buffer(settings.width, settings.height)
        self._sample_count = 0
        self._cancelled = False

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    @property
    def sample_count(self) -> int:
        """Get the number of passes accumulated so far."""
        return self._sample_count

    @property
    def sample_budget(self) -> int:
        """Get the total number of passes requested."""
        return self.settings.samples

    @property
    def is_complete(self) -> bool:
        """Whether the sample budget has been reached."""
        return self._sample_count >= self.settings.samples

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the accumulation buffer and sample count, and withdraws any
        pending cancellation.
        """
        self._buffer.fill(0.0)
        self._sample_count = 0
        self._cancelled = False

    def cancel(self) -> None:
        """Request that the running render stop after the current pass."""
        self._cancelled = True

    def render_pass(self) -> int:
        """Render one sample pass and add it to the accumulation buffer.

        Passes beyond the sample budget are allowed; the budget only bounds
        render_progressive() and render().

        Returns:
            The new sample count.
        """
        render_frame(self.scene, self.camera, self.settings, frame=self._frame)
        accumulate_frame(self._buffer, self._frame)
        self._sample_count += 1
        logger.debug("Pass %d/%d done", self._sample_count, self.settings.samples)
        return self._sample_count

    def render_progressive(
        self,
        resume: bool = False,
    ) -> Generator[PassResult, None, None]:
        """Render passes until the budget is reached, yielding after each.

        The generator is lazy: no pass runs until the first item is requested.
        The host stops the render by calling cancel(), or by simply not
        advancing or closing the generator; the accumulated estimate stays
        available either way.

        Args:
            resume: Continue from the passes already accumulated instead of
                starting a fresh render.

        Yields:
            A PassResult after every completed pass.

        Example:
            >>> for result in renderer.render_progressive():
            ...     show(result.pixels)
            ...     if result.sample_index == 10:
            ...         renderer.cancel()
        """
        if resume:
            self._cancelled = False
        else:
            self.reset()

        budget = self.settings.samples
        logger.info(
            "Rendering %dx%d, %d samples, %d primitives",
            self.width,
            self.height,
            budget,
            len(self.scene),
        )
        start = time.perf_counter()

        while self._sample_count < budget and not self._cancelled:
            self.render_pass()
            yield PassResult(self._sample_count, budget, self.get_image_uint8())

        elapsed = time.perf_counter() - start
        if self._cancelled:
            logger.info("Render cancelled at %d/%d samples", self._sample_count, budget)
        else:
            logger.info("Render finished: %d samples in %.2fs", self._sample_count, elapsed)

    def render(
        self,
        sink: DisplaySink | None = None,
        callback: ProgressCallback | None = None,
        resume: bool = False,
    ) -> npt.NDArray[np.uint8] | None:
        """Render the full sample budget with optional sink and progress callback.

        After every pass the current estimate goes to the sink and the pass
        index to the callback. When the loop ends the sink receives the final
        image once more. Either hook may call cancel() to stop early.

        Args:
            sink: Optional callable receiving each RGBA8 image.
            callback: Optional callable receiving (sample_index, sample_budget).
            resume: Continue from the passes already accumulated.

        Returns:
            The final RGBA8 image, or None if the render was cancelled before
            any pass completed.

        Example:
            >>> def progress(current, total):
            ...     print(f"Progress: {current}/{total} samples")
            >>> renderer.render(callback=progress)
        """
        for result in self.render_progressive(resume=resume):
            if sink is not None:
                sink(result.pixels)
            if callback is not None:
                callback(result.sample_index, result.sample_budget)

        if self._sample_count == 0:
            return None

        image = self.get_image_uint8()
        if sink is not None:
            sink(image)
        return image

    def _check_has_samples(self) -> None:
        """Raise RuntimeError if no pass has been accumulated."""
        if self._sample_count == 0:
            raise RuntimeError("No samples rendered yet. Call render() or render_pass() first.")

    def get_average(self) -> npt.NDArray[np.float32]:
        """Get the current linear estimate.

        Returns:
            A new float32 array of shape (height, width, 4).

        Raises:
            RuntimeError: If no pass has been rendered.
        """
        self._check_has_samples()
        return compute_average(self._buffer, self._sample_count)

    def get_image_uint8(
        self,
        tone_map: ToneMapMethod = "reinhard",
        gamma: float | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Get the current estimate as an 8-bit RGBA array.

        Args:
            tone_map: Tone mapping method ("none" or "reinhard").
            gamma: Gamma correction value. Defaults to the settings' gamma.

        Returns:
            NumPy array of shape (height, width, 4) with dtype uint8.

        Raises:
            RuntimeError: If no pass has been rendered.
        """
        if gamma is None:
            gamma = self.settings.gamma
        return encode_rgba8(self.get_average(), tone_map=tone_map, gamma=gamma)

    def save_image(self, filepath: str | Path) -> None:
        """Save the current estimate to a PNG file.

        Args:
            filepath: Path to save the image (e.g., "output.png").

        Raises:
            RuntimeError: If no pass has been rendered.
        """
        from mirrorball.preview.export import save_png

        save_png(self, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}/{self.sample_budget})"
        )
