"""Accumulation buffer: running per-pixel sums of sample passes.

The accumulation buffer is a float64 array of shape (height, width, 4) owned
by the render driver. Each pass adds its float32 frame buffer into it in
place; the displayable estimate is the sum divided by the number of passes,
computed into a fresh float32 array so the running sum is never disturbed.

Summing float32 samples in float64 is exact for any realistic pass count, so
N identical passes average back to the very same frame.

Example:
    >>> buffer = create_color_buffer(4, 3)
    >>> frame = np.ones((3, 4, 4), dtype=np.float32)
    >>> accumulate_frame(buffer, frame)
    >>> accumulate_frame(buffer, frame)
    >>> compute_average(buffer, 2)[0, 0]
    array([1., 1., 1., 1.], dtype=float32)
"""

import numpy as np
import numpy.typing as npt

from mirrorball.core.settings import CHANNELS


def create_color_buffer(width: int, height: int) -> npt.NDArray[np.float64]:
    """Allocate a zeroed accumulation buffer.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        float64 array of shape (height, width, 4).

    Raises:
        ValueError: If either dimension is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Buffer dimensions must be positive, got {width}x{height}")
    return np.zeros((height, width, CHANNELS), dtype=np.float64)


def create_frame_buffer(width: int, height: int) -> npt.NDArray[np.float32]:
    """Allocate a zeroed float32 frame buffer for one sample pass."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Buffer dimensions must be positive, got {width}x{height}")
    return np.zeros((height, width, CHANNELS), dtype=np.float32)


def accumulate_frame(
    buffer: npt.NDArray[np.float64],
    frame: npt.NDArray[np.float32],
) -> None:
    """Add a frame buffer into the accumulation buffer in place.

    Args:
        buffer: The float64 accumulation buffer, modified in place.
        frame: One float32 sample pass of the same shape.

    Raises:
        ValueError: If the shapes differ or the dtypes are not float64 and float32.
    """
    if buffer.shape != frame.shape:
        raise ValueError(
            f"Frame shape {frame.shape} does not match buffer shape {buffer.shape}"
        )
    if buffer.ndim != 3 or buffer.dtype != np.float64 or frame.dtype != np.float32:
        raise ValueError(
            f"Expected a 3D float64 buffer and float32 frame, "
            f"got {buffer.dtype} buffer and {frame.dtype} frame"
        )
    np.add(buffer, frame, out=buffer)


def compute_average(
    buffer: npt.NDArray[np.float64],
    sample_count: int,
) -> npt.NDArray[np.float32]:
    """Divide the running sum by the number of accumulated passes.

    Args:
        buffer: The accumulation buffer. It is not modified.
        sample_count: Number of passes accumulated so far.

    Returns:
        A new float32 array holding the per-pixel mean.

    Raises:
        ValueError: If sample_count is less than 1.
    """
    if sample_count < 1:
        raise ValueError(f"Sample count must be at least 1, got {sample_count}")
    return (buffer / float(sample_count)).astype(np.float32)
