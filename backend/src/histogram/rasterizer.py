"""Rasterizer — turns histogram counts into 20 vertical bars of RGBA pixels.

Logical y=0 is the bottom row of the image, so bars grow upward. Inside a
column, pixels are ranked bottom-up and left-to-right; a pixel is part of the
bar when its rank is within the face's count.

Pure over the state: the same state and buffer size always produce the same
bytes.
"""

import numpy as np

from histogram.palette import BACKGROUND, LOSE_COLOR, WIN_COLOR


def _as_pixels(buffer, width: int, height: int) -> np.ndarray:
    """View ``buffer`` as a writable (H, W, 4) uint8 array without copying."""
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise ValueError(f"Frame buffer must be uint8, got {buffer.dtype}")
        if not buffer.flags.c_contiguous:
            raise ValueError("Frame buffer must be C-contiguous")
        flat = buffer.reshape(-1)
    else:
        flat = np.frombuffer(buffer, dtype=np.uint8)

    if not flat.flags.writeable:
        raise ValueError("Frame buffer is read-only")

    expected = 4 * width * height
    if flat.size != expected:
        raise ValueError(
            f"Frame buffer has {flat.size} bytes, expected {expected} "
            f"for {width}x{height} RGBA"
        )
    return flat.reshape(height, width, 4)


def draw(state, buffer) -> np.ndarray:
    """
    Render the histogram into ``buffer``.

    Args:
        state:  HistogramState (read only).
        buffer: Flat RGBA bytes (bytearray, memoryview) or a uint8 ndarray
                holding exactly 4 * width * height bytes for the state's
                current canvas size.

    Returns:
        (H, W, 4) uint8 view over ``buffer``.

    Raises:
        ValueError: If the buffer size does not match the canvas, or the
            buffer cannot be written in place.
    """
    width = state.canvas_width
    height = state.canvas_height
    pixels = _as_pixels(buffer, width, height)

    counts = np.asarray(state.counts, dtype=np.int64)
    faces = counts.shape[0]
    column_width = state.column_width
    left_margin = state.left_margin

    x = np.arange(width, dtype=np.int64)
    in_bar = (x >= left_margin) & (x < left_margin + column_width * faces)
    face = np.where(in_bar, (x - left_margin) // column_width, 0)
    bar_x = x - left_margin - face * column_width

    # Row 0 of the buffer is the top of the image
    y = height - 1 - np.arange(height, dtype=np.int64)
    value = y[:, None] * column_width + bar_x[None, :] + 1
    limit = np.where(in_bar, counts[face], 0)
    highlighted = in_bar[None, :] & (value <= limit[None, :])

    column_colors = np.array(state.palette, dtype=np.uint8)[face]
    if state.losing_face is not None:
        column_colors[in_bar & (face == state.losing_face)] = LOSE_COLOR
    if state.winning_face is not None:
        column_colors[in_bar & (face == state.winning_face)] = WIN_COLOR

    pixels[...] = np.where(highlighted[:, :, None], column_colors[None, :, :], BACKGROUND)
    return pixels
