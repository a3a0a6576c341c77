"""Bar colors for the d20 histogram."""

import numpy as np

FACE_COUNT = 20

# Gradient step per face for the green and blue channels
PALETTE_STEP = 0x09

BACKGROUND = np.array([0x33, 0x33, 0x33, 0xFF], dtype=np.uint8)
WIN_COLOR = np.array([0x33, 0xCC, 0x33, 0xFF], dtype=np.uint8)
LOSE_COLOR = np.array([0xCC, 0x33, 0x33, 0xFF], dtype=np.uint8)


def build_palette(faces: int = FACE_COUNT) -> np.ndarray:
    """
    Build the per-face gradient.

    Face i gets RGBA (0, 9*(i+1), 9*(i+1), 255). Channel math is done in
    int and wrapped to uint8, so larger face counts cycle instead of clipping.

    Returns:
        (faces, 4) uint8 array, read-only.
    """
    steps = (np.arange(1, faces + 1, dtype=np.int64) * PALETTE_STEP) % 256
    palette = np.zeros((faces, 4), dtype=np.uint8)
    palette[:, 1] = steps
    palette[:, 2] = steps
    palette[:, 3] = 0xFF
    palette.setflags(write=False)
    return palette
