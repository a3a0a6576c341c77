"""Histogram state — running d20 roll counts bounded to the visible canvas.

Each tick adds a batch of simulated rolls, re-ranks the faces and, when the
tallest bar would no longer fit on screen, shrinks every bar in proportion to
its height so relative comparison between faces is preserved.
"""

import logging

import numpy as np

from engine.determinism import derive_seed, make_rng
from histogram.palette import FACE_COUNT, build_palette
from histogram.rasterizer import draw as rasterize

logger = logging.getLogger(__name__)

ROLLS_PER_TICK = 10_000


class HistogramState:
    """Counters, layout and palette for the 20-column histogram.

    Args:
        width:  Canvas width in pixels.
        height: Canvas height in pixels.
        rng:    Roll source. Anything with numpy's ``integers(low, high, size)``
                signature; defaults to a seeded ``np.random.Generator``.
    """

    def __init__(self, width: int, height: int, rng=None):
        self.palette = build_palette(FACE_COUNT)
        self._counts = np.zeros(FACE_COUNT, dtype=np.int64)
        self.winning_face: int | None = None
        self.losing_face: int | None = None
        self.canvas_width = 0
        self.canvas_height = 0
        self.column_width = 0
        self.left_margin = 0
        self._rng = rng if rng is not None else make_rng(derive_seed(0, "rolls"))
        self.set_size(width, height)

    @property
    def counts(self) -> np.ndarray:
        """Per-face counts, index = face - 1. Mutable in place."""
        return self._counts

    @counts.setter
    def counts(self, values) -> None:
        arr = np.asarray(values, dtype=np.int64)
        if arr.shape != (FACE_COUNT,):
            raise ValueError(f"Expected {FACE_COUNT} counts, got shape {arr.shape}")
        if (arr < 0).any():
            raise ValueError("Counts must be non-negative")
        self._counts[:] = arr

    @property
    def max_allowed(self) -> int:
        """Largest count a single column can show (one pixel per unit)."""
        return self.column_width * self.canvas_height

    def set_size(self, width: int, height: int) -> None:
        """Store new canvas dimensions and recompute the column layout.

        Widths under 20 still get 1px columns; the faces past the right edge
        are simply off-canvas.

        Raises:
            ValueError: If either dimension is not positive.
        """
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")

        self.canvas_width = width
        self.canvas_height = height
        self.column_width = max(1, width // FACE_COUNT)
        self.left_margin = max(0, (width - self.column_width * FACE_COUNT) // 2)

    def update(self) -> None:
        """Roll, re-rank the faces, then normalize if the tallest bar overflows."""
        rolls = np.asarray(self._rng.integers(1, FACE_COUNT + 1, size=ROLLS_PER_TICK))
        if rolls.size and (rolls.min() < 1 or rolls.max() > FACE_COUNT):
            raise ValueError(f"Roll source produced values outside 1..{FACE_COUNT}")
        self._counts += np.bincount(rolls - 1, minlength=FACE_COUNT)

        max_found = self._rank_faces()
        self._normalize(max_found)

    def _rank_faces(self) -> int:
        """Record the first face holding the max and the first holding the min.

        The max only moves on a strict improvement over 0, so an all-zero
        board leaves the previous winner in place. Returns the max count.
        """
        max_found = int(self._counts.max())
        if max_found > 0:
            self.winning_face = int(np.argmax(self._counts))
        self.losing_face = int(np.argmin(self._counts))
        return max_found

    def _normalize(self, max_found: int) -> None:
        max_allowed = self.max_allowed
        if max_found <= max_allowed:
            return

        # Shrink in whole rows so bars never move by a sub-row amount
        adjustment = max_found - max_allowed
        adjustment -= adjustment % self.column_width

        reductions = np.minimum(adjustment * self._counts // max_allowed, self._counts)
        self._counts -= reductions
        # Row rounding can leave the tallest bar a partial row over capacity
        np.minimum(self._counts, max_allowed, out=self._counts)

        logger.debug(
            "Normalized counts: max %d > %d, adjustment %d",
            max_found,
            max_allowed,
            adjustment,
        )

    def reset_counts(self) -> None:
        """Zero every counter. Ranking and layout are left as they are."""
        self._counts[:] = 0
        logger.info("Roll counts reset")

    def draw(self, buffer) -> np.ndarray:
        """Rasterize into ``buffer``. See ``histogram.rasterizer.draw``."""
        return rasterize(self, buffer)
