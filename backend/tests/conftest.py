import numpy as np
import pytest

from histogram.state import HistogramState


class FixedRolls:
    """Roll source that returns the same rolls every tick."""

    def __init__(self, rolls):
        self.rolls = np.asarray(rolls, dtype=np.int64)
        self.calls = 0

    def integers(self, low, high, size=None):
        self.calls += 1
        return self.rolls


@pytest.fixture
def no_rolls():
    """Roll source that adds nothing, so tests control counts directly."""
    return FixedRolls([])


@pytest.fixture
def state_400x100(no_rolls):
    """400x100 canvas: 20px columns, no margin, 2000 units per column."""
    return HistogramState(400, 100, rng=no_rolls)


@pytest.fixture
def frame_400x100():
    return np.zeros((100, 400, 4), dtype=np.uint8)
