"""Tests for the histogram rasterizer."""

import numpy as np
import pytest

from histogram.palette import BACKGROUND, LOSE_COLOR, WIN_COLOR
from histogram.rasterizer import draw
from histogram.state import HistogramState

pytestmark = pytest.mark.smoke


def _column(frame: np.ndarray, face: int, column_width: int = 20, margin: int = 0):
    start = margin + face * column_width
    return frame[:, start : start + column_width]


def test_uniform_full_columns_use_palette(state_400x100, frame_400x100):
    """Every column at capacity fills completely with its own palette color."""
    state_400x100.counts = [2000] * 20
    draw(state_400x100, frame_400x100)
    for face in range(20):
        col = _column(frame_400x100, face)
        assert (col == state_400x100.palette[face]).all()


def test_empty_state_is_all_background(state_400x100, frame_400x100):
    draw(state_400x100, frame_400x100)
    assert (frame_400x100 == BACKGROUND).all()


def test_zero_count_column_is_background(state_400x100, frame_400x100):
    state_400x100.counts = [2000] * 6 + [0] + [2000] * 13
    draw(state_400x100, frame_400x100)
    assert (_column(frame_400x100, 6) == BACKGROUND).all()
    assert (_column(frame_400x100, 7) == state_400x100.palette[7]).all()


def test_bar_grows_from_bottom_left(state_400x100, frame_400x100):
    """25 units = one full bottom row plus the first 5 pixels of the next."""
    state_400x100.counts[5] = 25
    draw(state_400x100, frame_400x100)
    col = _column(frame_400x100, 5)
    color = state_400x100.palette[5]
    assert (col[-1] == color).all()
    assert (col[-2, :5] == color).all()
    assert (col[-2, 5:] == BACKGROUND).all()
    assert (col[:-2] == BACKGROUND).all()


def test_winning_face_drawn_green(state_400x100, frame_400x100):
    state_400x100.counts[0] = 40
    state_400x100.winning_face = 0
    draw(state_400x100, frame_400x100)
    col = _column(frame_400x100, 0)
    assert (col[-2:] == WIN_COLOR).all()
    assert (col[:-2] == BACKGROUND).all()


def test_losing_face_drawn_red(state_400x100, frame_400x100):
    state_400x100.counts = [100] * 20
    state_400x100.winning_face = 1
    state_400x100.losing_face = 2
    draw(state_400x100, frame_400x100)
    assert (_column(frame_400x100, 1)[-5:] == WIN_COLOR).all()
    assert (_column(frame_400x100, 2)[-5:] == LOSE_COLOR).all()
    assert (_column(frame_400x100, 3)[-5:] == state_400x100.palette[3]).all()


def test_win_takes_priority_over_lose(state_400x100, frame_400x100):
    state_400x100.counts = [20] * 20
    state_400x100.winning_face = 0
    state_400x100.losing_face = 0
    draw(state_400x100, frame_400x100)
    assert (_column(frame_400x100, 0)[-1] == WIN_COLOR).all()


def test_margin_pixels_are_background(no_rolls):
    state = HistogramState(410, 10, rng=no_rolls)
    assert state.left_margin == 5
    state.counts = [200] * 20
    frame = np.zeros((10, 410, 4), dtype=np.uint8)
    draw(state, frame)
    assert (frame[:, :5] == BACKGROUND).all()
    assert (frame[:, 405:] == BACKGROUND).all()
    assert (frame[:, 5:25] == state.palette[0]).all()


def test_every_pixel_has_a_known_color():
    state = HistogramState(123, 37, rng=np.random.default_rng(1))
    for _ in range(3):
        state.update()
    frame = np.zeros((37, 123, 4), dtype=np.uint8)
    draw(state, frame)
    allowed = {tuple(BACKGROUND), tuple(WIN_COLOR), tuple(LOSE_COLOR)}
    allowed.update(tuple(c) for c in state.palette)
    seen = {tuple(p) for p in frame.reshape(-1, 4)}
    assert seen <= allowed


def test_draw_is_idempotent(state_400x100, frame_400x100):
    state_400x100.counts = list(range(0, 2000, 100))
    state_400x100.winning_face = 19
    state_400x100.losing_face = 0
    draw(state_400x100, frame_400x100)
    first = frame_400x100.copy()
    draw(state_400x100, frame_400x100)
    np.testing.assert_array_equal(first, frame_400x100)


def test_draw_does_not_mutate_state(state_400x100, frame_400x100):
    state_400x100.counts = [7] * 20
    draw(state_400x100, frame_400x100)
    assert state_400x100.counts.tolist() == [7] * 20
    assert state_400x100.winning_face is None


def test_flat_bytearray_buffer(state_400x100):
    state_400x100.counts[0] = 20
    buf = bytearray(4 * 400 * 100)
    state_400x100.draw(buf)
    # Bottom row, first pixel, is the last row in buffer order
    offset = 4 * 400 * 99
    assert bytes(buf[offset : offset + 4]) == bytes(state_400x100.palette[0])
    assert bytes(buf[:4]) == bytes(BACKGROUND)


def test_flat_ndarray_buffer(state_400x100):
    buf = np.zeros(4 * 400 * 100, dtype=np.uint8)
    pixels = state_400x100.draw(buf)
    assert pixels.shape == (100, 400, 4)
    assert (buf.reshape(100, 400, 4) == BACKGROUND).all()


def test_buffer_size_mismatch_raises(state_400x100):
    with pytest.raises(ValueError):
        draw(state_400x100, np.zeros((100, 399, 4), dtype=np.uint8))
    with pytest.raises(ValueError):
        draw(state_400x100, bytearray(10))


def test_stale_buffer_after_resize_raises(state_400x100, frame_400x100):
    state_400x100.set_size(200, 100)
    with pytest.raises(ValueError):
        draw(state_400x100, frame_400x100)


def test_read_only_buffer_raises(state_400x100):
    with pytest.raises(ValueError):
        draw(state_400x100, bytes(4 * 400 * 100))


def test_non_uint8_buffer_raises(state_400x100):
    with pytest.raises(ValueError):
        draw(state_400x100, np.zeros((100, 400, 4), dtype=np.float32))


def test_narrow_canvas_shows_first_faces(no_rolls):
    """Under 20px wide, 1px columns run off the right edge."""
    state = HistogramState(10, 5, rng=no_rolls)
    state.counts = [5] * 20
    frame = np.zeros((5, 10, 4), dtype=np.uint8)
    draw(state, frame)
    for face in range(10):
        assert (frame[:, face] == state.palette[face]).all()
