"""Tests for PNG snapshot encoding and the snapshot sink."""

import numpy as np
import pytest

from engine.snapshot import SnapshotSink, decode_png, encode_png
from histogram.state import HistogramState

pytestmark = pytest.mark.smoke


def test_encode_produces_png_header():
    frame = np.zeros((60, 80, 4), dtype=np.uint8)
    frame[:, :, 3] = 255
    data = encode_png(frame)
    assert data[:8] == b"\x89PNG\r\n\x1a\n"


def test_png_is_lossless():
    state = HistogramState(400, 100, rng=np.random.default_rng(5))
    state.update()
    frame = np.zeros((100, 400, 4), dtype=np.uint8)
    state.draw(frame)
    decoded = decode_png(encode_png(frame))
    np.testing.assert_array_equal(decoded, frame)


def test_sink_writes_last_frame(tmp_path):
    path = tmp_path / "out" / "final.png"
    sink = SnapshotSink(str(path))
    first = np.zeros((10, 20, 4), dtype=np.uint8)
    last = np.full((10, 20, 4), 200, dtype=np.uint8)
    sink.write_frame(first)
    sink.write_frame(last)
    # Sink must copy; the loop reuses its buffer
    last[:] = 0
    sink.close()
    assert sink.frame_count == 2
    decoded = decode_png(path.read_bytes())
    assert (decoded == 200).all()


def test_sink_without_frames_writes_nothing(tmp_path):
    path = tmp_path / "never.png"
    SnapshotSink(str(path)).close()
    assert not path.exists()
