"""Headless frame loop — drives the histogram the way a window event loop would.

Per frame: tick (update counts), then render into the owned RGBA buffer and
hand the frame to every sink. Resizes reallocate the buffer before the next
render. F5 resets the counts, Escape stops the loop.

Single-threaded: tick, render and resize never overlap.
"""

import logging
import time
from collections import deque

import numpy as np

from engine.determinism import derive_seed, make_rng
from histogram.state import HistogramState

logger = logging.getLogger(__name__)

# Same floor as the original window's minimum inner size
MIN_WIDTH = 100
MIN_HEIGHT = 100

RESET_KEY = "F5"
QUIT_KEY = "Escape"


def log_error(method_name: str, err: BaseException):
    """Log a failure and each exception in its cause chain."""
    logger.error("%s() failed: %s", method_name, err)
    source = err.__cause__ or err.__context__
    while source is not None:
        logger.error("  Caused by: %s", source)
        source = source.__cause__ or source.__context__


class FrameLoop:
    """Owns a HistogramState, its frame buffer and the frame sinks.

    Args:
        width, height: Initial canvas size.
        seed:          Session seed for the roll source.
        state:         Pre-built state (tests); overrides ``seed``.
    """

    def __init__(
        self,
        width: int,
        height: int,
        seed: int = 0,
        state: HistogramState | None = None,
    ):
        self.state = state or HistogramState(
            width, height, rng=make_rng(derive_seed(seed, "rolls"))
        )
        self.frame = np.zeros((0, 0, 4), dtype=np.uint8)
        self.sinks: list = []
        self.running = True
        self.tick_count = 0
        self.frame_count = 0
        self._redraw_requested = False
        self._tick_timing: deque = deque(maxlen=100)
        self.resize(width, height)

    @property
    def size(self) -> tuple[int, int]:
        return self.state.canvas_width, self.state.canvas_height

    def add_sink(self, sink):
        """Register an object with ``write_frame(frame)`` and ``close()``."""
        self.sinks.append(sink)

    def resize(self, width: int, height: int):
        """Reallocate the buffer and re-lay the columns for a new surface size."""
        self.state.set_size(width, height)
        self.frame = np.zeros(
            (self.state.canvas_height, self.state.canvas_width, 4), dtype=np.uint8
        )
        self._redraw_requested = True
        logger.debug("Resized to %dx%d", width, height)

    def tick(self):
        """Advance the simulation by one frame."""
        t0 = time.monotonic()
        self.state.update()
        self._tick_timing.append((time.monotonic() - t0) * 1000)
        self.tick_count += 1
        self._redraw_requested = True

    def render(self, force: bool = False) -> np.ndarray:
        """Draw if a redraw is pending and pass the frame to the sinks.

        A sink failure is logged and stops the loop.
        """
        if not (self._redraw_requested or force):
            return self.frame
        self.state.draw(self.frame)
        self._redraw_requested = False
        self.frame_count += 1

        for sink in self.sinks:
            try:
                sink.write_frame(self.frame)
            except Exception as e:
                log_error(f"{type(sink).__name__}.write_frame", e)
                self.running = False
                break
        return self.frame

    def handle_key(self, key: str):
        if key == RESET_KEY:
            self.state.reset_counts()
            self._redraw_requested = True
        elif key == QUIT_KEY:
            logger.info("Quit requested")
            self.running = False

    def run(self, max_ticks: int, fps: float = 0.0, on_tick=None) -> int:
        """Tick and render until stopped or ``max_ticks`` frames have run.

        Args:
            max_ticks: Upper bound on ticks.
            fps:       Target frame rate; 0 runs unpaced.
            on_tick:   Called with ``(loop, tick_index)`` before each tick,
                       e.g. to feed keys or resizes.

        Returns:
            Number of ticks executed.
        """
        frame_s = 1.0 / fps if fps > 0 else 0.0
        ticks = 0
        while self.running and ticks < max_ticks:
            t0 = time.monotonic()
            if on_tick is not None:
                on_tick(self, ticks)
                if not self.running:
                    break
            self.tick()
            self.render()
            ticks += 1
            if frame_s:
                remaining = frame_s - (time.monotonic() - t0)
                if remaining > 0:
                    time.sleep(remaining)
        return ticks

    def close(self):
        """Close every sink. All sinks get closed even if one fails."""
        errors = []
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                log_error(f"{type(sink).__name__}.close", e)
                errors.append(e)
        self.sinks.clear()
        if errors:
            raise errors[0]

    def get_stats(self) -> dict:
        """Tick timing (ms) and current standings, faces numbered 1-20."""
        s = sorted(self._tick_timing)
        win = self.state.winning_face
        lose = self.state.losing_face
        return {
            "ticks": self.tick_count,
            "frames": self.frame_count,
            "p50_ms": s[len(s) // 2] if s else 0,
            "p95_ms": s[int(len(s) * 0.95)] if len(s) >= 20 else None,
            "max_ms": max(s) if s else 0,
            "winning_face": win + 1 if win is not None else None,
            "losing_face": lose + 1 if lose is not None else None,
            "counts": self.state.counts.tolist(),
        }
