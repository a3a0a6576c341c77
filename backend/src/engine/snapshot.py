"""PNG snapshots of rendered histogram frames."""

import io
import logging
from pathlib import Path

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def encode_png(frame: np.ndarray) -> bytes:
    """Encode an (H, W, 4) RGBA frame to PNG bytes. Alpha is kept."""
    img = Image.fromarray(frame)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_png(data: bytes) -> np.ndarray:
    """Decode PNG bytes back to an RGBA numpy array."""
    img = Image.open(io.BytesIO(data)).convert("RGBA")
    return np.array(img)


class SnapshotSink:
    """Frame sink that keeps the latest frame and writes it as PNG on close."""

    def __init__(self, path: str):
        self.path = Path(path)
        self.frame_count = 0
        self._last: np.ndarray | None = None

    def write_frame(self, frame_rgba: np.ndarray):
        self._last = frame_rgba.copy()
        self.frame_count += 1

    def close(self):
        if self._last is None:
            logger.warning("No frame rendered, snapshot %s not written", self.path)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(encode_png(self._last))
        logger.info("Snapshot written to %s", self.path)
