"""Record rendered histogram frames to a video file via PyAV."""

import av
import numpy as np


class VideoWriter:
    """Frame sink that encodes each RGBA frame. yuv420p needs even dimensions."""

    def __init__(
        self, path: str, width: int, height: int, fps: int = 30, codec: str = "libx264"
    ):
        if width % 2 or height % 2:
            raise ValueError(f"Video size must be even, got {width}x{height}")
        self.container = av.open(path, mode="w")
        self.stream = self.container.add_stream(codec, rate=fps)
        self.stream.width = width
        self.stream.height = height
        self.stream.pix_fmt = "yuv420p"
        self.frame_count = 0

    def write_frame(self, frame_rgba: np.ndarray):
        """Write an RGBA frame. Frames of another size are rejected."""
        h, w = frame_rgba.shape[:2]
        if (w, h) != (self.stream.width, self.stream.height):
            raise ValueError(
                f"Frame is {w}x{h}, stream is {self.stream.width}x{self.stream.height}"
            )
        frame = av.VideoFrame.from_ndarray(
            np.ascontiguousarray(frame_rgba[:, :, :3]), format="rgb24"
        )
        for packet in self.stream.encode(frame):
            self.container.mux(packet)
        self.frame_count += 1

    def close(self):
        for packet in self.stream.encode():
            self.container.mux(packet)
        self.container.close()
