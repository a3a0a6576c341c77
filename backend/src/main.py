"""d20viz entry point — run the histogram headless and record the frames."""

import argparse
import logging
import os
import sys
from pathlib import Path

import sentry_sdk

from _version import __version__
from diagnostics import init_diagnostics, scrub_event
from engine.frame_loop import MIN_HEIGHT, MIN_WIDTH, RESET_KEY, FrameLoop
from engine.snapshot import SnapshotSink
from video.writer import VideoWriter

logger = logging.getLogger(__name__)

CONSENT_PATH = "~/.d20viz/telemetry_consent"


def init_sentry():
    """Consent-gated Sentry init. Without consent the DSN stays empty."""
    consent_path = os.path.expanduser(CONSENT_PATH)
    dsn = ""
    if os.path.exists(consent_path) and Path(consent_path).read_text().strip() == "yes":
        dsn = os.environ.get("SENTRY_DSN", "")

    sentry_sdk.init(
        dsn=dsn,
        release=f"d20viz@{__version__}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        traces_sample_rate=0.1,
        before_send=scrub_event,
        max_breadcrumbs=50,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="d20viz", description="Live histogram of simulated d20 rolls"
    )
    parser.add_argument("--width", type=int, default=800)
    parser.add_argument("--height", type=int, default=600)
    parser.add_argument("--ticks", type=int, default=300, help="Frames to simulate")
    parser.add_argument("--fps", type=float, default=0.0, help="0 = unpaced")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--video", help="Record every frame to this video file")
    parser.add_argument("--snapshot", help="Write the final frame as PNG")
    parser.add_argument(
        "--reset-every", type=int, default=0, help="Press F5 every N ticks"
    )
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.width < MIN_WIDTH or args.height < MIN_HEIGHT:
        parser.error(f"size must be at least {MIN_WIDTH}x{MIN_HEIGHT}")
    if args.ticks < 0 or args.reset_every < 0 or args.fps < 0:
        parser.error("--ticks, --reset-every and --fps must not be negative")
    if args.video and (args.width % 2 or args.height % 2):
        parser.error("--video needs an even width and height")
    return args


def run(args: argparse.Namespace) -> dict:
    """Run the loop for ``args.ticks`` frames and return its stats."""
    loop = FrameLoop(args.width, args.height, seed=args.seed)
    if args.video:
        fps = int(args.fps) or 30
        loop.add_sink(VideoWriter(args.video, args.width, args.height, fps=fps))
    if args.snapshot:
        loop.add_sink(SnapshotSink(args.snapshot))

    def _press_reset(frame_loop: FrameLoop, tick: int):
        if tick and tick % args.reset_every == 0:
            frame_loop.handle_key(RESET_KEY)

    on_tick = _press_reset if args.reset_every else None
    try:
        loop.run(args.ticks, fps=args.fps, on_tick=on_tick)
    finally:
        loop.close()
    return loop.get_stats()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    init_diagnostics()
    init_sentry()
    stats = run(args)
    print(
        f"ticks={stats['ticks']} winning_face={stats['winning_face']} "
        f"losing_face={stats['losing_face']}",
        flush=True,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
