#!/usr/bin/env python3
"""
SCPPG monitor – main entry point.

Usage
-----
    python main.py [OPTIONS]

Options
-------
    --resolution WxH       Camera resolution (default: 352x288)
    --fps INT              Target frame rate (default: 30)
    --threshold INT        Red-ratio threshold in percent (default: 30)
    --layout NAME          Chroma layout of raw frames: planar | interleaved
    --color-range NAME     auto | limited | full (auto = camera's own range)
    --camera-index INT     OpenCV camera index (fallback, default: 0)
    --log-interval INT     Frames between status lines (default: fps)
    --verbose              Enable debug logging

Press Ctrl+C to stop.
"""

from __future__ import annotations

import argparse
import logging
import sys

from scppg.camera import CameraFrameSource
from scppg.color_range import parse_color_range
from scppg.config import (
    DEFAULT_CAMERA_INDEX,
    DEFAULT_FPS,
    DEFAULT_RED_RATIO_THRESHOLD,
    validate_threshold,
)
from scppg.controller import ScppgController
from scppg.frame import ChromaLayout
from scppg.sample import CalibratedSample

logger = logging.getLogger("scppg")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Smartphone-camera PPG signal extraction (finger on lens)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--resolution", default="352x288",
                        help="Camera resolution, e.g. 352x288")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS,
                        help="Target capture frame rate")
    parser.add_argument("--threshold", type=int, default=DEFAULT_RED_RATIO_THRESHOLD,
                        help="Red-ratio threshold for finger detection (0-100)")
    parser.add_argument("--layout", choices=("planar", "interleaved"), default="planar",
                        help="Chroma layout of the raw frames")
    parser.add_argument("--color-range", default="auto",
                        choices=("auto", "limited", "full"),
                        help="YUV colour range; 'auto' uses the camera's own")
    parser.add_argument("--camera-index", type=int, default=DEFAULT_CAMERA_INDEX,
                        help="OpenCV VideoCapture index (fallback)")
    parser.add_argument("--log-interval", type=int, default=None,
                        help="Frames between status lines (default: fps)")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s – %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        res_w, res_h = (int(v) for v in args.resolution.lower().split("x"))
    except ValueError:
        logger.error("Invalid --resolution format.  Use WxH, e.g. 352x288.")
        return 1

    try:
        threshold = validate_threshold(args.threshold)
        camera = CameraFrameSource(
            resolution=(res_w, res_h),
            fps=args.fps,
            layout=ChromaLayout[args.layout.upper()],
            camera_index=args.camera_index,
        )
        if args.color_range == "auto":
            color_range = camera.color_range
        else:
            color_range = parse_color_range(args.color_range)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    controller = ScppgController(
        fps=args.fps,
        color_range=color_range,
        red_ratio_threshold=threshold,
    )

    log_interval = max(1, args.log_interval or args.fps)

    def _log_sample(sample: CalibratedSample) -> None:
        if controller.frames_processed % log_interval:
            return
        ts = sample.timestamp.strftime("%H:%M:%S.%f")[:-3]
        if sample.finger_detected:
            print(f"[{ts}] r={sample.red:.0f} g={sample.green:.0f} "
                  f"b={sample.blue:.0f} luma={sample.luma:.1f} finger=True")
        else:
            print(f"[{ts}] Place finger on the lens…  luma={sample.luma:.1f} finger=False")

    controller.add_listener(_log_sample)
    logger.info("Starting SCPPG monitor.  Press Ctrl+C to quit.")

    try:
        with camera:
            controller.start_sensing(camera)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    finally:
        controller.stop_sensing()
        controller.remove_listener(_log_sample)

    logger.info(
        "Processed %d frames, dropped %d.",
        controller.frames_processed, controller.dropped_frames,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    return run(parse_args(argv))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
