"""
Camera frame source.

Yields raw YUV planes in either chroma layout so the decoder sees the same
buffers a phone camera stack would hand over.  Uses picamera2 (YUV420
stream) on Raspberry Pi OS and falls back to OpenCV VideoCapture on any
other machine, converting its BGR frames with ``COLOR_BGR2YUV_I420``.

Both backends deliver BT.601 video-range samples, so the source reports
:attr:`ColorRange.LIMITED`.
"""

from __future__ import annotations

import logging
from typing import Generator, Optional, Tuple

import cv2
import numpy as np

from scppg.color_range import ColorRange
from scppg.config import (
    DEFAULT_CAMERA_INDEX,
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
    MAX_NULL_FRAMES,
    WARMUP_FRAMES,
)
from scppg.frame import ChromaLayout

logger = logging.getLogger(__name__)

Planes = Tuple[np.ndarray, ...]

# ---------------------------------------------------------------------------
# Try importing picamera2 (only available on Raspberry Pi OS)
# ---------------------------------------------------------------------------
try:
    from picamera2 import Picamera2
    _PICAMERA2_AVAILABLE = True
except ImportError:
    _PICAMERA2_AVAILABLE = False
    logger.debug("picamera2 not found – using OpenCV VideoCapture.")


# ---------------------------------------------------------------------------
# Plane helpers
# ---------------------------------------------------------------------------

def split_i420(
    buffer: np.ndarray,
    width: int,
    height: int,
    layout: ChromaLayout = ChromaLayout.PLANAR,
) -> Planes:
    """
    Split a single-plane I420 buffer into YUV planes.

    Parameters
    ----------
    buffer:
        ``uint8`` array of shape ``(height * 3 / 2, stride)``; ``stride`` may
        exceed ``width`` when the ISP pads rows.
    width, height:
        Visible frame size in pixels (both even).
    layout:
        ``PLANAR`` returns ``(Y, U, V)``; ``INTERLEAVED`` returns ``(Y, UV)``
        with U at even and V at odd offsets.
    """
    if width % 2 or height % 2:
        raise ValueError(f"I420 needs even dimensions, got {width}x{height}")
    rows, stride = buffer.shape[:2]
    if rows != height * 3 // 2 or stride < width:
        raise ValueError(
            f"Buffer shape {buffer.shape} does not hold a {width}x{height} I420 frame"
        )

    buffer = np.ascontiguousarray(buffer)
    y = buffer[:height, :width]
    chroma = buffer[height:].reshape(height, stride // 2)
    u = chroma[:height // 2, :width // 2]
    v = chroma[height // 2:, :width // 2]

    if layout is ChromaLayout.PLANAR:
        return np.ascontiguousarray(y), np.ascontiguousarray(u), np.ascontiguousarray(v)
    uv = np.stack((u, v), axis=-1).reshape(-1)
    return np.ascontiguousarray(y), uv


def bgr_to_planes(frame: np.ndarray, layout: ChromaLayout = ChromaLayout.PLANAR) -> Planes:
    """Convert an OpenCV BGR frame (H × W × 3, uint8) into video-range YUV planes."""
    height, width = frame.shape[:2]
    if width % 2 or height % 2:
        raise ValueError(f"I420 needs even dimensions, got {width}x{height}")
    i420 = cv2.cvtColor(np.ascontiguousarray(frame), cv2.COLOR_BGR2YUV_I420)
    return split_i420(i420, width, height, layout)


# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------

class CameraFrameSource:
    """
    Camera wrapper yielding raw YUV planes.

    Parameters
    ----------
    resolution:
        (width, height) of captured frames; both must be even.
    fps:
        Target frame rate.  Actual rate may differ slightly.
    layout:
        Chroma layout of the emitted planes.
    camera_index:
        OpenCV camera index used when picamera2 is unavailable.
    """

    def __init__(
        self,
        resolution: Tuple[int, int] = DEFAULT_RESOLUTION,
        fps: int = DEFAULT_FPS,
        layout: ChromaLayout = ChromaLayout.PLANAR,
        camera_index: int = DEFAULT_CAMERA_INDEX,
    ) -> None:
        w, h = resolution
        if w % 2 or h % 2:
            raise ValueError(f"Resolution must have even dimensions, got {w}x{h}")
        self.resolution = resolution
        self.fps = fps
        self.layout = layout
        self.camera_index = camera_index

        self._cam: "Picamera2 | cv2.VideoCapture | None" = None
        self._use_picamera2 = _PICAMERA2_AVAILABLE

    @property
    def color_range(self) -> ColorRange:
        return ColorRange.LIMITED

    @property
    def backend(self) -> str:
        return "picamera2" if self._use_picamera2 else "opencv"

    @property
    def is_open(self) -> bool:
        return self._cam is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Start streaming; the first :data:`WARMUP_FRAMES` frames are discarded."""
        if self._cam is not None:
            return
        starter = self._start_picamera2 if self._use_picamera2 else self._start_opencv
        self._cam = starter()
        logger.info(
            "Camera streaming – backend=%s %dx%d@%dfps layout=%s",
            self.backend, *self.resolution, self.fps, self.layout.name,
        )

    def close(self) -> None:
        cam, self._cam = self._cam, None
        if cam is None:
            return
        if self._use_picamera2:
            cam.stop()
            cam.close()
        else:
            cam.release()
        logger.info("Camera released (%s).", self.backend)

    def __enter__(self) -> "CameraFrameSource":
        self.open()
        return self

    def __exit__(self, *_) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Frame acquisition
    # ------------------------------------------------------------------

    def read_frame(self) -> Optional[Planes]:
        """Capture one frame as YUV planes, or *None* on failure."""
        if self._cam is None:
            raise RuntimeError("Camera is not open.  Call open() first.")

        if self._use_picamera2:
            return self._read_picamera2()
        return self._read_opencv()

    def frames(self) -> Generator[Planes, None, None]:
        """
        Yield frames until the camera is closed or reads keep failing.

        Usage::

            with CameraFrameSource() as cam:
                for planes in cam.frames():
                    controller.on_frame(planes)
        """
        null_streak = 0
        while self._cam is not None:
            planes = self.read_frame()
            if planes is None:
                null_streak += 1
                if null_streak >= MAX_NULL_FRAMES:
                    logger.error(
                        "Camera returned %d consecutive empty frames – aborting.",
                        null_streak,
                    )
                    break
                continue
            null_streak = 0
            yield planes

    # ------------------------------------------------------------------
    # Private helpers – picamera2
    # ------------------------------------------------------------------

    def _start_picamera2(self) -> "Picamera2":
        cam = Picamera2()
        cam.configure(cam.create_video_configuration(
            main={"size": self.resolution, "format": "YUV420"},
            controls={"FrameRate": self.fps},
        ))
        cam.start()
        for _ in range(WARMUP_FRAMES):
            cam.capture_array("main")
        return cam

    def _read_picamera2(self) -> Optional[Planes]:
        buffer = self._cam.capture_array("main")
        if buffer is None:
            logger.warning("capture_array returned None.")
            return None
        w, h = self.resolution
        return split_i420(buffer, w, h, self.layout)

    # ------------------------------------------------------------------
    # Private helpers – OpenCV fallback
    # ------------------------------------------------------------------

    def _start_opencv(self) -> cv2.VideoCapture:
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            raise RuntimeError(
                f"Cannot open video capture device index={self.camera_index}"
            )
        for prop, value in zip(
            (cv2.CAP_PROP_FRAME_WIDTH, cv2.CAP_PROP_FRAME_HEIGHT, cv2.CAP_PROP_FPS),
            (*self.resolution, self.fps),
        ):
            cap.set(prop, value)
        for _ in range(WARMUP_FRAMES):
            cap.grab()
        return cap

    def _read_opencv(self) -> Optional[Planes]:
        ok, frame = self._cam.read()
        if not ok:
            logger.warning("VideoCapture.read() returned False.")
            return None
        h, w = frame.shape[:2]
        if w % 2 or h % 2:
            # Drivers may ignore the requested size; trim to even dimensions.
            frame = frame[: h - h % 2, : w - w % 2]
        return bgr_to_planes(frame, self.layout)
