"""
Sensing controller.

Owns the finger-detection threshold and the most recent sample, and fans
each new :class:`CalibratedSample` out to registered listeners.  Frames
arrive through :meth:`ScppgController.on_frame`, the push-style callback
the camera collaborator invokes once per frame, or are pulled from a frame
source by :meth:`ScppgController.start_sensing`.

A frame that fails to decode is logged and dropped; it never escapes the
callback, so one bad frame cannot halt the stream.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from scppg.color_range import ColorRange
from scppg.config import DEFAULT_FPS, DEFAULT_RED_RATIO_THRESHOLD, validate_threshold
from scppg.errors import DecodeError, UnsupportedRange
from scppg.frame import RawFrame
from scppg.pipeline import process_frame
from scppg.sample import CalibratedSample

logger = logging.getLogger(__name__)

SampleListener = Callable[[CalibratedSample], None]


class FrameSource(Protocol):
    def frames(self) -> Iterable[Sequence]: ...


class ScppgController:
    """
    Smartphone-camera PPG controller.

    Parameters
    ----------
    fps:
        Nominal frame rate of the camera stream.  Informational; frames
        are processed as they arrive.
    color_range:
        Colour range of the capture pipeline, resolved once at setup
        (see :mod:`scppg.color_range`).
    red_ratio_threshold:
        Finger-detection threshold in percent (0 – 100).  Lower values
        are more permissive.
    """

    def __init__(
        self,
        fps: int = DEFAULT_FPS,
        color_range: ColorRange = ColorRange.FULL,
        red_ratio_threshold: int = DEFAULT_RED_RATIO_THRESHOLD,
    ) -> None:
        self.fps = fps
        self.color_range = color_range
        self._red_ratio_threshold = validate_threshold(red_ratio_threshold)

        self._listeners: List[SampleListener] = []
        self._ppg_data: Optional[CalibratedSample] = None
        self._now: Optional[datetime] = None

        self._is_sensing = False
        self._stop_requested = False
        self.frames_processed = 0
        self.dropped_frames = 0

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def red_ratio_threshold(self) -> int:
        return self._red_ratio_threshold

    @red_ratio_threshold.setter
    def red_ratio_threshold(self, value: int) -> None:
        self._red_ratio_threshold = validate_threshold(value)
        logger.info("Red ratio threshold set to %d%%", value)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def ppg_data(self) -> Optional[CalibratedSample]:
        """Most recent sample, or *None* before the first accepted frame."""
        return self._ppg_data

    @property
    def now(self) -> Optional[datetime]:
        """Timestamp of the most recent accepted frame."""
        return self._now

    @property
    def is_sensing(self) -> bool:
        return self._is_sensing

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: SampleListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SampleListener) -> None:
        """Unregister *listener*; unknown listeners are ignored."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify_listeners(self, sample: CalibratedSample) -> None:
        for listener in list(self._listeners):
            try:
                listener(sample)
            except Exception:                            # noqa: BLE001
                logger.exception("Sample listener %r failed", listener)

    # ------------------------------------------------------------------
    # Frame callbacks
    # ------------------------------------------------------------------

    def on_frame(
        self,
        planes: Sequence,
        timestamp: Optional[datetime] = None,
    ) -> Optional[CalibratedSample]:
        """Process the planes of one frame using the controller's colour range."""
        return self.on_raw_frame(RawFrame(planes, self.color_range), timestamp)

    def on_raw_frame(
        self,
        frame: RawFrame,
        timestamp: Optional[datetime] = None,
    ) -> Optional[CalibratedSample]:
        """
        Process one frame and notify listeners.

        Returns the new sample, or *None* when the frame was dropped
        because it could not be decoded.
        """
        threshold = self._red_ratio_threshold
        try:
            sample = process_frame(frame, threshold, timestamp)
        except UnsupportedRange as exc:
            self.dropped_frames += 1
            logger.error("Dropping frame – check colour-range configuration: %s", exc)
            return None
        except DecodeError as exc:
            self.dropped_frames += 1
            logger.warning("Dropping frame: %s", exc)
            return None

        self.frames_processed += 1
        self._now = sample.timestamp
        self._ppg_data = sample
        self._notify_listeners(sample)
        return sample

    # ------------------------------------------------------------------
    # Sensing loop
    # ------------------------------------------------------------------

    def start_sensing(self, source: FrameSource) -> None:
        """
        Feed every frame of *source* through :meth:`on_frame`.

        Blocks until the source is exhausted or :meth:`stop_sensing` is
        called (typically from a listener or another thread).
        """
        self._is_sensing = True
        self._stop_requested = False
        logger.info(
            "Sensing started (fps=%d, range=%s)",
            self.fps, getattr(self.color_range, "name", self.color_range),
        )
        try:
            for planes in source.frames():
                if self._stop_requested:
                    break
                self.on_frame(planes)
        finally:
            self._is_sensing = False
            logger.info(
                "Sensing stopped – processed=%d dropped=%d",
                self.frames_processed, self.dropped_frames,
            )

    def stop_sensing(self) -> None:
        """Stop the sensing loop after the frame currently being processed."""
        self._stop_requested = True
        self._is_sensing = False
