"""
Per-frame entry point: decode → classify → :class:`CalibratedSample`.

Both stages are pure and synchronous; calling :func:`process_frame` from
several threads is safe as long as each call gets its own frame.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from scppg.finger_detector import classify
from scppg.frame import RawFrame
from scppg.frame_decoder import decode
from scppg.sample import CalibratedSample

logger = logging.getLogger(__name__)


def process_frame(
    frame: RawFrame,
    threshold_percent: int,
    timestamp: Optional[datetime] = None,
) -> CalibratedSample:
    """
    Turn one raw camera frame into a calibrated sample.

    Parameters
    ----------
    frame:
        Raw YUV frame (2 or 3 planes) with its colour range.
    threshold_percent:
        Red-ratio threshold for finger detection (0 – 100).
    timestamp:
        Capture time.  Defaults to the current UTC time.

    Raises
    ------
    DecodeError
        When the frame cannot be decoded.  Callers drop the frame and
        carry on with the next one.
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    decoded = decode(frame)
    verdict = classify(decoded.red, decoded.green, decoded.blue, threshold_percent)
    if not verdict.valid:
        logger.debug("No finger detected (%s)", verdict.reason.name)

    return CalibratedSample(
        red=verdict.red,
        green=verdict.green,
        blue=verdict.blue,
        luma=decoded.luma,
        timestamp=timestamp,
    )
