"""
Default sensing parameters.

Every value can be overridden through constructor arguments or the
command-line flags in ``main.py``.
"""

from __future__ import annotations

from typing import Tuple

# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------

DEFAULT_FPS = 30
DEFAULT_RESOLUTION: Tuple[int, int] = (352, 288)   # low resolution is enough for PPG
DEFAULT_CAMERA_INDEX = 0

# ---------------------------------------------------------------------------
# Finger detection
# ---------------------------------------------------------------------------

DEFAULT_RED_RATIO_THRESHOLD = 30    # percent of r+g+b
MIN_RED_RATIO_THRESHOLD = 0
MAX_RED_RATIO_THRESHOLD = 100

# ---------------------------------------------------------------------------
# Frame source
# ---------------------------------------------------------------------------

MAX_NULL_FRAMES = 10      # consecutive failed reads before the stream ends
WARMUP_FRAMES = 8         # frames discarded while auto-exposure settles


def validate_threshold(value: int) -> int:
    """Return *value* if it is an integer percentage, else raise ``ValueError``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Red ratio threshold must be an int, got {value!r}")
    if not MIN_RED_RATIO_THRESHOLD <= value <= MAX_RED_RATIO_THRESHOLD:
        raise ValueError(
            f"Red ratio threshold must be within "
            f"[{MIN_RED_RATIO_THRESHOLD}, {MAX_RED_RATIO_THRESHOLD}], got {value}"
        )
    return value
