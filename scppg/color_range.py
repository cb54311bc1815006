"""
Colour-range conventions of the capture pipeline.

Mobile camera stacks deliver YUV in one of two numeric ranges:

* iOS bi-planar video-range buffers – Y in [16, 235], U/V in [16, 240].
* Android ``YUV_420_888`` – full range, every channel in [0, 255].

The range is a property of the platform / codec, not of an individual
frame, so it is resolved once at setup and handed to the decoder as a
:class:`ColorRange` value.  The hot path never inspects platform names.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from scppg.errors import UnsupportedRange

logger = logging.getLogger(__name__)


class ColorRange(Enum):
    LIMITED = auto()   # "video" range: Y 16–235, U/V 16–240
    FULL    = auto()   # 0–255 for all channels


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

_PLATFORM_RANGES: dict[str, ColorRange] = {
    "ios":     ColorRange.LIMITED,
    "android": ColorRange.FULL,
}

_RANGE_ALIASES: dict[str, ColorRange] = {
    "limited": ColorRange.LIMITED,
    "video":   ColorRange.LIMITED,
    "full":    ColorRange.FULL,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve_color_range(platform_name: str) -> ColorRange:
    """
    Return the colour range used by the camera stack of *platform_name*.

    Parameters
    ----------
    platform_name:
        Operating-system name as reported by the host, e.g. ``"ios"`` or
        ``"Android"``.  Matching is case-insensitive.

    Raises
    ------
    UnsupportedRange
        For any platform without a known convention.  The decoder never
        guesses a range.
    """
    key = str(platform_name).strip().lower()
    try:
        color_range = _PLATFORM_RANGES[key]
    except KeyError:
        raise UnsupportedRange(platform_name) from None
    logger.info("Platform %s uses %s colour range", platform_name, color_range.name)
    return color_range


def parse_color_range(value: "ColorRange | str") -> ColorRange:
    """Accept a :class:`ColorRange` or one of ``limited`` / ``video`` / ``full``."""
    if isinstance(value, ColorRange):
        return value
    if isinstance(value, str):
        color_range = _RANGE_ALIASES.get(value.strip().lower())
        if color_range is not None:
            return color_range
    raise UnsupportedRange(value)
