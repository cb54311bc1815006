"""
Frame decoder: raw YUV frame → calibrated RGB intensities.

Algorithm
---------
1. Average every byte of the luma plane (Y).
2. Average the chroma samples.  Planar frames carry separate U and V
   planes; interleaved frames carry one plane of U,V pairs, U at even
   offsets and V at odd offsets.
3. Normalise Y/U/V to [0, 1] for the capture pipeline's colour range
   (video range 16–235 / 16–240, or full range 0–255).
4. Centre U and V on zero (0.5 is the neutral chroma value).
5. Convert to RGB with the ITU-R BT.601 matrix.
6. Clamp to [0, 1], scale to [0, 255] and round to the nearest integer.

The whole plane is averaged rather than a region of interest: the user is
expected to cover the lens completely, so a global mean is an adequate
proxy for the fingertip colour.

References
----------
- ITU-R Recommendation BT.601-7, "Studio encoding parameters of digital
  television for standard 4:3 and wide-screen 16:9 aspect ratios", 2011.
"""

from __future__ import annotations

import logging
import math
from typing import Any, NamedTuple, Tuple

import numpy as np

from scppg.color_range import ColorRange
from scppg.errors import MalformedFrame, UnsupportedRange
from scppg.frame import ChromaLayout, RawFrame

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# (luma offset, luma span, chroma offset, chroma span)
_RANGE_NORMALISATION: dict[ColorRange, Tuple[float, float, float, float]] = {
    ColorRange.LIMITED: (16.0, 219.0, 16.0, 224.0),   # 235-16, 240-16
    ColorRange.FULL:    (0.0, 255.0, 0.0, 255.0),
}

# ITU-R BT.601 YUV → RGB coefficients
_KR_V = 1.402
_KG_U = 0.344136
_KG_V = 0.714136
_KB_U = 1.772

_CHROMA_NEUTRAL = 0.5

# memoryview formats whose items are unsigned bytes
_BYTE_FORMATS = frozenset({"B", "c"})


class DecodedColor(NamedTuple):
    """Calibrated channel intensities of one frame."""

    red: float
    green: float
    blue: float
    luma: float   # raw Y-plane mean, not range-normalised


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode(frame: RawFrame) -> DecodedColor:
    """
    Convert *frame* into calibrated ``(red, green, blue, luma)``.

    Returns
    -------
    DecodedColor
        RGB values are whole numbers in [0, 255] stored as floats.  ``luma``
        is the raw average of the Y plane.

    Raises
    ------
    UnsupportedLayout
        Plane count other than 2 or 3.
    UnsupportedRange
        ``frame.color_range`` is not a :class:`ColorRange`.
    MalformedFrame
        Empty planes, odd-length interleaved chroma, non-byte planes.
    """
    layout = frame.layout
    norm = _normalisation(frame.color_range)

    y_avg = float(_plane_bytes(frame, 0).mean(dtype=np.float64))

    if layout is ChromaLayout.PLANAR:
        u_avg = float(_plane_bytes(frame, 1).mean(dtype=np.float64))
        v_avg = float(_plane_bytes(frame, 2).mean(dtype=np.float64))
    else:
        u_avg, v_avg = _interleaved_chroma_means(_plane_bytes(frame, 1))

    y_off, y_span, c_off, c_span = norm
    y_n = (y_avg - y_off) / y_span
    u_c = (u_avg - c_off) / c_span - _CHROMA_NEUTRAL
    v_c = (v_avg - c_off) / c_span - _CHROMA_NEUTRAL

    r = y_n + _KR_V * v_c
    g = y_n - _KG_U * u_c - _KG_V * v_c
    b = y_n + _KB_U * u_c

    decoded = DecodedColor(_to_channel(r), _to_channel(g), _to_channel(b), y_avg)
    logger.debug(
        "Decoded %s frame: y=%.2f u=%.2f v=%.2f -> r=%.0f g=%.0f b=%.0f",
        layout.name, y_avg, u_avg, v_avg,
        decoded.red, decoded.green, decoded.blue,
    )
    return decoded


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _normalisation(color_range: Any) -> Tuple[float, float, float, float]:
    if not isinstance(color_range, ColorRange):
        raise UnsupportedRange(color_range)
    try:
        return _RANGE_NORMALISATION[color_range]
    except KeyError:
        raise UnsupportedRange(color_range) from None


def _plane_bytes(frame: RawFrame, index: int) -> np.ndarray:
    """Return plane *index* as a flat, non-empty ``uint8`` array."""
    plane = frame.planes[index]
    if isinstance(plane, np.ndarray):
        if plane.dtype != np.uint8:
            raise MalformedFrame(index, f"expected uint8 samples, got {plane.dtype}")
        data = plane.reshape(-1)
    else:
        try:
            view = memoryview(plane)
        except TypeError:
            raise MalformedFrame(
                index, f"not a byte buffer ({type(plane).__name__})"
            ) from None
        if view.format not in _BYTE_FORMATS:
            raise MalformedFrame(
                index, f"expected uint8 samples, got buffer format {view.format!r}"
            )
        if view.nbytes == 0:
            raise MalformedFrame(index, "empty plane")
        if not view.c_contiguous:
            # Strided views (e.g. every other byte) still hold valid samples.
            view = memoryview(view.tobytes())
        data = np.frombuffer(view, dtype=np.uint8)

    if data.size == 0:
        raise MalformedFrame(index, "empty plane")
    return data


def _interleaved_chroma_means(uv: np.ndarray) -> Tuple[float, float]:
    """Mean U (even offsets) and mean V (odd offsets) of an interleaved plane."""
    if uv.size % 2:
        raise MalformedFrame(1, f"interleaved chroma has odd length {uv.size}")
    pairs = uv.size // 2
    u_sum = float(uv[0::2].sum(dtype=np.float64))
    v_sum = float(uv[1::2].sum(dtype=np.float64))
    return u_sum / pairs, v_sum / pairs


def _to_channel(value: float) -> float:
    """Clamp to [0, 1], scale to [0, 255], round half away from zero."""
    clamped = min(max(value, 0.0), 1.0)
    return float(math.floor(clamped * 255.0 + 0.5))
