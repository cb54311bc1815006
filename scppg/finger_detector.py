"""
Finger-on-lens classifier.

With the torch on and a fingertip pressed against the lens, the frame is
dominated by red (blood / tissue transmits red and absorbs green and
blue).  An uncovered or badly covered lens gives a spectrally flatter
frame.  The check below is a single-frame heuristic: no temporal
smoothing, no hysteresis.  Consumers should expect isolated invalid
frames and apply their own windowing.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import NamedTuple

from scppg.sample import INVALID


class VerdictReason(Enum):
    FINGER_DETECTED = auto()
    LOW_RED_RATIO   = auto()   # red share of total power under threshold
    DEGENERATE      = auto()   # zero total power (black frame)


class Verdict(NamedTuple):
    """Classification of one RGB triple; channels are NaN when invalid."""

    valid: bool
    red: float
    green: float
    blue: float
    reason: VerdictReason


def classify(
    red: float,
    green: float,
    blue: float,
    threshold_percent: int,
) -> Verdict:
    """
    Decide whether ``(red, green, blue)`` looks like a finger on the lens.

    Parameters
    ----------
    red, green, blue:
        Calibrated channel intensities (0 – 255).
    threshold_percent:
        Minimum red share of ``red + green + blue``, in percent (0 – 100).
        The comparison is inclusive: a ratio exactly at the threshold is
        valid.  Lower values are more permissive.
    """
    if not 0 <= threshold_percent <= 100:
        raise ValueError(
            f"threshold_percent must be within [0, 100], got {threshold_percent}"
        )

    total_power = red + green + blue
    if total_power <= 0:
        return Verdict(False, INVALID, INVALID, INVALID, VerdictReason.DEGENERATE)

    red_ratio = red / total_power
    if red_ratio >= threshold_percent / 100.0:
        return Verdict(True, red, green, blue, VerdictReason.FINGER_DETECTED)
    return Verdict(False, INVALID, INVALID, INVALID, VerdictReason.LOW_RED_RATIO)
