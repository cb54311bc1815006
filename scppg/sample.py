"""Calibrated PPG sample emitted once per accepted frame."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

# Marker for colour channels of frames without a finger on the lens.
INVALID = float("nan")


@dataclass(frozen=True)
class CalibratedSample:
    """
    RGB intensities, raw luma and capture time of one frame.

    ``red``, ``green`` and ``blue`` are either all finite values in
    [0, 255] or all :data:`INVALID` (NaN) when no finger covers the lens.
    ``luma`` is always reported, even for invalid samples.

    Any NaN channel is stored as the shared :data:`INVALID` object, so two
    invalid samples with the same luma and timestamp compare equal even
    though ``nan != nan``.
    """

    red: float
    green: float
    blue: float
    luma: float
    timestamp: datetime

    def __post_init__(self) -> None:
        flags = [math.isnan(c) for c in (self.red, self.green, self.blue)]
        if any(flags) and not all(flags):
            raise ValueError(
                "Invalid sentinel must mark all colour channels, got "
                f"r={self.red} g={self.green} b={self.blue}"
            )
        if all(flags):
            for name in ("red", "green", "blue"):
                object.__setattr__(self, name, INVALID)

    @property
    def is_valid(self) -> bool:
        return not math.isnan(self.red)

    finger_detected = is_valid

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return self.red, self.green, self.blue
