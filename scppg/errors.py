"""
Per-frame decode errors.

Every error here is fatal for one frame only.  The caller drops the frame
and waits for the next one; nothing in this hierarchy should stop a
camera stream.  A finger that is not on the lens is *not* an error; it
is an ordinary sample with NaN colour channels.
"""

from __future__ import annotations

from typing import Any


class DecodeError(ValueError):
    """Base class for frames the decoder refuses to turn into a sample."""


class UnsupportedLayout(DecodeError):
    """The frame has a plane count other than 2 (interleaved) or 3 (planar)."""

    def __init__(self, plane_count: int) -> None:
        super().__init__(
            f"Unsupported frame layout: {plane_count} plane(s), expected 2 or 3"
        )
        self.plane_count = plane_count


class UnsupportedRange(DecodeError):
    """
    The colour-range classification is missing or unrecognised.

    Usually a configuration bug upstream, so callers should log it loudly
    rather than swallow it.
    """

    def __init__(self, value: Any) -> None:
        super().__init__(f"Unsupported colour range: {value!r}")
        self.value = value


class MalformedFrame(DecodeError):
    """A plane is empty, not a byte buffer, or has an impossible size."""

    def __init__(self, plane_index: int, reason: str) -> None:
        super().__init__(f"Malformed plane {plane_index}: {reason}")
        self.plane_index = plane_index
        self.reason = reason
