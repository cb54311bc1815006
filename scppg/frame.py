"""
Raw camera frame as handed over by the camera collaborator.

Plane 0 is always luma (Y).  The chroma layout follows from the plane
count:

* 3 planes – separate U and V planes (e.g. Android ``YUV_420_888``,
  OpenCV I420).
* 2 planes – plane 1 interleaves U,V byte pairs (e.g. iOS
  ``420YpCbCr8BiPlanarVideoRange``, NV12).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Tuple

from scppg.color_range import ColorRange
from scppg.errors import UnsupportedLayout


class ChromaLayout(Enum):
    PLANAR      = auto()   # Y, U, V
    INTERLEAVED = auto()   # Y, UVUV…


_LAYOUT_BY_PLANE_COUNT: dict[int, ChromaLayout] = {
    3: ChromaLayout.PLANAR,
    2: ChromaLayout.INTERLEAVED,
}


@dataclass(frozen=True, eq=False)
class RawFrame:
    """
    One captured frame.

    Parameters
    ----------
    planes:
        Byte buffers (``bytes``, ``bytearray``, ``memoryview`` or ``uint8``
        numpy arrays), luma first.
    color_range:
        Numeric range convention of the capture pipeline.  Kept as given;
        the decoder rejects anything that is not a :class:`ColorRange`.
    """

    planes: Tuple[Any, ...]
    color_range: ColorRange

    def __post_init__(self) -> None:
        object.__setattr__(self, "planes", tuple(self.planes))

    @property
    def plane_count(self) -> int:
        return len(self.planes)

    @property
    def layout(self) -> ChromaLayout:
        """Chroma layout implied by the plane count; raises :class:`UnsupportedLayout`."""
        try:
            return _LAYOUT_BY_PLANE_COUNT[self.plane_count]
        except KeyError:
            raise UnsupportedLayout(self.plane_count) from None
