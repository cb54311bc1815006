"""
SCPPG: smartphone-camera photoplethysmography signal extraction.
Cover the camera lens with a fingertip; each raw YUV frame is reduced to
calibrated RGB intensities plus a raw luma value, and frames that do not
look like a covered lens are marked invalid (NaN colour channels).
"""

from scppg.color_range import ColorRange
from scppg.errors import DecodeError, MalformedFrame, UnsupportedLayout, UnsupportedRange
from scppg.frame import ChromaLayout, RawFrame
from scppg.pipeline import process_frame
from scppg.sample import INVALID, CalibratedSample

__version__ = "0.1.0"
__author__ = "scppg"

__all__ = [
    "CalibratedSample",
    "ChromaLayout",
    "ColorRange",
    "DecodeError",
    "INVALID",
    "MalformedFrame",
    "RawFrame",
    "UnsupportedLayout",
    "UnsupportedRange",
    "process_frame",
]
