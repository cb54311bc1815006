"""
Unit tests for the YUV frame decoder.
Run with:  pytest tests/test_frame_decoder.py
"""

from __future__ import annotations

import array
import math

import numpy as np
import pytest

from scppg.color_range import ColorRange
from scppg.errors import MalformedFrame, UnsupportedLayout, UnsupportedRange
from scppg.frame import ChromaLayout, RawFrame
from scppg.frame_decoder import DecodedColor, decode


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _planar(y, u, v, color_range=ColorRange.FULL, n: int = 16) -> RawFrame:
    """Uniform 3-plane frame."""
    return RawFrame(
        (bytes([y] * n), bytes([u] * (n // 4)), bytes([v] * (n // 4))),
        color_range,
    )


def _interleaved(y, u, v, color_range=ColorRange.FULL, n: int = 16) -> RawFrame:
    """Uniform 2-plane frame with U,V pairs in plane 1."""
    return RawFrame((bytes([y] * n), bytes([u, v] * (n // 4))), color_range)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

class TestConversion:

    def test_limited_range_mid_grey(self):
        """Y=U=V=128 in video range: neutral chroma, yN = 112/219."""
        decoded = decode(_planar(128, 128, 128, ColorRange.LIMITED))
        assert decoded.red == pytest.approx(130, abs=1)
        assert decoded.green == pytest.approx(130, abs=1)
        assert decoded.blue == pytest.approx(130, abs=1)
        assert decoded.red == decoded.green == decoded.blue

    def test_full_range_reddish_frame(self):
        decoded = decode(_planar(100, 110, 180, ColorRange.FULL))
        assert decoded == DecodedColor(174.0, 69.0, 69.0, 100.0)

    def test_luma_is_raw_plane_average(self):
        y_plane = bytes([10, 20, 30, 40])
        frame = RawFrame((y_plane, bytes([128]), bytes([128])), ColorRange.LIMITED)
        assert decode(frame).luma == pytest.approx(25.0)

    def test_output_is_clamped(self):
        hot = decode(_planar(255, 255, 255, ColorRange.LIMITED))
        cold = decode(_planar(0, 0, 0, ColorRange.LIMITED))
        for value in (*hot[:3], *cold[:3]):
            assert 0.0 <= value <= 255.0

    def test_channels_are_whole_numbers(self):
        rng = np.random.default_rng(42)
        for _ in range(50):
            y, u, v = (int(x) for x in rng.integers(0, 256, 3))
            decoded = decode(_interleaved(y, u, v, ColorRange.FULL))
            for value in decoded[:3]:
                assert math.isfinite(value)
                assert value == float(int(value))
                assert 0.0 <= value <= 255.0

    def test_random_planes_stay_in_range(self):
        rng = np.random.default_rng(7)
        for color_range in ColorRange:
            for _ in range(20):
                planes = (
                    rng.integers(0, 256, 64, dtype=np.uint8),
                    rng.integers(0, 256, 16, dtype=np.uint8),
                    rng.integers(0, 256, 16, dtype=np.uint8),
                )
                decoded = decode(RawFrame(planes, color_range))
                assert all(0.0 <= c <= 255.0 for c in decoded[:3])

    def test_luma_monotonic(self):
        """For fixed chroma, brighter luma never darkens any channel."""
        for u, v in ((128, 128), (100, 170), (200, 60)):
            previous = None
            for y in range(16, 236):
                current = decode(_planar(y, u, v, ColorRange.LIMITED))[:3]
                if previous is not None:
                    assert all(c >= p for c, p in zip(current, previous))
                previous = current

    def test_numpy_planes_accepted(self):
        planes = (
            np.full((4, 4), 128, dtype=np.uint8),
            np.full((2, 2), 128, dtype=np.uint8),
            np.full((2, 2), 128, dtype=np.uint8),
        )
        assert decode(RawFrame(planes, ColorRange.LIMITED)) == decode(
            _planar(128, 128, 128, ColorRange.LIMITED)
        )

    def test_idempotent(self):
        frame = _interleaved(90, 120, 170, ColorRange.LIMITED)
        assert decode(frame) == decode(frame)


# ---------------------------------------------------------------------------
# Chroma layouts
# ---------------------------------------------------------------------------

class TestLayouts:

    def test_layout_from_plane_count(self):
        assert _planar(1, 2, 3).layout is ChromaLayout.PLANAR
        assert _interleaved(1, 2, 3).layout is ChromaLayout.INTERLEAVED

    def test_planar_and_interleaved_agree(self):
        u_vals = [100, 110, 120, 130]
        v_vals = [150, 160, 170, 180]
        y_plane = bytes(range(60, 76))
        planar = RawFrame((y_plane, bytes(u_vals), bytes(v_vals)), ColorRange.LIMITED)
        uv = bytes(b for pair in zip(u_vals, v_vals) for b in pair)
        interleaved = RawFrame((y_plane, uv), ColorRange.LIMITED)
        assert decode(planar) == decode(interleaved)

    def test_interleaved_u_at_even_offsets(self):
        """Swapping the UV stride would swap the blue and red tints."""
        bluish = decode(_interleaved(120, 200, 100, ColorRange.FULL))
        reddish = decode(_interleaved(120, 100, 200, ColorRange.FULL))
        assert bluish.blue > bluish.red
        assert reddish.red > reddish.blue

    @pytest.mark.parametrize("count", [0, 1, 4])
    def test_unsupported_plane_count(self, count):
        frame = RawFrame(tuple(bytes([128] * 4) for _ in range(count)), ColorRange.FULL)
        with pytest.raises(UnsupportedLayout) as info:
            decode(frame)
        assert info.value.plane_count == count


# ---------------------------------------------------------------------------
# Malformed input
# ---------------------------------------------------------------------------

class TestMalformedFrames:

    def test_empty_luma_plane(self):
        frame = RawFrame((b"", bytes([128]), bytes([128])), ColorRange.FULL)
        with pytest.raises(MalformedFrame) as info:
            decode(frame)
        assert info.value.plane_index == 0

    def test_empty_chroma_plane(self):
        frame = RawFrame((bytes([128] * 4), b"", bytes([128])), ColorRange.FULL)
        with pytest.raises(MalformedFrame):
            decode(frame)

    def test_odd_interleaved_chroma(self):
        frame = RawFrame((bytes([128] * 4), bytes([128, 128, 128])), ColorRange.FULL)
        with pytest.raises(MalformedFrame) as info:
            decode(frame)
        assert info.value.plane_index == 1

    def test_empty_interleaved_chroma(self):
        frame = RawFrame((bytes([128] * 4), b""), ColorRange.FULL)
        with pytest.raises(MalformedFrame):
            decode(frame)

    def test_non_byte_plane(self):
        frame = RawFrame(("abc", bytes([128]), bytes([128])), ColorRange.FULL)
        with pytest.raises(MalformedFrame):
            decode(frame)

    def test_wrong_dtype(self):
        planes = (np.zeros(4, dtype=np.float32), bytes([128]), bytes([128]))
        with pytest.raises(MalformedFrame):
            decode(RawFrame(planes, ColorRange.FULL))

    @pytest.mark.parametrize("bad_range", [None, "full", 1])
    def test_unsupported_range(self, bad_range):
        frame = RawFrame((bytes([128] * 4), bytes([128]), bytes([128])), bad_range)
        with pytest.raises(UnsupportedRange):
            decode(frame)

    @pytest.mark.parametrize("plane", [
        array.array("f", [100.0] * 16),
        array.array("H", [100] * 16),
        memoryview(bytes([100] * 32)).cast("H"),
        memoryview(bytes([100] * 16)).cast("b"),
    ])
    def test_wide_or_signed_items_rejected(self, plane):
        frame = RawFrame((plane, bytes([128]), bytes([128])), ColorRange.FULL)
        with pytest.raises(MalformedFrame) as info:
            decode(frame)
        assert info.value.plane_index == 0

    def test_strided_byte_view_accepted(self):
        """Every other byte of a padded buffer: luma is the mean of the view."""
        y_view = memoryview(bytes([100, 7] * 16))[::2]
        frame = RawFrame((y_view, bytes([128]), bytes([128])), ColorRange.FULL)
        assert decode(frame).luma == pytest.approx(100.0)

    def test_bytearray_planes_accepted(self):
        frame = RawFrame(
            (bytearray([100] * 16), bytearray([110, 180] * 4)), ColorRange.FULL
        )
        assert decode(frame) == DecodedColor(174.0, 69.0, 69.0, 100.0)
