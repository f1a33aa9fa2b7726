"""Tests for input normalization and the downscaler."""

from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st
from PIL import Image

from salcrop.exceptions import EmptyImageError
from salcrop.geometry import Size
from salcrop.vision import downscale, to_rgb_array, working_size


class TestToRgbArray:
    """Tests for to_rgb_array."""

    def test_rgb_array_passes_through(self) -> None:
        arr = np.zeros((4, 6, 3), dtype=np.uint8)
        out = to_rgb_array(arr)
        assert out.shape == (4, 6, 3)

    def test_rgba_array_drops_alpha(self) -> None:
        arr = np.full((4, 6, 4), 7, dtype=np.uint8)
        out = to_rgb_array(arr)
        assert out.shape == (4, 6, 3)
        assert (out == 7).all()

    def test_pil_grayscale_is_converted(self) -> None:
        """Test non-RGB PIL images are converted to RGB."""
        image = Image.new("L", (5, 3), color=90)
        out = to_rgb_array(image)
        assert out.shape == (3, 5, 3)
        assert (out == 90).all()

    def test_pil_rgba_is_converted(self) -> None:
        image = Image.new("RGBA", (2, 2), color=(10, 20, 30, 0))
        assert to_rgb_array(image)[0, 0].tolist() == [10, 20, 30]

    def test_rejects_2d_array(self) -> None:
        with pytest.raises(ValueError, match="Expected an"):
            to_rgb_array(np.zeros((4, 4), dtype=np.uint8))

    def test_rejects_wrong_dtype(self) -> None:
        with pytest.raises(ValueError, match="uint8"):
            to_rgb_array(np.zeros((4, 4, 3), dtype=np.float32))

    @pytest.mark.parametrize("shape", [(0, 5, 3), (5, 0, 3)])
    def test_empty_array_raises(self, shape: tuple[int, int, int]) -> None:
        with pytest.raises(EmptyImageError) as exc_info:
            to_rgb_array(np.zeros(shape, dtype=np.uint8))
        assert exc_info.value.width == shape[1]
        assert exc_info.value.height == shape[0]

    def test_empty_pil_image_raises(self) -> None:
        with pytest.raises(EmptyImageError):
            to_rgb_array(Image.new("RGB", (0, 10)))


class TestWorkingSize:
    """Tests for working_size."""

    def test_small_image_keeps_size(self) -> None:
        """Test images within the limit are never upsampled."""
        size = Size(width=100, height=80)
        assert working_size(size, 256) == (size, 1.0)

    def test_exact_limit_keeps_size(self) -> None:
        size = Size(width=256, height=10)
        assert working_size(size, 256) == (size, 1.0)

    def test_landscape_long_side_hits_limit(self) -> None:
        target, scale = working_size(Size(width=1000, height=500), 256)
        assert target == Size(width=256, height=128)
        assert scale == pytest.approx(0.256)

    def test_portrait_long_side_hits_limit(self) -> None:
        target, scale = working_size(Size(width=300, height=600), 256)
        assert target == Size(width=128, height=256)
        assert scale == pytest.approx(256 / 600)

    def test_short_side_never_below_one(self) -> None:
        target, _ = working_size(Size(width=10000, height=1), 256)
        assert target == Size(width=256, height=1)

    def test_rejects_non_positive_limit(self) -> None:
        with pytest.raises(ValueError, match="limit must be positive"):
            working_size(Size(width=10, height=10), 0)

    @given(
        width=st.integers(min_value=1, max_value=5000),
        height=st.integers(min_value=1, max_value=5000),
        limit=st.integers(min_value=8, max_value=512),
    )
    def test_long_side_within_limit(self, width: int, height: int, limit: int) -> None:
        """Test the working long side never exceeds the limit nor the original."""
        target, scale = working_size(Size(width=width, height=height), limit)
        assert target.long_side <= limit
        assert target.width <= width
        assert target.height <= height
        assert 0 < scale <= 1.0


class TestDownscale:
    """Tests for downscale."""

    def test_small_image_is_copied_read_only(self) -> None:
        arr = np.full((10, 20, 3), 50, dtype=np.uint8)
        working = downscale(arr, 256)
        assert working.scale_factor == 1.0
        assert working.size == Size(width=20, height=10)
        assert working.original_size == Size(width=20, height=10)
        assert not working.pixels.flags.writeable
        # The caller's array is untouched and still writeable
        assert arr.flags.writeable
        assert working.pixels is not arr

    def test_large_image_is_reduced(self) -> None:
        arr = np.full((256, 512, 3), 100, dtype=np.uint8)
        working = downscale(arr, 128)
        assert working.size == Size(width=128, height=64)
        assert working.original_size == Size(width=512, height=256)
        assert working.scale_factor == pytest.approx(0.25)
        assert working.pixels.shape == (64, 128, 3)
        assert working.pixels.dtype == np.uint8

    def test_area_averaging_preserves_uniform_colour(self) -> None:
        arr = np.empty((300, 400, 3), dtype=np.uint8)
        arr[:, :] = (200, 146, 113)
        working = downscale(arr, 100)
        assert (working.pixels == np.array([200, 146, 113], dtype=np.uint8)).all()

    def test_area_averaging_blends_stripes(self) -> None:
        """Test alternating black/white columns average to mid-gray."""
        arr = np.zeros((64, 64, 3), dtype=np.uint8)
        arr[:, ::2] = 255
        working = downscale(arr, 32)
        assert np.abs(working.pixels.astype(int) - 128).max() <= 1

    def test_accepts_pil_image(self) -> None:
        working = downscale(Image.new("RGB", (600, 300), color=(1, 2, 3)), 60)
        assert working.size == Size(width=60, height=30)

    def test_empty_image_raises(self) -> None:
        with pytest.raises(EmptyImageError):
            downscale(np.zeros((0, 0, 3), dtype=np.uint8), 256)
