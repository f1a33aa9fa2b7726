"""Tests for the boost accumulator."""

from __future__ import annotations

import numpy as np
import pytest

from salcrop.core import BoostRegion, accumulate_boost
from salcrop.exceptions import InvalidBoostRegionError
from salcrop.geometry import Size

SQUARE = Size(width=100, height=100)


class TestAccumulateBoost:
    """Tests for accumulate_boost."""

    def test_no_regions_is_zero(self) -> None:
        boost = accumulate_boost((), SQUARE, SQUARE, 1.0)
        assert boost.size == SQUARE
        assert boost.total() == 0.0

    def test_region_receives_weight(self) -> None:
        region = BoostRegion(x=0, y=0, width=50, height=50, weight=2.0)
        boost = accumulate_boost((region,), SQUARE, SQUARE, 1.0)
        assert (boost.values[:50, :50] == 2.0).all()
        assert (boost.values[50:, :] == 0.0).all()
        assert (boost.values[:, 50:] == 0.0).all()

    def test_overlapping_regions_sum(self) -> None:
        regions = (
            BoostRegion(x=0, y=0, width=20, height=20, weight=1.0),
            BoostRegion(x=10, y=10, width=20, height=20, weight=2.0),
        )
        boost = accumulate_boost(regions, SQUARE, SQUARE, 1.0)
        assert boost.values[5, 5] == 1.0
        assert boost.values[15, 15] == 3.0
        assert boost.values[25, 25] == 2.0

    def test_partial_region_is_clipped(self) -> None:
        region = BoostRegion(x=90, y=95, width=20, height=20)
        boost = accumulate_boost((region,), SQUARE, SQUARE, 1.0)
        assert boost.total() == 10 * 5
        assert (boost.values[95:, 90:] == 1.0).all()

    def test_region_mapped_to_working_coordinates(self) -> None:
        original = Size(width=1000, height=1000)
        working = Size(width=100, height=100)
        region = BoostRegion(x=200, y=300, width=100, height=50)
        boost = accumulate_boost((region,), original, working, 0.1)
        assert (boost.values[30:35, 20:30] == 1.0).all()
        assert boost.total() == 10 * 5

    def test_tiny_region_covers_a_working_pixel(self) -> None:
        original = Size(width=1000, height=1000)
        working = Size(width=100, height=100)
        region = BoostRegion(x=5, y=5, width=1, height=1, weight=4.0)
        boost = accumulate_boost((region,), original, working, 0.1)
        assert boost.values[0, 0] == 4.0
        assert boost.total() == 4.0

    def test_region_outside_image_raises(self) -> None:
        region = BoostRegion(x=200, y=200, width=10, height=10)
        with pytest.raises(InvalidBoostRegionError, match="outside") as exc_info:
            accumulate_boost((region,), SQUARE, SQUARE, 1.0)
        assert exc_info.value.region == region

    def test_region_touching_right_edge_is_outside(self) -> None:
        region = BoostRegion(x=100, y=0, width=10, height=10)
        with pytest.raises(InvalidBoostRegionError):
            accumulate_boost((region,), SQUARE, SQUARE, 1.0)

    def test_non_positive_weight_raises(self) -> None:
        """Test a region built without validation is still rejected."""
        region = BoostRegion.model_construct(x=0, y=0, width=5, height=5, weight=0.0)
        with pytest.raises(InvalidBoostRegionError, match="weight"):
            accumulate_boost((region,), SQUARE, SQUARE, 1.0)

    def test_result_is_read_only(self) -> None:
        boost = accumulate_boost((BoostRegion(x=0, y=0, width=1, height=1),), SQUARE, SQUARE, 1.0)
        assert not boost.values.flags.writeable
        assert np.count_nonzero(boost.values) == 1
