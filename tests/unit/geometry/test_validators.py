"""Tests for crop bounds checking."""

from __future__ import annotations

import pytest

from salcrop.geometry import GeometryValidator, OutOfBoundsError, Region, Size

PHOTO = Size(width=640, height=480)


@pytest.fixture
def validator() -> GeometryValidator:
    return GeometryValidator()


class TestRequireInside:
    """Tests for GeometryValidator.require_inside."""

    def test_full_frame_passes(self, validator: GeometryValidator) -> None:
        region = PHOTO.as_region()
        assert validator.require_inside(region, PHOTO) is region

    def test_overhang_right(self, validator: GeometryValidator) -> None:
        with pytest.raises(OutOfBoundsError, match="right edge 650 > width 640"):
            validator.require_inside(Region(x=600, y=0, width=50, height=10), PHOTO)

    def test_reports_every_edge(self, validator: GeometryValidator) -> None:
        """Test both overhanging edges appear in one message."""
        with pytest.raises(OutOfBoundsError) as exc_info:
            validator.require_inside(Region(x=600, y=470, width=50, height=20), PHOTO)
        message = str(exc_info.value)
        assert "right edge 650 > width 640" in message
        assert "bottom edge 490 > height 480" in message

    def test_error_carries_context(self, validator: GeometryValidator) -> None:
        region = Region(x=0, y=0, width=10, height=500)
        with pytest.raises(OutOfBoundsError) as exc_info:
            validator.require_inside(region, PHOTO)
        assert exc_info.value.region == region
        assert exc_info.value.bounds == PHOTO
        assert str(exc_info.value).endswith("(region=(0, 0, 10, 500), bounds=(640, 480))")

    @pytest.mark.parametrize(
        ("region", "expected"),
        [
            (Region(x=639, y=479, width=1, height=1), True),
            (Region(x=640, y=0, width=1, height=1), False),
            (Region(x=0, y=0, width=640, height=481), False),
        ],
    )
    def test_fits(self, validator: GeometryValidator, region: Region, expected: bool) -> None:
        assert validator.fits(region, PHOTO) is expected


class TestShiftInside:
    """Tests for GeometryValidator.shift_inside."""

    def test_slides_without_shrinking(self, validator: GeometryValidator) -> None:
        region = Region(x=620, y=470, width=40, height=30)
        assert validator.shift_inside(region, PHOTO) == Region(x=600, y=450, width=40, height=30)

    def test_moves_only_overhanging_axis(self, validator: GeometryValidator) -> None:
        region = Region(x=10, y=470, width=40, height=30)
        assert validator.shift_inside(region, PHOTO) == Region(x=10, y=450, width=40, height=30)

    def test_fitting_region_returned_as_is(self, validator: GeometryValidator) -> None:
        region = Region(x=5, y=5, width=40, height=30)
        assert validator.shift_inside(region, PHOTO) is region

    def test_rejects_region_larger_than_image(self, validator: GeometryValidator) -> None:
        with pytest.raises(OutOfBoundsError, match="larger than image"):
            validator.shift_inside(Region(x=0, y=0, width=700, height=10), PHOTO)
