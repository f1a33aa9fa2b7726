"""Pixel-space value objects shared by every stage of the crop pipeline.

Coordinates are integers with the origin at the top-left corner of the
image; x runs to the right and y runs down. Rectangles are half-open, so a
Region covers columns ``x .. right - 1`` and rows ``y .. bottom - 1``.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field


class Point(BaseModel, frozen=True):
    """A single pixel position."""

    x: int = Field(..., ge=0, description="Column index")
    y: int = Field(..., ge=0, description="Row index")


class Size(BaseModel, frozen=True):
    """Width and height of an image or crop, both at least one pixel."""

    width: int = Field(..., gt=0, description="Columns")
    height: int = Field(..., gt=0, description="Rows")

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def long_side(self) -> int:
        return self.width if self.width >= self.height else self.height

    def as_region(self) -> Region:
        """The rectangle covering a whole image of this size."""
        return Region(x=0, y=0, width=self.width, height=self.height)

    def to_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_tuple(cls, dims: tuple[int, int]) -> Self:
        width, height = dims
        return cls(width=width, height=height)


class Region(BaseModel, frozen=True):
    """An axis-aligned rectangle of pixels.

    Crop candidates, boost regions and the returned crop are all Regions.
    Which image the coordinates refer to (working or original) is up to the
    caller.

    Attributes:
        x: Leftmost column.
        y: Topmost row.
        width: Number of columns, at least one.
        height: Number of rows, at least one.
    """

    x: int = Field(..., ge=0, description="Leftmost column")
    y: int = Field(..., ge=0, description="Topmost row")
    width: int = Field(..., gt=0, description="Number of columns")
    height: int = Field(..., gt=0, description="Number of rows")

    @property
    def right(self) -> int:
        """First column past the region."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """First row past the region."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def to_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    def center_distance_sq(self, bounds: Size) -> int:
        """Squared offset of this region's centre from the centre of ``bounds``.

        Both centres are taken in doubled coordinates, so the value is an
        exact integer equal to four times the squared Euclidean distance.
        Ordering by it is therefore free of floating-point noise.
        """
        dx = 2 * self.x + self.width - bounds.width
        dy = 2 * self.y + self.height - bounds.height
        return dx * dx + dy * dy

    def contains_point(self, point: Point) -> bool:
        return self.x <= point.x < self.right and self.y <= point.y < self.bottom

    def contains(self, other: Region) -> bool:
        """True when ``other`` lies entirely inside this region."""
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def intersection(self, other: Region) -> Region | None:
        """Overlap of the two regions, or None when they share no pixel.

        Regions that only touch along an edge do not overlap.
        """
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        width = min(self.right, other.right) - left
        height = min(self.bottom, other.bottom) - top
        if width <= 0 or height <= 0:
            return None
        return Region(x=left, y=top, width=width, height=height)
