"""Bounds checks for crops and candidate rectangles."""

from __future__ import annotations

from salcrop.geometry.primitives import Region, Size


class OutOfBoundsError(Exception):
    """A region does not fit the image it was checked against.

    Attributes:
        region: The offending region.
        bounds: Size of the image.
    """

    def __init__(self, message: str, *, region: Region, bounds: Size) -> None:
        self.region = region
        self.bounds = bounds
        super().__init__(
            f"{message} (region={region.to_tuple()}, bounds={bounds.to_tuple()})"
        )


class GeometryValidator:
    """Checks and repairs regions relative to an image size.

    Holds no state; one instance can be shared freely.
    """

    def fits(self, region: Region, bounds: Size) -> bool:
        # x and y are non-negative by construction
        return region.right <= bounds.width and region.bottom <= bounds.height

    def require_inside(self, region: Region, bounds: Size) -> Region:
        """Return ``region`` unchanged, or raise if any edge overhangs.

        Raises:
            OutOfBoundsError: Naming every overhanging edge.
        """
        if self.fits(region, bounds):
            return region

        problems = []
        if region.right > bounds.width:
            problems.append(f"right edge {region.right} > width {bounds.width}")
        if region.bottom > bounds.height:
            problems.append(f"bottom edge {region.bottom} > height {bounds.height}")
        raise OutOfBoundsError(
            "Region outside image: " + ", ".join(problems),
            region=region,
            bounds=bounds,
        )

    def shift_inside(self, region: Region, bounds: Size) -> Region:
        """Slide a region left and up until it fits, keeping its size.

        Crops carry the requested aspect ratio in their dimensions, so they
        are moved rather than trimmed.

        Raises:
            OutOfBoundsError: If the region is wider or taller than bounds.
        """
        if region.width > bounds.width or region.height > bounds.height:
            raise OutOfBoundsError("Region larger than image", region=region, bounds=bounds)
        if self.fits(region, bounds):
            return region
        return region.model_copy(
            update={
                "x": min(region.x, bounds.width - region.width),
                "y": min(region.y, bounds.height - region.height),
            }
        )
