"""Coordinate transformation utilities for salcrop.

All analysis happens on a downscaled working image. These helpers move
regions between the original image and the working image.

Coordinate Systems:
    - Original: Pixel coordinates of the caller's image
    - Working: Pixel coordinates of the downscaled analysis image

Transform Direction Conventions:
    - to_working: Multiply by the scale factor (scale <= 1.0)
    - to_original: Divide by the scale factor
"""

from __future__ import annotations

import math

from salcrop.geometry.primitives import Region, Size
from salcrop.geometry.validators import GeometryValidator

# Absorbs float noise such as 300 * 0.1 == 30.000000000000004
_ROUNDING_EPSILON = 1e-9

_VALIDATOR = GeometryValidator()

__all__ = [
    "aspect_error",
    "crop_to_original",
    "region_to_working",
    "snap_to_aspect",
]


def aspect_error(width: int, height: int, aspect: float) -> float:
    """Relative difference between width/height and a target aspect ratio.

    Args:
        width: Rectangle width in pixels.
        height: Rectangle height in pixels.
        aspect: Target width/height ratio.

    Returns:
        |width/height - aspect| / aspect.
    """
    return abs(width / height - aspect) / aspect


def snap_to_aspect(
    ideal_width: float,
    ideal_height: float,
    aspect: float,
    bounds: Size,
) -> tuple[int, int] | None:
    """Pick the integer size closest to an ideal rectangle of a given ratio.

    Width-driven and height-driven sizes (floor and ceil of the ideal,
    the other side derived from the ratio) that fit inside bounds are
    compared; the smallest aspect error wins, ties going to the width
    closest to the ideal, then to the smaller size.

    Args:
        ideal_width: Real-valued target width.
        ideal_height: Real-valued target height.
        aspect: Target width/height ratio.
        bounds: Enclosing image size.

    Returns:
        (width, height) tuple, or None if no candidate fits.
    """
    sizes: set[tuple[int, int]] = set()
    for w in (math.floor(ideal_width), math.ceil(ideal_width)):
        sizes.add((w, round(w / aspect)))
    for h in (math.floor(ideal_height), math.ceil(ideal_height)):
        sizes.add((round(h * aspect), h))

    fitting = [
        (w, h)
        for w, h in sizes
        if 1 <= w <= bounds.width and 1 <= h <= bounds.height
    ]
    if not fitting:
        return None
    return min(
        fitting,
        key=lambda wh: (aspect_error(wh[0], wh[1], aspect), abs(wh[0] - ideal_width), wh),
    )


def region_to_working(region: Region, scale: float, bounds: Size) -> Region:
    """Transform a Region from original to working coordinates.

    The origin is floored and the far edge is ceiled so that every region
    covers at least one working pixel. The result is clipped to the working
    bounds; a region whose origin rounds onto the far border keeps a 1px
    sliver along that border.

    Args:
        region: Region in original-image coordinates, inside the image.
        scale: Working/original scale factor (<= 1.0).
        bounds: Working image size.

    Returns:
        Region in working coordinates, at least 1px in each dimension.

    Raises:
        ValueError: If scale is not positive.
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")

    x0 = min(math.floor(region.x * scale + _ROUNDING_EPSILON), bounds.width - 1)
    y0 = min(math.floor(region.y * scale + _ROUNDING_EPSILON), bounds.height - 1)
    x1 = math.ceil(region.right * scale - _ROUNDING_EPSILON)
    y1 = math.ceil(region.bottom * scale - _ROUNDING_EPSILON)
    x1 = min(max(x1, x0 + 1), bounds.width)
    y1 = min(max(y1, y0 + 1), bounds.height)

    return Region(x=x0, y=y0, width=x1 - x0, height=y1 - y0)


def crop_to_original(
    region: Region,
    scale: float,
    aspect: float,
    bounds: Size,
) -> Region:
    """Transform a crop Region from working to original coordinates.

    The size is re-derived from the target aspect ratio with
    ``snap_to_aspect`` instead of dividing both sides independently. The
    origin is rounded, then shifted so the crop stays inside the image.

    Args:
        region: Crop in working coordinates.
        scale: Working/original scale factor (<= 1.0).
        aspect: Requested width/height ratio.
        bounds: Original image size.

    Returns:
        Crop in original-image coordinates, fully inside bounds.

    Raises:
        ValueError: If scale is not positive.
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")
    if scale == 1.0:
        return region

    ideal_w = region.width / scale
    ideal_h = region.height / scale

    snapped = snap_to_aspect(ideal_w, ideal_h, aspect, bounds)
    if snapped is None:
        width = min(max(1, round(ideal_w)), bounds.width)
        height = min(max(1, round(ideal_h)), bounds.height)
    else:
        width, height = snapped

    x = max(0, round(region.x / scale))
    y = max(0, round(region.y / scale))
    return _VALIDATOR.shift_inside(
        Region(x=x, y=y, width=width, height=height), bounds
    )
