"""Pixel geometry for salcrop.

Key Components:
    - Primitives: Point, Size, Region value objects
    - Validators: bounds checks and shifting crops back inside an image
    - Transforms: moving regions between original and working coordinates

Example:
    from salcrop.geometry import Region, Size, crop_to_original

    working_crop = Region(x=10, y=5, width=64, height=36)
    crop_to_original(working_crop, 0.25, 16 / 9, Size(width=1024, height=768))
"""

from salcrop.geometry.primitives import Point, Region, Size
from salcrop.geometry.transforms import (
    aspect_error,
    crop_to_original,
    region_to_working,
    snap_to_aspect,
)
from salcrop.geometry.validators import GeometryValidator, OutOfBoundsError

__all__ = [
    "GeometryValidator",
    "OutOfBoundsError",
    "Point",
    "Region",
    "Size",
    "aspect_error",
    "crop_to_original",
    "region_to_working",
    "snap_to_aspect",
]
