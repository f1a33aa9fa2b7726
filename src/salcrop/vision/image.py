"""Input normalization and downscaling to the working resolution.

Callers hand in already-decoded pixels. This module turns them into an
RGB ``uint8`` array and reduces it so that its long side does not exceed
the working resolution limit, preserving the aspect ratio.

Algorithm Invariant:
    The working image is only ever downscaled (or passed through 1:1);
    it is never upsampled.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
from PIL import Image

from salcrop.exceptions import EmptyImageError
from salcrop.geometry import Size

ImageInput = Image.Image | npt.NDArray[np.uint8]

_RGB_CHANNELS = 3
_RGBA_CHANNELS = 4


@dataclass(frozen=True)
class WorkingImage:
    """Downscaled pixels that all analysis and the crop search run on.

    Attributes:
        pixels: Read-only RGB array of shape (height, width, 3), dtype uint8.
        original_size: Size of the caller's image.
        scale_factor: Working long side / original long side.
            1.0 means the image was small enough to be used as-is.
    """

    pixels: npt.NDArray[np.uint8]
    original_size: Size
    scale_factor: float

    @property
    def size(self) -> Size:
        """Return the working image dimensions."""
        height, width = self.pixels.shape[:2]
        return Size(width=width, height=height)


def to_rgb_array(image: ImageInput) -> npt.NDArray[np.uint8]:
    """Convert a PIL image or uint8 array into an RGB array.

    Alpha is dropped. Arrays are not copied when already RGB.

    Args:
        image: PIL Image (any mode convertible to RGB) or a uint8 array of
            shape (H, W, 3) or (H, W, 4).

    Returns:
        Array of shape (H, W, 3), dtype uint8.

    Raises:
        EmptyImageError: If the image has zero width or height.
        ValueError: If the array has an unsupported shape or dtype.
    """
    if isinstance(image, Image.Image):
        width, height = image.size
        if width == 0 or height == 0:
            raise EmptyImageError(width, height)
        if image.mode != "RGB":
            image = image.convert("RGB")
        return np.asarray(image, dtype=np.uint8)

    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] not in (_RGB_CHANNELS, _RGBA_CHANNELS):
        raise ValueError(
            f"Expected an (H, W, 3) or (H, W, 4) array, got shape {arr.shape}"
        )
    if arr.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {arr.dtype}")
    height, width = arr.shape[:2]
    if width == 0 or height == 0:
        raise EmptyImageError(width, height)
    return arr[:, :, :_RGB_CHANNELS]


def working_size(size: Size, limit: int) -> tuple[Size, float]:
    """Compute the working dimensions for an image.

    The long side becomes exactly ``limit``; the short side is rounded,
    never below 1px. Images already within the limit keep their size.

    Args:
        size: Original image size.
        limit: Maximum long side of the working image.

    Returns:
        Tuple of (working_size, scale_factor).

    Raises:
        ValueError: If limit is not positive.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    if size.long_side <= limit:
        return size, 1.0

    scale_factor = limit / size.long_side
    if size.width >= size.height:
        new_width = limit
        new_height = max(1, round(size.height * scale_factor))
    else:
        new_height = limit
        new_width = max(1, round(size.width * scale_factor))
    return Size(width=new_width, height=new_height), scale_factor


def downscale(image: ImageInput, limit: int) -> WorkingImage:
    """Reduce an image to the working resolution using area averaging.

    Uses box (area) resampling: every working pixel is the mean of the
    source pixels it covers.

    Args:
        image: Caller's decoded image.
        limit: Maximum long side of the working image.

    Returns:
        WorkingImage holding read-only pixels and the scale factor.

    Raises:
        EmptyImageError: If the image has zero width or height.
    """
    rgb = to_rgb_array(image)
    height, width = rgb.shape[:2]
    original_size = Size(width=width, height=height)
    target, scale_factor = working_size(original_size, limit)

    if scale_factor == 1.0:
        pixels = np.array(rgb, dtype=np.uint8, copy=True)
    else:
        resized = Image.fromarray(np.ascontiguousarray(rgb)).resize(
            target.to_tuple(),
            resample=Image.Resampling.BOX,
        )
        pixels = np.asarray(resized, dtype=np.uint8).copy()

    pixels.setflags(write=False)
    return WorkingImage(
        pixels=pixels,
        original_size=original_size,
        scale_factor=scale_factor,
    )
