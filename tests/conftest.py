"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import numpy as np
import numpy.typing as npt
import pytest

from salcrop.config import Settings
from salcrop.utils.logging import clear_correlation_context, configure_logging


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset correlation context between tests."""
    clear_correlation_context()
    yield
    clear_correlation_context()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
    )


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


# Mid-gray: no edges, no saturation, outside the skin envelope
GRAY = (128, 128, 128)
# Close to the reference skin direction, mid brightness
SKIN = (200, 146, 113)

Color = tuple[int, int, int]
Box = tuple[int, int, int, int]
ImageFactory = Callable[..., npt.NDArray[np.uint8]]


@pytest.fixture
def make_image() -> ImageFactory:
    """Factory for solid RGB images with optional painted (x, y, w, h) boxes."""

    def _make(
        width: int,
        height: int,
        color: Color = GRAY,
        boxes: tuple[tuple[Box, Color], ...] = (),
    ) -> npt.NDArray[np.uint8]:
        image = np.empty((height, width, 3), dtype=np.uint8)
        image[:, :] = color
        for (x, y, w, h), box_color in boxes:
            image[y : y + h, x : x + w] = box_color
        return image

    return _make


@pytest.fixture
def gray_image(make_image: ImageFactory) -> npt.NDArray[np.uint8]:
    """100x100 featureless mid-gray image."""
    return make_image(100, 100)


@pytest.fixture
def noise_image() -> npt.NDArray[np.uint8]:
    """120x80 reproducible random RGB image."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(80, 120, 3), dtype=np.uint8)


@pytest.fixture
def skin_square_image(make_image: ImageFactory) -> npt.NDArray[np.uint8]:
    """200x100 gray image with a 30x30 skin-coloured square centred at (165, 55)."""
    return make_image(200, 100, boxes=(((150, 40, 30, 30), SKIN),))
