"""Custom exceptions for crop selection.

Every failure the crop pipeline can report is a subclass of ``CropError``,
carrying the offending values so that the calling layer can translate
them into user-facing messages. The pipeline performs no I/O, so none of
these errors are transient and nothing is retried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from salcrop.geometry import Size


class CropError(Exception):
    """Base exception for all crop selection errors."""

    def __init__(self, message: str) -> None:
        """Initialize crop error.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(self._format_message())

    def _context(self) -> dict[str, Any]:
        return {}

    def _format_message(self) -> str:
        """Format error message with context values if available."""
        context = self._context()
        if not context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in context.items())
        return f"{self.message} ({details})"


class EmptyImageError(CropError):
    """Raised when the input image has zero width or height."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        super().__init__("Image has no pixels")

    def _context(self) -> dict[str, Any]:
        return {"width": self.width, "height": self.height}


class InvalidCropSizeError(CropError):
    """Raised when no crop of the requested size or aspect ratio can be made.

    This error is raised when:
    - The requested width or height is zero or negative
    - No integer rectangle inside the image matches the requested aspect
      ratio within tolerance at any scale
    """

    def __init__(
        self,
        message: str,
        *,
        requested: tuple[int, int],
        image_size: Size | None = None,
    ) -> None:
        """Initialize crop size error.

        Args:
            message: Human-readable error description.
            requested: Requested (width, height) of the output.
            image_size: Size of the image the crop was searched in.
        """
        self.requested = requested
        self.image_size = image_size
        super().__init__(message)

    def _context(self) -> dict[str, Any]:
        context: dict[str, Any] = {"requested": self.requested}
        if self.image_size is not None:
            context["image_size"] = self.image_size.to_tuple()
        return context


class InvalidBoostRegionError(CropError):
    """Raised when a boost region has a non-positive weight or misses the image."""

    def __init__(self, message: str, *, region: Any = None) -> None:
        self.region = region
        super().__init__(message)

    def _context(self) -> dict[str, Any]:
        if self.region is None:
            return {}
        return {"region": self.region}


class InvalidConfigError(CropError):
    """Raised when crop options are out of range or inconsistent.

    Attributes:
        errors: Structured validation errors as reported by pydantic.
    """

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)

    def _context(self) -> dict[str, Any]:
        if not self.errors:
            return {}
        fields = sorted(
            {".".join(str(p) for p in err["loc"]) for err in self.errors if err.get("loc")}
        )
        if not fields:
            # Model-level checks carry no field location
            return {"reason": self.errors[0].get("msg", "")}
        return {"fields": ", ".join(fields)}
