"""Exception hierarchy for hdrtools."""

from __future__ import annotations


class HdrToolsError(Exception):
    """Base class for all hdrtools failures."""


class ImageCodecError(HdrToolsError, RuntimeError):
    """Raised when the codec layer cannot read or write an image."""


class ImageDecodeError(ImageCodecError):
    """Raised when an image file exists but cannot be decoded."""


class ImageEncodeError(ImageCodecError):
    """Raised when an image buffer cannot be written to disk."""


class LayerSizeMismatchError(HdrToolsError, ValueError):
    """Raised when compositing layers that do not share the first layer's size."""

    def __init__(self, index: int, expected: tuple[int, int], actual: tuple[int, int]):
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"layer {index} is {actual[0]}x{actual[1]}, "
            f"expected {expected[0]}x{expected[1]}"
        )
