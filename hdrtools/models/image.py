from __future__ import annotations
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Tuple
import numpy as np


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """
    Simple data object: RGBA pixels (+ optional path for bookkeeping).

    HDR buffers hold float32 pixels (unclamped), LDR buffers hold uint8 pixels.
    The buffer owns a private, read-only copy of its pixels and cannot be
    rebound after construction; use with_path() for a relabelled copy.
    """
    pixels: np.ndarray  # Shape (H, W, 4), dtype float32 (HDR) or uint8 (LDR), row-major.
    path: Path | None = None  # Source or destination of the image.

    def __post_init__(self):
        arr = np.asarray(self.pixels)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"Expected pixels of shape (H, W, 4), got {arr.shape}")

        if np.issubdtype(arr.dtype, np.floating):
            arr = arr.astype(np.float32, copy=True)
        elif arr.dtype == np.uint8:
            arr = arr.copy()
        else:
            raise TypeError(f"Unsupported pixel dtype {arr.dtype}; use float32 or uint8")

        arr.flags.writeable = False
        object.__setattr__(self, "pixels", arr)
        if self.path is not None:
            object.__setattr__(self, "path", Path(self.path))

    def with_path(self, path: Path | str | None) -> ImageBuffer:
        """Same pixels, different bookkeeping path."""
        return replace(self, path=path)

    # ── Constructors ─────────────────────────────────────────────────
    @classmethod
    def blank(cls, width: int, height: int, hdr: bool = False) -> ImageBuffer:
        """All-zero (transparent black) buffer of the given size."""
        if width < 0 or height < 0:
            raise ValueError(f"Invalid size {width}x{height}")
        dtype = np.float32 if hdr else np.uint8
        return cls(np.zeros((height, width, 4), dtype=dtype))

    @classmethod
    def empty(cls, hdr: bool = False) -> ImageBuffer:
        """The 0x0 buffer, meaning "no image"."""
        return cls.blank(0, 0, hdr=hdr)

    # ── Shape ────────────────────────────────────────────────────────
    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def is_hdr(self) -> bool:
        return self.pixels.dtype == np.float32

    @property
    def is_empty(self) -> bool:
        return self.width * self.height == 0

    def __len__(self) -> int:
        return self.width * self.height

    # ── Bounds-checked access ────────────────────────────────────────
    def pixel(self, row: int, col: int) -> tuple:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"Pixel ({row}, {col}) outside {self.width}x{self.height} image")
        return tuple(self.pixels[row, col].tolist())

    def pixel_at(self, offset: int) -> tuple:
        """Pixel at a row-major linear offset."""
        if not 0 <= offset < len(self):
            raise IndexError(f"Offset {offset} outside image of {len(self)} pixels")
        row, col = divmod(offset, self.width)
        return self.pixel(row, col)
