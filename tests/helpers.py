from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
from PIL import Image as PILImage

from hdrtools.models.image import ImageBuffer


def ldr(*rows) -> ImageBuffer:
    """Byte buffer from rows of RGBA tuples."""
    return ImageBuffer(np.array(rows, dtype=np.uint8))


def hdr(*rows) -> ImageBuffer:
    """Float buffer from rows of RGBA tuples."""
    return ImageBuffer(np.array(rows, dtype=np.float32))


def write_png(path: Path, pixels) -> Path:
    PILImage.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path)
    return path


def write_hdr(path: Path, rgb) -> Path:
    """Write an (H, W, 3) float RGB array as a Radiance file."""
    bgr = np.ascontiguousarray(np.asarray(rgb, dtype=np.float32)[:, :, ::-1])
    assert cv2.imwrite(str(path), bgr)
    return path
