from pathlib import Path
from typing import Union
import logging
import os
import signal
import threading

import cv2
import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..exceptions import ImageCodecError, ImageDecodeError, ImageEncodeError
from ..models.codec_engine import CodecEngine
from ..models.image import ImageBuffer

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

HDR_EXTS = {".hdr", ".pic"}


class ImageRepository:
    """
    Handles file I/O for ImageBuffer entities.

    Reading goes through OpenCV (it decodes both Radiance and 8/16-bit files),
    byte images are written with Pillow, float images with OpenCV.
    """

    def __init__(self, engine: CodecEngine | None = None):
        self.engine = engine or CodecEngine()
        self.read_timeout = int(os.getenv("IMAGE_READ_TIMEOUT", "5"))

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> ImageBuffer:
        if path is None:
            return ImageBuffer(pixels)
        return ImageBuffer(pixels=pixels, path=Path(path))

    # ─── Reading ─────────────────────────────────────────────────────
    def load_float(self, path: Union[str, Path]) -> ImageBuffer:
        """Decode any supported file into an HDR buffer."""
        path = Path(path)
        arr = self._read_rgba(path)

        if np.issubdtype(arr.dtype, np.floating):
            pixels = arr.astype(np.float32)
        else:
            unit = arr.astype(np.float64) / np.iinfo(arr.dtype).max
            pixels = np.empty(unit.shape, dtype=np.float32)
            pixels[..., :3] = np.power(unit[..., :3], self.engine.ldr_to_hdr_gamma) * self.engine.ldr_to_hdr_scale
            pixels[..., 3] = unit[..., 3]

        logger.info(f"Loaded HDR {path.name} ({pixels.shape[1]}x{pixels.shape[0]})")
        return ImageBuffer(pixels=pixels, path=path)

    def load_bytes(self, path: Union[str, Path]) -> ImageBuffer:
        """Decode any supported file into an LDR buffer."""
        path = Path(path)
        arr = self._read_rgba(path)

        if arr.dtype == np.uint8:
            pixels = arr
        elif np.issubdtype(arr.dtype, np.floating):
            hdr = arr.astype(np.float64)
            scaled = np.empty(hdr.shape, dtype=np.float64)
            rgb = np.maximum(hdr[..., :3] * self.engine.hdr_to_ldr_scale, 0.0)
            scaled[..., :3] = np.power(rgb, self.engine.hdr_to_ldr_gamma) * 255.0 + 0.5
            scaled[..., 3] = hdr[..., 3] * 255.0 + 0.5
            pixels = np.clip(scaled, 0.0, 255.0).astype(np.uint8)
        else:
            # keep the high byte of wider integer samples
            shift = (arr.dtype.itemsize - 1) * 8
            pixels = (arr >> shift).astype(np.uint8)

        logger.info(f"Loaded LDR {path.name} ({pixels.shape[1]}x{pixels.shape[0]})")
        return ImageBuffer(pixels=pixels, path=path)

    def _read_rgba(self, path: Path) -> np.ndarray:
        """Read a file with OpenCV and return RGBA samples in the file's own dtype."""
        self._require_engine()
        if not path.is_file():
            raise FileNotFoundError(f"Image not found: {path}")

        arr = self._imread(path)
        if arr is None:
            raise ImageDecodeError(f"Image unreadable: {path}")

        opaque = 1.0 if np.issubdtype(arr.dtype, np.floating) else np.iinfo(arr.dtype).max

        if arr.ndim == 2:
            arr = np.repeat(arr[:, :, None], 3, axis=2)
        elif arr.ndim == 3 and arr.shape[2] in (3, 4):
            order = [2, 1, 0] if arr.shape[2] == 3 else [2, 1, 0, 3]
            arr = arr[:, :, order]
        else:
            raise ImageDecodeError(f"Unsupported channel layout {arr.shape} in {path}")

        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), opaque, dtype=arr.dtype)
            arr = np.concatenate([arr, alpha], axis=2)
        return np.ascontiguousarray(arr)

    def _imread(self, path: Path):
        timeout = self.read_timeout

        # ─── timeout wrapper ─────────────────────────────────────────────
        def _handler(signum, frame):
            raise TimeoutError(f"cv2.imread timed-out after {timeout}s: {path}")

        # SIGALRM handlers can only be installed from the main thread
        if (
            timeout <= 0
            or not hasattr(signal, "SIGALRM")
            or threading.current_thread() is not threading.main_thread()
        ):
            return self._decode(path)

        previous = signal.signal(signal.SIGALRM, _handler)
        signal.alarm(timeout)
        try:
            return self._decode(path)
        finally:
            signal.alarm(0)  # always disarm
            signal.signal(signal.SIGALRM, previous)

    @staticmethod
    def _decode(path: Path):
        try:
            return cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        except cv2.error as err:
            raise ImageDecodeError(f"Image unreadable: {path}") from err

    # ─── Writing ─────────────────────────────────────────────────────
    def save(self, image: ImageBuffer, path: Union[str, Path] = None) -> Path:
        """Write float buffers as Radiance HDR and byte buffers via Pillow (PNG)."""
        self._require_engine()
        path = Path(path) if path is not None else image.path
        if path is None:
            raise ImageEncodeError("No output path given and image has no path")
        if image.is_empty:
            raise ImageEncodeError(f"Cannot encode an empty image: {path}")

        if image.is_hdr:
            self._save_hdr(image, path)
        else:
            self._save_ldr(image, path)

        logger.info(f"Saved {path.name} ({image.width}x{image.height})")
        return path

    @staticmethod
    def _save_hdr(image: ImageBuffer, path: Path) -> None:
        if path.suffix.lower() not in HDR_EXTS:
            raise ImageEncodeError(f"HDR images are written as Radiance (.hdr), got {path.suffix!r}")

        # Radiance has no alpha channel
        bgr = np.ascontiguousarray(image.pixels[:, :, 2::-1])
        try:
            success = cv2.imwrite(str(path), bgr)
        except cv2.error as err:
            raise ImageEncodeError(f"Failed to write {path}") from err
        if not success:
            raise ImageEncodeError(f"Failed to write {path}")

    @staticmethod
    def _save_ldr(image: ImageBuffer, path: Path) -> None:
        try:
            PILImage.fromarray(np.ascontiguousarray(image.pixels)).save(path)
        except (OSError, ValueError, KeyError) as err:
            raise ImageEncodeError(f"Failed to write {path}: {err}") from err

    def _require_engine(self) -> None:
        if not self.engine.initialized:
            raise ImageCodecError("Codec engine not initialized; call CodecEngine().initialize() first")
