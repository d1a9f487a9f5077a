from pathlib import Path
from typing import Iterable, List, Union
import logging

import numpy as np

from ..models.codec_engine import CodecEngine
from ..models.image import ImageBuffer
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O helpers.  No tone or blend logic here."""

    def __init__(self, engine: CodecEngine | None = None):
        self.image_repository = ImageRepository(engine)

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> ImageBuffer:
        return self.image_repository.create_image(pixels, path)

    def load_hdr(self, path: Union[str, Path]) -> ImageBuffer:
        """Load a single image from disk as a float (HDR) buffer."""
        return self.image_repository.load_float(path)

    def load_ldr(self, path: Union[str, Path]) -> ImageBuffer:
        """Load a single image from disk as a byte (LDR) buffer."""
        return self.image_repository.load_bytes(path)

    def load_layers(self, paths: Iterable[Union[str, Path]]) -> List[ImageBuffer]:
        """
        Load compositing layers in the given order (first = bottom).
        Any unreadable file aborts the whole load.
        """
        layers = [self.load_ldr(p) for p in paths]
        logger.debug(f"Loaded {len(layers)} layer(s)")
        return layers

    def save(self, image: ImageBuffer, path: Union[str, Path] = None) -> Path:
        """
        Business-level method to save the image, to *path* or to image.path.
        """
        return self.image_repository.save(image, path)
