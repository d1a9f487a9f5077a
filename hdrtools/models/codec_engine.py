from __future__ import annotations
import logging
import os

import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class CodecEngine:
    """
    Singleton holding the one-time setup of the image codecs (OpenCV + Pillow).

    Also carries the constants used when a file's storage type differs from the
    requested buffer type (8-bit file loaded as float, Radiance file loaded as bytes).
    Nothing is configured until the driver calls initialize().
    """

    _instance: CodecEngine | None = None  # Class-level cache for singleton

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
            cls._instance._reset_defaults()
        return cls._instance

    def _reset_defaults(self) -> None:
        self.ldr_to_hdr_gamma = 2.2
        self.ldr_to_hdr_scale = 1.0
        self.hdr_to_ldr_gamma = 1.0 / 2.2
        self.hdr_to_ldr_scale = 1.0
        self.num_threads = 0

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, num_threads: int | None = None) -> CodecEngine:
        """
        Configure OpenCV and Pillow. Safe to call more than once; only the
        first call has any effect.

        Args:
            num_threads: OpenCV worker threads (0 = OpenCV default). Defaults to env var.
        """
        if self._initialized:
            return self

        if num_threads is None:
            num_threads = int(os.getenv("CODEC_NUM_THREADS", "0"))
        self.num_threads = num_threads
        self.ldr_to_hdr_gamma = float(os.getenv("LDR_TO_HDR_GAMMA", "2.2"))
        self.hdr_to_ldr_gamma = float(os.getenv("HDR_TO_LDR_GAMMA", str(1.0 / 2.2)))

        if num_threads > 0:
            cv2.setNumThreads(num_threads)
        PILImage.init()  # register every Pillow plugin up front

        self._initialized = True
        logger.info(f"Codecs ready: OpenCV {cv2.__version__} | threads: {num_threads or 'default'}")
        return self
