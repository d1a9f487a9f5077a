from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from tqdm import tqdm
from dotenv import load_dotenv

from ..exceptions import LayerSizeMismatchError
from ..models.image import ImageBuffer
from ..models.color_space import ColorSpace
from ..models.settings import CompositeSettings, env_flag
from .pixel_math import byte_to_unit, decode_gamma, encode_gamma, truncate_to_byte

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class CompositorService:
    """
    Stacks LDR layers with the "over" operator, bottom layer first.

    Blending always happens on linear values: sRGB bytes are decoded before the
    blend and re-encoded after it. The accumulator is treated as premultiplied;
    only incoming layers are premultiplied on request.
    """

    def __init__(self, settings: CompositeSettings | None = None, show_progress: bool | None = None):
        self.settings = settings or CompositeSettings.from_env()
        if show_progress is None:
            show_progress = env_flag("SHOW_PROGRESS")
        self.show_progress = show_progress

    # ─── Public API ────────────────────────────────────────────────
    def compose(
        self,
        layers: Sequence[ImageBuffer],
        settings: CompositeSettings | None = None,
    ) -> ImageBuffer:
        settings = settings or self.settings
        if len(layers) == 0:
            return ImageBuffer.empty()

        self._check_layers(layers)
        width, height = layers[0].size

        acc = np.zeros((height, width, 4), dtype=np.uint8)
        for i, layer in enumerate(tqdm(layers, desc="compose", ncols=70, disable=not self.show_progress)):
            acc = self._blend_over(layer.pixels, acc, settings)
            logger.debug(f"Blended layer {i + 1}/{len(layers)}")

        return ImageBuffer(acc)

    # ─── Internal helpers ──────────────────────────────────────────
    @staticmethod
    def _check_layers(layers: Sequence[ImageBuffer]) -> None:
        expected = layers[0].size
        for i, layer in enumerate(layers):
            if layer.is_hdr:
                raise TypeError(f"layer {i} is an HDR buffer; compose expects byte layers")
            if layer.size != expected:
                raise LayerSizeMismatchError(i, expected, layer.size)

    @staticmethod
    def _blend_over(above_u8: np.ndarray, below_u8: np.ndarray, settings: CompositeSettings) -> np.ndarray:
        above = byte_to_unit(above_u8)
        below = byte_to_unit(below_u8)
        srgb = settings.color_space is ColorSpace.SRGB

        if srgb:
            above[..., :3] = decode_gamma(above[..., :3])
            below[..., :3] = decode_gamma(below[..., :3])

        if not settings.premultiplied:
            above[..., :3] *= above[..., 3:]

        # One, OneMinusSrcAlpha
        result = above + below * (1.0 - above[..., 3:])

        if srgb:
            result[..., :3] = encode_gamma(result[..., :3])

        return truncate_to_byte(result)


def compose(
    layers: Sequence[ImageBuffer],
    premultiplied: bool = False,
    color_space: ColorSpace = ColorSpace.SRGB,
) -> ImageBuffer:
    """Functional form of CompositorService.compose."""
    settings = CompositeSettings(premultiplied=premultiplied, color_space=color_space)
    return CompositorService(settings, show_progress=False).compose(layers)
