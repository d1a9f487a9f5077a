from __future__ import annotations

import logging

import numpy as np

from ..models.image import ImageBuffer
from ..models.color_space import ColorSpace
from ..models.settings import ToneMapSettings
from .pixel_math import filmic, encode_gamma, truncate_to_byte

logger = logging.getLogger(__name__)

# Stand-in for overflowed linear values; large enough to saturate every curve,
# small enough that filmic's x * x stays finite.
_LINEAR_CEILING = 1e30


class ToneMapService:
    """
    Maps HDR (float) buffers to LDR (byte) buffers.
    *   No I/O here—works only with ImageBuffer objects.
    *   Every pixel is handled independently, so the whole image is processed
        as one numpy expression.
    """

    def __init__(self, settings: ToneMapSettings | None = None):
        self.settings = settings or ToneMapSettings.from_env()

    def tonemap(self, hdr: ImageBuffer, settings: ToneMapSettings | None = None) -> ImageBuffer:
        """
        Args:
            hdr: Float image; values may exceed 1.0.
            settings: Overrides the service defaults for this call.

        Returns:
            ImageBuffer: New byte image with the same width and height.
        """
        settings = settings or self.settings
        if not hdr.is_hdr:
            raise TypeError("tonemap expects an HDR (float32) ImageBuffer")

        pixels = hdr.pixels.astype(np.float64)
        alpha = pixels[..., 3:]

        # Any real exposure is accepted; overflow saturates instead of raising.
        with np.errstate(over="ignore", invalid="ignore"):
            rgb = pixels[..., :3] * np.exp2(settings.exposure)
        rgb = np.nan_to_num(rgb, nan=0.0, posinf=_LINEAR_CEILING, neginf=-_LINEAR_CEILING)

        if settings.use_filmic:
            rgb = filmic(rgb)

        if settings.color_space is ColorSpace.SRGB:
            rgb = encode_gamma(rgb)

        rgb = np.clip(rgb, 0.0, 1.0)

        # Alpha is passed through unclamped; only the byte store saturates it.
        out_of_range = int(np.count_nonzero((alpha < 0.0) | (alpha > 1.0)))
        if out_of_range:
            logger.warning(f"{out_of_range} pixel(s) have alpha outside [0, 1]; byte output saturates")

        out = truncate_to_byte(np.concatenate([rgb, alpha], axis=-1))
        logger.debug(
            f"Tonemapped {hdr.width}x{hdr.height} | exposure={settings.exposure} "
            f"filmic={settings.use_filmic} space={settings.color_space.value}"
        )
        return ImageBuffer(out)


def tonemap(
    hdr: ImageBuffer,
    exposure: float = 0.0,
    use_filmic: bool = False,
    color_space: ColorSpace = ColorSpace.SRGB,
) -> ImageBuffer:
    """Functional form of ToneMapService.tonemap."""
    settings = ToneMapSettings(exposure=exposure, use_filmic=use_filmic, color_space=color_space)
    return ToneMapService(settings).tonemap(hdr)
