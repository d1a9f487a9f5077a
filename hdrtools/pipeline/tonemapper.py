"""
Tonemap Pipeline
Loads an HDR file, maps it to 8-bit and writes the result.
"""
from __future__ import annotations

from pathlib import Path

from ..models.image import ImageBuffer
from ..models.settings import ToneMapSettings
from ..services.image_service import ImageService
from ..services.tonemap_service import ToneMapService


def tonemap_file(
    input_path: str | Path,
    output_path: str | Path,
    settings: ToneMapSettings | None = None,
    *,
    image_service: ImageService | None = None,
    tonemap_service: ToneMapService | None = None,
) -> ImageBuffer:
    """
    Args:
        input_path: Any file OpenCV decodes; 8-bit files are linearised on load.
        output_path: Destination of the byte image (PNG).
        settings: Exposure / filmic / colour space; defaults come from the environment.
        image_service: Service for file I/O
        tonemap_service: Service doing the HDR → LDR mapping

    Returns:
        ImageBuffer: The tonemapped image, with path set to output_path.
    """
    image_service = image_service or ImageService()
    tonemap_service = tonemap_service or ToneMapService()

    hdr = image_service.load_hdr(input_path)
    ldr = tonemap_service.tonemap(hdr, settings).with_path(Path(output_path))
    image_service.save(ldr)
    return ldr
