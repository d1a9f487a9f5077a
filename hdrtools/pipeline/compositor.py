# pipeline/compositor.py
from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..models.image import ImageBuffer
from ..models.settings import CompositeSettings
from ..services.compositor_service import CompositorService
from ..services.image_service import ImageService


def compose_files(
    input_paths: Sequence[str | Path],
    output_path: str | Path,
    settings: CompositeSettings | None = None,
    *,
    image_service: ImageService | None = None,
    compositor_service: CompositorService | None = None,
) -> ImageBuffer:
    """
    Stack every file in *input_paths* (first = bottom) and write the result:
        • load each file as a byte layer
        • blend them with the "over" operator
        • save the flattened image to *output_path*
    """
    if not input_paths:
        raise ValueError("compose_files needs at least one input image")

    image_service = image_service or ImageService()
    compositor_service = compositor_service or CompositorService()

    layers = image_service.load_layers(input_paths)
    result = compositor_service.compose(layers, settings).with_path(Path(output_path))
    image_service.save(result)
    return result
