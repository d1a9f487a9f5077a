"""HDR → LDR tonemapping and LDR layer compositing."""
from .exceptions import (
    HdrToolsError,
    ImageCodecError,
    ImageDecodeError,
    ImageEncodeError,
    LayerSizeMismatchError,
)
from .models.codec_engine import CodecEngine
from .models.color_space import ColorSpace
from .models.image import ImageBuffer
from .models.settings import CompositeSettings, ToneMapSettings
from .services.compositor_service import CompositorService, compose
from .services.tonemap_service import ToneMapService, tonemap

__version__ = "1.0.0"
