from __future__ import annotations
from dataclasses import dataclass
import os

from dotenv import load_dotenv

from .color_space import ColorSpace

# Load environment variables
load_dotenv()


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ToneMapSettings:
    """
    Value-object holding the HDR → LDR conversion parameters.
    exposure is in stops: pixels are scaled by 2 ** exposure.
    """
    exposure: float = 0.0
    use_filmic: bool = False
    color_space: ColorSpace = ColorSpace.SRGB

    @classmethod
    def from_env(cls) -> ToneMapSettings:
        return cls(
            exposure=float(os.getenv("DEFAULT_EXPOSURE", "0.0")),
            use_filmic=env_flag("DEFAULT_USE_FILMIC"),
            color_space=ColorSpace.from_no_srgb(env_flag("DEFAULT_NO_SRGB")),
        )


@dataclass(frozen=True)
class CompositeSettings:
    """
    Value-object holding the layer compositing parameters.
    premultiplied tells whether the input layers already store rgb * alpha.
    """
    premultiplied: bool = False
    color_space: ColorSpace = ColorSpace.SRGB

    @classmethod
    def from_env(cls) -> CompositeSettings:
        return cls(
            premultiplied=env_flag("DEFAULT_PREMULTIPLIED"),
            color_space=ColorSpace.from_no_srgb(env_flag("DEFAULT_NO_SRGB")),
        )
