from __future__ import annotations
from enum import Enum


class ColorSpace(Enum):
    """Encoding of the byte (LDR) side of a conversion."""
    LINEAR = "linear"
    SRGB = "srgb"

    @classmethod
    def from_no_srgb(cls, no_srgb: bool) -> ColorSpace:
        """Map the command-line ``--no-srgb`` switch onto a colour space."""
        return cls.LINEAR if no_srgb else cls.SRGB
