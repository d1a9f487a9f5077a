"""
Per-channel numeric helpers shared by the tonemapper and the compositor.

Every function takes a scalar or a numpy array and gives back the same kind,
so the services can run them over whole images at once.
"""
from __future__ import annotations

import numpy as np

GAMMA = 2.2
INVERSE_GAMMA = 1.0 / GAMMA

# Absorbs float error so that b / 255 * 255 truncates back to b.
_TRUNCATE_EPS = 1e-6


def _like_input(x, result):
    if np.ndim(x) == 0:
        return result.item()
    return result


def filmic(x):
    """
    Filmic tone curve (2.51x² + 0.03x) / (2.43x² + 0.59x + 0.14).
    Not clamped: results may leave [0, 1].
    """
    x = np.asarray(x, dtype=np.float64) if np.ndim(x) else float(x)
    num = 2.51 * x * x + 0.03 * x
    den = 2.43 * x * x + 0.59 * x + 0.14
    return num / den


def byte_to_unit(b):
    """Byte channel(s) in [0, 255] → float in [0, 1]."""
    return _like_input(b, np.asarray(b, dtype=np.float64) / 255.0)


def unit_to_byte(f):
    """Float channel(s) → nearest byte; values outside [0, 1] are clamped first."""
    scaled = np.clip(np.asarray(f, dtype=np.float64), 0.0, 1.0) * 255.0
    result = np.rint(scaled).astype(np.uint8)
    return int(result) if np.ndim(f) == 0 else result


def truncate_to_byte(f):
    """
    Scale by 255 and drop the fraction, saturating at the byte range.
    This is the float → byte store used for tonemap and compose output.
    """
    scaled = np.floor(np.asarray(f, dtype=np.float64) * 255.0 + _TRUNCATE_EPS)
    result = np.clip(scaled, 0.0, 255.0).astype(np.uint8)
    return int(result) if np.ndim(f) == 0 else result


def encode_gamma(f):
    """Linear → gamma-encoded, f ** (1/2.2). Negatives map to 0."""
    return _like_input(f, np.power(np.maximum(np.asarray(f, dtype=np.float64), 0.0), INVERSE_GAMMA))


def decode_gamma(f):
    """Gamma-encoded → linear, f ** 2.2. Negatives map to 0."""
    return _like_input(f, np.power(np.maximum(np.asarray(f, dtype=np.float64), 0.0), GAMMA))
