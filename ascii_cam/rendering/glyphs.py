#!/usr/bin/env python3
# ascii_cam/rendering/glyphs.py
"""Luminance to glyph-index mapping."""

from __future__ import annotations

import math

import numpy as np

__all__ = ["map_luminance", "map_luminance_array"]


def map_luminance(luminance: float, charset_len: int) -> int:
    """
    Index into a charset of charset_len glyphs for a luminance in [0, 255].
    Uses floor((lum / 256) * n), which splits the range into n equal bands.
    """
    if charset_len < 1:
        raise ValueError("charset must contain at least one glyph")
    index = math.floor((luminance / 256.0) * charset_len)
    return min(max(index, 0), charset_len - 1)


def map_luminance_array(lum: np.ndarray, charset_len: int) -> np.ndarray:
    """Vectorized map_luminance over a luminance array."""
    if charset_len < 1:
        raise ValueError("charset must contain at least one glyph")
    idx = np.floor((np.asarray(lum, dtype=np.float64) / 256.0) * charset_len)
    return np.clip(idx, 0, charset_len - 1).astype(np.int64)
