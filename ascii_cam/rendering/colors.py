#!/usr/bin/env python3
# ascii_cam/rendering/colors.py
"""
Color transform modes.

color_for() turns a block sample into the RGB used to draw its glyph.
Every mode is a pure function of (sample, x, y, frame_counter) except
GLITCH, which draws from the random source passed in by the caller.
Intermediate math is float; outputs are truncated and clamped to 0..255.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Sequence, Tuple

from ascii_cam.rendering.palettes import next_member
from ascii_cam.rendering.sampler import BlockSample

__all__ = [
    "RGB",
    "ColorMode",
    "color_for",
    "hsv_to_rgb",
    "next_mode",
    "RAINBOW_PERIOD",
    "rainbow_hue",
]

RGB = Tuple[int, int, int]


class ColorMode(str, Enum):
    STANDARD = "standard"
    GRAYSCALE = "grayscale"
    MATRIX = "matrix"
    THERMAL = "thermal"
    AMBER = "amber"
    NEON = "neon"
    RAINBOW = "rainbow"
    CGA = "cga"
    GLITCH = "glitch"


def next_mode(mode: ColorMode) -> ColorMode:
    return next_member(ColorMode(mode))


# Neon ramp stops: deep purple, purple, hot pink, cyan (85 luminance steps apart)
_NEON_STOPS: Sequence[RGB] = (
    (40, 0, 60),
    (150, 0, 220),
    (255, 20, 147),
    (0, 255, 255),
)
_NEON_SEGMENT = 85.0

_CGA_BUCKETS: Sequence[Tuple[float, RGB]] = (
    (50.0, (0, 0, 0)),
    (120.0, (255, 0, 255)),
    (190.0, (0, 255, 255)),
)
_CGA_WHITE: RGB = (255, 255, 255)

GLITCH_COLOR_PROBABILITY = 0.05
GLITCH_SHIFT = 10


def _c8(v: float) -> int:
    if v != v:  # NaN
        return 0
    return max(0, min(255, int(v)))


def _rgb(r: float, g: float, b: float) -> RGB:
    return _c8(r), _c8(g), _c8(b)


def _level(lum: float) -> int:
    return _c8(lum + 0.5)


def _blend(a: RGB, b: RGB, t: float) -> RGB:
    t = max(0.0, min(1.0, t))
    return _rgb(*(ca + (cb - ca) * t for ca, cb in zip(a, b)))


def _thermal(lum: float) -> RGB:
    # blue -> cyan -> green -> yellow -> red
    if lum < 64.0:
        return _rgb(0, 255.0 * lum / 64.0, 255)
    if lum < 128.0:
        return _rgb(0, 255, 255.0 * (1.0 - (lum - 64.0) / 64.0))
    if lum < 192.0:
        return _rgb(255.0 * (lum - 128.0) / 64.0, 255, 0)
    return _rgb(255, 255.0 * (1.0 - min(1.0, (lum - 192.0) / 63.0)), 0)


def _neon(lum: float) -> RGB:
    segment = min(int(lum // _NEON_SEGMENT), len(_NEON_STOPS) - 2)
    start = segment * _NEON_SEGMENT
    return _blend(_NEON_STOPS[segment], _NEON_STOPS[segment + 1], (lum - start) / _NEON_SEGMENT)


def _cga(lum: float) -> RGB:
    for threshold, color in _CGA_BUCKETS:
        if lum < threshold:
            return color
    return _CGA_WHITE


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """Hue in degrees, saturation and value in [0, 1]."""
    h = h % 360.0
    c = v * s
    x = c * (1.0 - abs(((h / 60.0) % 2.0) - 1.0))
    m = v - c
    sector = int(h // 60.0)
    if sector == 0:
        r, g, b = c, x, 0.0
    elif sector == 1:
        r, g, b = x, c, 0.0
    elif sector == 2:
        r, g, b = 0.0, c, x
    elif sector == 3:
        r, g, b = 0.0, x, c
    elif sector == 4:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x
    return _rgb((r + m) * 255.0, (g + m) * 255.0, (b + m) * 255.0)


RAINBOW_PERIOD = 72  # frames per full hue cycle at 5 degrees per frame


def rainbow_hue(x: int, y: int, frame_counter: int) -> int:
    return (2 * x + 4 * y + 5 * frame_counter) % 360


def _glitch(sample: BlockSample, rng: random.Random) -> RGB:
    if rng.random() < GLITCH_COLOR_PROBABILITY:
        return rng.randrange(256), rng.randrange(256), rng.randrange(256)
    return (sample.r + GLITCH_SHIFT) % 256, sample.g, (sample.b + GLITCH_SHIFT) % 256


def color_for(
    sample: BlockSample,
    mode: ColorMode,
    x: int,
    y: int,
    frame_counter: int,
    rng: random.Random,
) -> RGB:
    mode = ColorMode(mode)
    lum = sample.luminance
    if mode is ColorMode.STANDARD:
        return sample.r, sample.g, sample.b
    if mode is ColorMode.GRAYSCALE:
        l = _level(lum)
        return l, l, l
    if mode is ColorMode.MATRIX:
        return 0, _level(lum), 0
    if mode is ColorMode.AMBER:
        l = _level(lum)
        return _rgb(l, 0.69 * l, 0)
    if mode is ColorMode.THERMAL:
        return _thermal(lum)
    if mode is ColorMode.NEON:
        return _neon(lum)
    if mode is ColorMode.RAINBOW:
        return hsv_to_rgb(rainbow_hue(x, y, frame_counter), 1.0, 1.0)
    if mode is ColorMode.CGA:
        return _cga(lum)
    if mode is ColorMode.GLITCH:
        return _glitch(sample, rng)
    raise ValueError(f"unknown color mode: {mode!r}")
